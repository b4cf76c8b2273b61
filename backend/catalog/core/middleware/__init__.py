from catalog.core.middleware.metrics import MetricsMiddleware
from catalog.core.middleware.request_logging import RequestLoggingMiddleware
from catalog.core.middleware.request_size_limit import RequestSizeLimitMiddleware

__all__ = [
    "MetricsMiddleware",
    "RequestLoggingMiddleware",
    "RequestSizeLimitMiddleware",
]
