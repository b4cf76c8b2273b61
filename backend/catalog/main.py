import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from catalog.api.response import exception_envelope
from catalog.api.v1.router import build_api_router
from catalog.core.config import get_settings
from catalog.core.logging_config import configure_logging
from catalog.core.metrics import render_metrics
from catalog.core.middleware import MetricsMiddleware, RequestLoggingMiddleware, RequestSizeLimitMiddleware

settings = get_settings()
configure_logging(log_level=settings.log_level, app_env=settings.app_env)
logger = logging.getLogger("catalog.api")

app = FastAPI(title=settings.app_name)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(RequestSizeLimitMiddleware, max_request_body_bytes=settings.max_request_body_bytes)
app.add_middleware(MetricsMiddleware)
app.include_router(build_api_router(), prefix=settings.api_v1_prefix)

if settings.metrics_enabled:
    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        payload, content_type = render_metrics()
        return Response(content=payload, media_type=content_type)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    details: dict[str, object] = exc.detail if isinstance(exc.detail, dict) else {}
    if isinstance(exc.detail, str):
        message = exc.detail
    else:
        message = str(details.get("message", "Request failed"))
    payload = exception_envelope(
        request=request,
        status_code=exc.status_code,
        message=message,
        code=str(details.get("reason_code", f"http_{exc.status_code}")),
        details=details,
    )
    return JSONResponse(status_code=exc.status_code, content=payload, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    payload = exception_envelope(
        request=request,
        status_code=422,
        message="Validation failed",
        code="validation_error",
        details={"errors": exc.errors()},
    )
    return JSONResponse(status_code=422, content=payload)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled exception", exc_info=exc)
    payload = exception_envelope(
        request=request,
        status_code=500,
        message="Internal server error",
        code="internal_server_error",
    )
    return JSONResponse(status_code=500, content=payload)
