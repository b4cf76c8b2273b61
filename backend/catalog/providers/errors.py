from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx


@dataclass(frozen=True)
class ErrorClassification:
    error_code: str
    reason_code: str
    retryable: bool


class TopologyError(Exception):
    """Failure talking to the topology service. Callers treat it as opaque."""

    def __init__(
        self,
        message: str,
        *,
        error_code: str = "topology_error",
        reason_code: str = "internal_error",
        retryable: bool = False,
        status_code: int | None = None,
        upstream_payload: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.reason_code = reason_code
        self.retryable = retryable
        self.status_code = status_code
        self.upstream_payload = upstream_payload


def classification_from_exception(exc: Exception) -> ErrorClassification:
    if isinstance(exc, TopologyError):
        return ErrorClassification(exc.error_code, exc.reason_code, exc.retryable)
    if isinstance(exc, TimeoutError | httpx.TimeoutException):
        return ErrorClassification("topology_timeout", "timeout", True)
    if isinstance(exc, ConnectionError | httpx.ConnectError):
        return ErrorClassification("topology_connection", "connection_error", True)
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code if exc.response is not None else 0
        if status_code in {401, 403}:
            return ErrorClassification("topology_auth", "auth_failed", False)
        if status_code == 404:
            return ErrorClassification("topology_not_found", "not_found", False)
        if status_code == 429:
            return ErrorClassification("topology_rate_limited", "rate_limited", True)
        if 400 <= status_code < 500:
            return ErrorClassification("topology_bad_request", "bad_request", False)
        if status_code >= 500:
            return ErrorClassification("topology_unavailable", "dependency_unavailable", True)
    if isinstance(exc, httpx.HTTPError):
        return ErrorClassification("topology_unavailable", "dependency_unavailable", True)
    return ErrorClassification("topology_error", "internal_error", False)


def to_topology_error(exc: Exception, message: str | None = None) -> TopologyError:
    if isinstance(exc, TopologyError):
        return exc
    classification = classification_from_exception(exc)
    status_code = None
    if isinstance(exc, httpx.HTTPStatusError) and exc.response is not None:
        status_code = exc.response.status_code
    return TopologyError(
        message or str(exc) or classification.reason_code,
        error_code=classification.error_code,
        reason_code=classification.reason_code,
        retryable=classification.retryable,
        status_code=status_code,
    )
