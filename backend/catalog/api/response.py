import uuid
from collections.abc import Sequence

from fastapi import Request


def envelope(request: Request, data: dict | list | None, error: dict | None = None) -> dict:
    request_id = getattr(request.state, "request_id", None) or str(uuid.uuid4())
    return {
        "data": data,
        "meta": {
            "request_id": request_id,
            "tenant_id": getattr(request.state, "tenant_id", None),
        },
        "error": error,
    }


def collection_envelope(request: Request, rows: Sequence[dict]) -> dict:
    payload = envelope(request, list(rows))
    payload["meta"]["count"] = len(rows)
    return payload


def exception_envelope(request: Request, status_code: int, message: str, code: str, details: dict | None = None) -> dict:
    request_id = getattr(request.state, "request_id", None) or str(uuid.uuid4())
    return {
        "success": False,
        "message": message,
        "errors": [{"code": code, "message": message, "details": details or {}}],
        "meta": {
            "request_id": request_id,
            "tenant_id": getattr(request.state, "tenant_id", None),
            "status_code": status_code,
        },
    }
