from fastapi import HTTPException, status

from catalog.providers.errors import TopologyError
from catalog.services.errors import NotFoundError, ValidationError


def not_found(exc: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")


def unprocessable(exc: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail={"message": exc.message, "reason_code": "validation_failed", "errors": exc.errors},
    )


def topology_failure(exc: TopologyError, status_code: int) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"message": str(exc), "reason_code": exc.reason_code, "error_code": exc.error_code},
    )
