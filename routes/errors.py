from fastapi import HTTPException, status

import metrics
from services.errors import ServiceError, NotFoundError, ConflictError


def http_error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"error": {"code": code, "message": message}}
    )


def from_service_error(e: ServiceError) -> HTTPException:
    metrics.BUSINESS_ERRORS.labels(e.code).inc()
    if isinstance(e, NotFoundError):
        return http_error(status.HTTP_404_NOT_FOUND, e.code, e.message)
    if isinstance(e, ConflictError):
        return http_error(status.HTTP_409_CONFLICT, e.code, e.message)
    return internal_error()


def internal_error() -> HTTPException:
    return http_error(status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", "internal server error")
