"""Translation of domain errors into HTTP errors."""

from fastapi import HTTPException, status

from tenantgate.core.exceptions import (
    ConflictError,
    NotFoundError,
    TenantGateError,
    ValidationError,
)
from tenantgate.core.logging import get_logger

logger = get_logger(__name__)


def to_http_exception(exc: TenantGateError) -> HTTPException:
    """Map a domain error to the HTTPException a router should raise.

    Args:
        exc: Error raised by a domain service.

    Returns:
        HTTPException with 404 for not-found, 409 for conflicts and 422 for
        other validation failures.
    """
    if isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, ConflictError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, ValidationError):
        status_code = status.HTTP_422_UNPROCESSABLE_CONTENT
    else:
        status_code = status.HTTP_400_BAD_REQUEST

    logger.info(
        "Request rejected",
        status_code=status_code,
        error_type=type(exc).__name__,
        error=exc.message,
    )
    return HTTPException(status_code=status_code, detail=exc.message)
