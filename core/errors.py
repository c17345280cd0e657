"""
Error taxonomy shared by services and routers.

Every error carries the HTTP status the API answers with, so routers never
inspect error names or messages. ``StorageFailure`` hides its cause from
clients; the underlying exception stays chained for the logs.
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from starlette import status

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def public_detail(self) -> str:
        return self.detail


class InvalidOperation(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Cannot perform this operation on yourself"


class ValidationFailure(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input"


class Unauthorized(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Could not validate credentials"


class PermissionDenied(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Operation not allowed"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "User not found"


class StorageFailure(ServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Storage is temporarily unavailable"

    @property
    def public_detail(self) -> str:
        return StorageFailure.default_detail


@contextmanager
def storage_errors(operation: str):
    """Translate SQLAlchemy errors raised inside the block into StorageFailure."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Storage operation %r failed", operation)
        raise StorageFailure(f"{operation} failed") from exc
