# apps/core/domain/errors.py
import functools
import logging
from enum import Enum

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    VALIDATION_ERROR = 'VALIDATION_ERROR'
    NOT_FOUND = 'NOT_FOUND'
    UNAUTHORIZED = 'UNAUTHORIZED'
    QUOTA_EXCEEDED = 'QUOTA_EXCEEDED'
    CREDENTIAL_ERROR = 'CREDENTIAL_ERROR'
    INTERNAL_FAULT = 'INTERNAL_FAULT'


class DomainError(Exception):
    """Błąd zwracany wprost do wywołującego (rozróżnialny po `kind`)."""
    kind = ErrorKind.INTERNAL_FAULT

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class InvalidInputError(DomainError):
    kind = ErrorKind.VALIDATION_ERROR


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class UnauthorizedError(DomainError):
    kind = ErrorKind.UNAUTHORIZED


class QuotaExceededError(DomainError):
    kind = ErrorKind.QUOTA_EXCEEDED


class CredentialError(DomainError):
    kind = ErrorKind.CREDENTIAL_ERROR


class InternalFault(DomainError):
    kind = ErrorKind.INTERNAL_FAULT


class InconsistencyError(InternalFault):
    """Licznik projektu zszedłby poniżej zera albo completed > total."""


def surface_faults(method):
    """
    Dekorator dla publicznych metod serwisów (async).
    Błędy domenowe przechodzą bez zmian, każdy inny wyjątek
    (np. z warstwy persystencji) wychodzi jako InternalFault.
    """

    @functools.wraps(method)
    async def wrapper(*args, **kwargs):
        try:
            return await method(*args, **kwargs)
        except DomainError:
            raise
        except Exception as exc:
            logger.exception("Unexpected failure in %s", method.__qualname__)
            raise InternalFault(f"{method.__name__} failed: {exc}") from exc

    return wrapper
