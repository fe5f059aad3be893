import logging
from functools import wraps
from http import HTTPStatus
from fastapi import HTTPException

from catalog_api.core.errors import (
    AggregateFailure,
    ConcurrencyConflict,
    DomainError,
    Forbidden,
    InvalidArgument,
    NotFound,
)

logger = logging.getLogger(__name__)

ERRMAP: dict[type[DomainError], HTTPStatus] = {
    NotFound: HTTPStatus.NOT_FOUND,
    Forbidden: HTTPStatus.FORBIDDEN,
    InvalidArgument: HTTPStatus.UNPROCESSABLE_ENTITY,
    ConcurrencyConflict: HTTPStatus.CONFLICT,
    AggregateFailure: HTTPStatus.INTERNAL_SERVER_ERROR,
}


def to_http_error(
        error: DomainError,
        mapping: dict[type[DomainError], HTTPStatus] = ERRMAP,
) -> HTTPException:
    """Ошибка домена -> HTTPException; detail — текстовый код."""
    for kind, status in mapping.items():
        if isinstance(error, kind):
            if isinstance(error, AggregateFailure):
                # список упавших id, чтобы клиент повторил только их
                return HTTPException(status_code=status,
                                     detail=error.as_dict())
            return HTTPException(status_code=status, detail=error.detail)
    return HTTPException(
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        detail="internal_error")


def handle_domain_errors(
        mapping: dict[type[DomainError], HTTPStatus] = ERRMAP):
    """
    Переводит ошибки домена в HTTPException.
    Нераспознанные DomainError — 500 internal_error, прочее пробрасывается.
    """
    def decorator(fn):
        @wraps(fn)
        async def wrapper(*args, **kwargs):
            try:
                return await fn(*args, **kwargs)
            except DomainError as e:
                if isinstance(e, AggregateFailure):
                    logger.error("aggregate_failure", extra=e.as_dict())
                raise to_http_error(e, mapping)
        return wrapper
    return decorator
