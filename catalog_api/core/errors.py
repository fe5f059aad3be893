"""Domain error taxonomy shared by services and the HTTP layer."""

from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base error; `detail` is a short machine-readable code."""

    detail = 'domain_error'

    def __init__(self, detail: str | None = None) -> None:
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class NotFound(DomainError):
    detail = 'not_found'


class Forbidden(DomainError):
    detail = 'forbidden'


class InvalidArgument(DomainError):
    detail = 'invalid_argument'


class ConcurrencyConflict(DomainError):
    """Store rejected a write: unique key taken or transient conflict."""

    detail = 'concurrency_conflict'


class WriteConflict(ConcurrencyConflict):
    """Transient transaction conflict; the whole transaction can be rerun."""

    detail = 'write_conflict'


class AggregateFailure(DomainError):
    """Bulk operation finished with some sub-operations failed."""

    detail = 'aggregate_failure'

    def __init__(self, username: str, failed: Sequence[str]) -> None:
        self.username = username
        self.failed = list(failed)
        super().__init__(
            f'{len(self.failed)} of the comments of {username!r} '
            f'could not be deleted: {", ".join(self.failed)}')

    def as_dict(self) -> dict:
        return {
            'code': type(self).detail,
            'username': self.username,
            'failed': self.failed,
        }
