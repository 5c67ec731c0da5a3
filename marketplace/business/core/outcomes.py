"""
Typed outcomes for business operations.

Rule violations (missing rows, stale state, wrong owner, bad input) are ordinary results
of a request, so business operations return them as values instead of raising. The
presentation layer turns an error into a JSON response with `to_response()`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar


@dataclass(frozen=True)
class OrderError:
    message: str

    code: ClassVar[str] = 'error'
    http_status: ClassVar[int] = 400
    retryable: ClassVar[bool] = False

    def to_payload(self) -> dict:
        payload = {'message': self.message, 'error': self.code}
        if self.retryable:
            payload['retryable'] = True
        return payload


@dataclass(frozen=True)
class NotFound(OrderError):
    code: ClassVar[str] = 'not_found'
    http_status: ClassVar[int] = 404


@dataclass(frozen=True)
class Conflict(OrderError):
    code: ClassVar[str] = 'conflict'
    http_status: ClassVar[int] = 400


@dataclass(frozen=True)
class InvalidState(OrderError):
    code: ClassVar[str] = 'invalid_state'
    http_status: ClassVar[int] = 400


@dataclass(frozen=True)
class Forbidden(OrderError):
    code: ClassVar[str] = 'forbidden'
    http_status: ClassVar[int] = 403


@dataclass(frozen=True)
class ValidationError(OrderError):
    code: ClassVar[str] = 'validation'
    http_status: ClassVar[int] = 400


@dataclass(frozen=True)
class TransientFailure(OrderError):
    code: ClassVar[str] = 'transient'
    http_status: ClassVar[int] = 500
    retryable: ClassVar[bool] = True


@dataclass(frozen=True)
class Outcome:
    """Result of a business operation: either `value` with a message, or `error`."""
    value: Any = None
    message: str = ''
    error: OrderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None, message: str = '') -> 'Outcome':
        return cls(value=value, message=message)

    @classmethod
    def failure(cls, error: OrderError) -> 'Outcome':
        return cls(error=error)

    def to_response(self, success_status: int = 200, body: Any = None):
        """(payload, status) pair suitable for returning from a Flask view via jsonify"""
        if self.error is not None:
            return self.error.to_payload(), self.error.http_status
        if body is None:
            body = {'message': self.message}
        return body, success_status


OrderOutcome = Outcome
CatalogOutcome = Outcome
