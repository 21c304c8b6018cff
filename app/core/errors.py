from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    BAD_DATA = "BAD_DATA"
    AUTHORIZATION = "AUTHORIZATION"
    NOT_FOUND = "NOT_FOUND"
    SERVER = "SERVER"
    TRANSACTION = "TRANSACTION"


_STATUS_CODES = {
    ErrorKind.BAD_DATA: 400,
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.SERVER: 500,
    ErrorKind.TRANSACTION: 500,
}

# Kinds raised on purpose by data-access code; they leave a transaction as-is.
EXPECTED_KINDS = frozenset({ErrorKind.BAD_DATA, ErrorKind.AUTHORIZATION, ErrorKind.NOT_FOUND})


class ForumError(Exception):
    """Error with a kind tag that an outer router can map to a response."""

    kind: ErrorKind = ErrorKind.SERVER
    default_description = "Internal server error"

    def __init__(self, description: str | None = None):
        self.description = description or self.default_description
        super().__init__(self.description)

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self.kind]


class ValidationError(ForumError):
    kind = ErrorKind.BAD_DATA
    default_description = "The request body can not be parsed as valid data"


class AuthorizationError(ForumError):
    kind = ErrorKind.AUTHORIZATION
    default_description = "Unauthorized, maybe invalid token"


class NotFoundError(ForumError):
    kind = ErrorKind.NOT_FOUND
    default_description = "The endpoint is not found"


class ServerError(ForumError):
    kind = ErrorKind.SERVER

    def __init__(self, description: str | None = None, *, cause: BaseException | None = None):
        super().__init__(description)
        self.cause = cause


class TransactionError(ForumError):
    kind = ErrorKind.TRANSACTION
    default_description = "Database transaction failed"

    def __init__(self, cause: BaseException | None = None, description: str | None = None):
        super().__init__(description or (f"{self.default_description}: {cause}" if cause else None))
        self.cause = cause


def is_expected(exc: BaseException) -> bool:
    return isinstance(exc, ForumError) and exc.kind in EXPECTED_KINDS


__all__ = [
    "ErrorKind",
    "EXPECTED_KINDS",
    "ForumError",
    "ValidationError",
    "AuthorizationError",
    "NotFoundError",
    "ServerError",
    "TransactionError",
    "is_expected",
]
