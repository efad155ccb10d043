from __future__ import annotations


class AppError(Exception):
    """Base application error.

    ``code`` is the machine-readable reason carried by push error frames.
    """

    code = "error"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class UnauthenticatedError(AppError):
    code = "unauthenticated"


class NotFoundError(AppError):
    code = "not_found"


class ForbiddenError(AppError):
    code = "forbidden"


class ConflictError(AppError):
    code = "conflict"


class InvalidArgumentError(AppError):
    code = "invalid_argument"


class InternalError(AppError):
    code = "internal"
