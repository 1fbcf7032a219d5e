from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class UnauthorizedError(AppError):
    pass


class NotFoundError(AppError):
    """Missing resource, or one the caller may not see. Both surface as 404."""


class ValidationError(AppError):
    pass
