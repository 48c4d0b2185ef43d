from __future__ import annotations


class AppError(Exception):
    status_code = 500
    error_type = "server_error"
    default_detail = "Internal Server Error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(AppError):
    status_code = 400
    error_type = "validation_error"
    default_detail = "Incomplete data"


class NotFoundError(AppError):
    status_code = 404
    error_type = "not_found"
    default_detail = "Record not found"


class UnauthorizedError(AppError):
    status_code = 401
    error_type = "unauthorized"
    default_detail = "Not authenticated"


class ForbiddenError(AppError):
    status_code = 403
    error_type = "forbidden"
    default_detail = "Forbidden"


class ConflictError(AppError):
    status_code = 409
    error_type = "conflict"
    default_detail = "Already exists"


class StorageError(AppError):
    """Persistence failure. The detail returned to clients is always generic."""

    status_code = 500
    error_type = "server_error"
    default_detail = "Storage error"
