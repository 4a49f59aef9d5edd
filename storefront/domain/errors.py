# storefront/domain/errors.py


class StorefrontError(Exception):
    """Base class for errors that map onto a JSON error envelope."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(StorefrontError):
    status_code = 400


class ConflictError(ValidationError):
    pass


class StaleCartError(ConflictError):
    """Cart version changed between read and write."""


class AuthenticationError(StorefrontError):
    status_code = 401


class AuthorizationError(StorefrontError):
    status_code = 403


class NotFoundError(StorefrontError):
    status_code = 404


class InternalError(StorefrontError):
    status_code = 500
