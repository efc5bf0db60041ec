from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class EntityValidationError(ValueError):
    """A mandatory field was blank/None or a value was outside its valid range."""


class EntityNotFoundError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ConcurrencyConflictError(ServiceError):
    """The row was updated by someone else since it was read (stale version)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class ReferentialIntegrityError(ServiceError):
    """A delete was refused because other rows still depend on the entity."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class AuthenticationError(ServiceError):
    def __init__(self, message: str = "Invalid credentials", status_code: int = status.HTTP_401_UNAUTHORIZED) -> None:
        super().__init__(message, status_code)


class UserNotFoundError(AuthenticationError):
    pass


class AccountStatusError(AuthenticationError):
    """Credentials were valid but the account may not log in (disabled, locked, expired)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_403_FORBIDDEN)
