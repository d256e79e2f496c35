class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ForbiddenError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class AuthenticationError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


class SessionError(CustomBaseError):
    """Raised when an auth session cannot be created, read or upgraded"""

    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


class BackendRpcError(CustomBaseError):
    """Raised when a backend stored procedure call fails"""

    def __init__(self, message: str) -> None:
        super().__init__(message, 502)


class StorageUnavailableError(CustomBaseError):
    """Raised when the client key/value store cannot be reached"""

    def __init__(self, message: str) -> None:
        super().__init__(message, 503)


class RealtimeChannelError(CustomBaseError):
    """Raised when a realtime channel fails to subscribe"""

    def __init__(self, message: str) -> None:
        super().__init__(message, 503)
