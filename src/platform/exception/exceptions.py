class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    code: str = 'error'

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_payload(self) -> dict[str, str]:
        return {'detail': self.message, 'code': self.code}


class DomainError(CustomBaseError):
    code = 'domain_error'

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ValidationError(DomainError):
    """Malformed input, e.g. a missing kind-specific field on a ticket request"""

    code = 'validation_error'

    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class UnauthorizedError(CustomBaseError):
    """Acting user is neither the owner/participant nor an administrator"""

    code = 'unauthorized'

    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    code = 'not_found'

    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    code = 'conflict'

    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class InvalidStateError(ConflictError):
    """Status precondition violated; always names the status the record is actually in"""

    code = 'invalid_state'

    def __init__(self, message: str, *, current_status: str) -> None:
        self.current_status = current_status
        super().__init__(f'{message} (current status: {current_status})')

    def to_payload(self) -> dict[str, str]:
        return super().to_payload() | {'current_status': self.current_status}


class DanglingReferenceError(CustomBaseError):
    code = 'dangling_reference'

    def __init__(self, message: str) -> None:
        super().__init__(message, 422)
