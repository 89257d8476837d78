from typing import Sequence


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_payload(self) -> dict:
        return {'detail': self.message, 'error': self.kind}


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ValidationError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


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


# ========== Coupon ==========


class ExpiredError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 410)


class AlreadyUsedError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class ExhaustedError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


# ========== Transaction ==========


class SoldOutError(ExhaustedError):
    pass


class EventStartedError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class InsufficientPointsError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class InvalidStateError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class InvalidTransitionError(DomainError):
    def __init__(self, from_status: str, to_status: str) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f'Status transition from {from_status} to {to_status} is not allowed', 400)

    def to_payload(self) -> dict:
        return super().to_payload() | {'from_status': self.from_status, 'to_status': self.to_status}


class RollbackError(CustomBaseError):
    """A compensating action failed after the status change was already committed"""

    def __init__(self, message: str, *, failed_steps: Sequence[str] = ()) -> None:
        self.failed_steps = list(failed_steps)
        super().__init__(message, 500)

    def to_payload(self) -> dict:
        return super().to_payload() | {'failed_steps': self.failed_steps}


class PersistenceError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 500)
