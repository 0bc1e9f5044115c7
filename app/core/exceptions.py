from decimal import Decimal
from uuid import UUID

from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ValidationError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)


class UnauthorizedError(ServiceError):
    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)


class NotFoundError(ServiceError):
    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ConflictError(ServiceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_409_CONFLICT)


class InternalServerError(ServiceError):
    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)


# --- Billing / payment domain errors ---
class DuplicateBatchError(ConflictError):
    def __init__(self, month: int, year: int) -> None:
        super().__init__(f"A billing batch for {month:02d}/{year} already exists")
        self.month = month
        self.year = year


class InvalidAmountError(ValidationError):
    def __init__(self, message: str = "Payment amount must be greater than zero") -> None:
        super().__init__(message)


class OverpaymentError(ValidationError):
    """Payment would push the paid amount past the obligation total."""

    def __init__(self, remaining: Decimal) -> None:
        super().__init__(f"Payment exceeds the outstanding bill. Remaining: {remaining}")
        self.remaining = remaining


class FanOutError(InternalServerError):
    """The batch was stored but its obligations were not. Retry fan-out for batch_id."""

    def __init__(self, batch_id: UUID) -> None:
        super().__init__(
            f"Billing batch {batch_id} was created, but generating student obligations failed; "
            "retry fan-out for this batch"
        )
        self.batch_id = batch_id
