from decimal import Decimal
from enum import Enum


class Gender(str, Enum):
    MALE = "L"
    FEMALE = "P"


class LoginRole(str, Enum):
    ADMIN = "admin"
    STUDENT = "student"
    GUARDIAN = "guardian"


class PaymentStatus(str, Enum):
    PAID = "Lunas"
    INSTALLMENT = "Cicilan"
    UNPAID = "Belum Lunas"


def derive_payment_status(paid: Decimal, total: Decimal) -> PaymentStatus:
    """Status of an obligation; Belum Lunas -> Cicilan -> Lunas as paid grows."""
    if paid >= total:
        return PaymentStatus.PAID
    if paid > 0:
        return PaymentStatus.INSTALLMENT
    return PaymentStatus.UNPAID
