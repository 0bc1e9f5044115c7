from app.core.models.admin import Admin
from app.core.models.student import Student
from app.core.models.billing_batch import FEE_COMPONENTS, BillingBatch
from app.core.models.payment_obligation import PaymentObligation
from app.core.models.payment_receipt import PaymentReceipt

__all__ = [
    "Admin",
    "Student",
    "BillingBatch",
    "FEE_COMPONENTS",
    "PaymentObligation",
    "PaymentReceipt",
]
