"""Enumeration types for the billing domain.

Member values are the lowercase strings stored by the backing database.
"""

from enum import Enum


class ServiceStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InstallmentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class PaymentMethod(str, Enum):
    PIX = "pix"
    DEBIT = "debit"
    CREDIT = "credit"
    CASH = "cash"


class DocumentType(str, Enum):
    RG = "rg"
    CPF = "cpf"
    ADDRESS_PROOF = "address_proof"


class Severity(str, Enum):
    """Display band for how late an overdue payment is."""

    LOW = "low"  # up to 3 days
    MEDIUM = "medium"  # 4 to 7 days
    HIGH = "high"  # more than 7 days


PAYMENT_METHOD_LABELS = {
    PaymentMethod.PIX: "PIX",
    PaymentMethod.DEBIT: "Cartão de Débito",
    PaymentMethod.CREDIT: "Cartão de Crédito",
    PaymentMethod.CASH: "Dinheiro",
}
