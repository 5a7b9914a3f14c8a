"""Service and installment models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from cashflow.models.client import Client
from cashflow.models.enums import InstallmentStatus, PaymentMethod, ServiceStatus


@dataclass
class Service:
    """Billable engagement owned by one client."""

    service_id: str
    client_id: str
    service_name: str
    service_category: str
    total_amount: Decimal
    installments: int  # declared installment count
    status: ServiceStatus = ServiceStatus.ACTIVE
    created_at: datetime | None = None
    description: str | None = None


@dataclass
class Installment:
    """One scheduled payment (parcela) of a service."""

    installment_id: str
    service_id: str
    installment_number: int  # 1, 2, 3, ...
    amount: Decimal
    due_date: date
    status: InstallmentStatus = InstallmentStatus.PENDING
    paid_date: date | None = None
    payment_method: PaymentMethod | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class PlannedInstallment:
    """Installment row produced by the plan generator, not yet persisted."""

    installment_number: int
    due_date: date
    amount: Decimal
    payment_method: PaymentMethod = PaymentMethod.PIX
    status: InstallmentStatus = InstallmentStatus.PENDING
    paid_date: date | None = None


@dataclass
class ServiceDetail:
    """Service joined with its client and installments."""

    service: Service
    client: Client
    installments: list[Installment] = field(default_factory=list)

    @property
    def service_id(self) -> str:
        return self.service.service_id

    def installments_with_status(self, status: InstallmentStatus) -> list[Installment]:
        """Installments of this service currently in ``status``."""
        return [inst for inst in self.installments if inst.status == status]
