"""Derived, read-only views computed from stored records."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from cashflow.models.service import Installment, ServiceDetail


@dataclass(frozen=True)
class OverduePayment:
    """Overdue installment flattened with its service and client."""

    installment_id: str
    client_name: str
    client_phone: str
    service_name: str
    amount: Decimal
    due_date: date
    days_overdue: int
    installment: int  # installment_number
    total_installments: int


@dataclass(frozen=True)
class ReportData:
    """Aggregated figures for the reporting period."""

    total_clients: int
    total_services: int
    total_revenue: Decimal
    paid_amount: Decimal
    pending_amount: Decimal
    overdue_amount: Decimal
    monthly_revenue: dict[str, Decimal]  # oldest month first
    services_by_category: dict[str, int]
    payment_methods: dict[str, int]
    recent_services: list[ServiceDetail] = field(default_factory=list)


@dataclass(frozen=True)
class DashboardStats:
    """Headline numbers for the landing page."""

    total_clients: int
    monthly_revenue: Decimal
    pending_installments: int
    overdue_installments: int


@dataclass(frozen=True)
class Receipt:
    """Everything a print/PDF renderer needs for a payment receipt."""

    receipt_number: str
    issued_at: datetime
    company_name: str
    company_trade_name: str
    company_cnpj: str  # formatted
    company_address: str
    company_phone: str
    company_email: str
    client_name: str
    client_cpf: str  # formatted
    client_address: str
    service_name: str
    service_category: str
    service_total: Decimal
    lines: tuple[Installment, ...]
    total_paid: Decimal
    single_installment: bool
    payment_method_labels: tuple[str, ...]
