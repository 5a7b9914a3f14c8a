"""Payment receipt data."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from cashflow.config import CompanyInfo
from cashflow.exceptions import EntityNotFoundError
from cashflow.models import Address, InstallmentStatus, PaymentMethod, Receipt, ServiceDetail
from cashflow.models.enums import PAYMENT_METHOD_LABELS
from cashflow.validation.formatters import format_cnpj, format_cpf, format_postal_code

NO_ADDRESS = "Endereço não informado"


def full_address(address: Address) -> str:
    """Single-line client address as printed on receipts."""
    parts = []
    if address.street:
        parts.append(address.street)
    if address.number:
        parts.append(address.number)
    if address.neighborhood:
        parts.append(f"- {address.neighborhood}")
    if address.city and address.state:
        parts.append(f"{address.city}/{address.state}")
    if address.postal_code:
        parts.append(f"CEP: {format_postal_code(address.postal_code)}")
    return ", ".join(parts) or NO_ADDRESS


def receipt_number(issued_at: datetime, service_id: str) -> str:
    """``<last 6 digits of the epoch milliseconds>-<last 4 chars of the service id>``."""
    millis = str(int(issued_at.timestamp() * 1000))
    return f"{millis[-6:]}-{service_id[-4:]}"


def build_receipt(
    detail: ServiceDetail,
    company: CompanyInfo | None = None,
    installment_id: str | None = None,
    issued_at: datetime | None = None,
) -> Receipt:
    """Collect what a renderer needs to print a payment receipt.

    Parameters
    ----------
    detail : ServiceDetail
        Service with client and installments.
    company : CompanyInfo | None
        Issuer header; defaults to :class:`CompanyInfo`.
    installment_id : str | None
        Receipt for this installment only. When omitted the receipt lists
        every paid installment of the service.
    issued_at : datetime | None
        Issue timestamp, now by default.

    Returns
    -------
    Receipt

    Raises
    ------
    EntityNotFoundError
        If ``installment_id`` is not an installment of the service.
    """
    company = company or CompanyInfo()
    issued_at = issued_at or datetime.now()

    if installment_id is not None:
        lines = [inst for inst in detail.installments if inst.installment_id == installment_id]
        if not lines:
            raise EntityNotFoundError(
                f"Installment {installment_id} not found",
                detail=f"service {detail.service_id}",
            )
    else:
        lines = detail.installments_with_status(InstallmentStatus.PAID)

    client = detail.client
    return Receipt(
        receipt_number=receipt_number(issued_at, detail.service_id),
        issued_at=issued_at,
        company_name=company.name,
        company_trade_name=company.trade_name,
        company_cnpj=format_cnpj(company.cnpj),
        company_address=company.address,
        company_phone=company.phone,
        company_email=company.email,
        client_name=client.full_name,
        client_cpf=format_cpf(client.cpf),
        client_address=full_address(client.address),
        service_name=detail.service.service_name,
        service_category=detail.service.service_category,
        service_total=detail.service.total_amount,
        lines=tuple(lines),
        total_paid=sum((inst.amount for inst in lines), Decimal("0")),
        single_installment=installment_id is not None,
        payment_method_labels=tuple(
            PAYMENT_METHOD_LABELS[inst.payment_method or PaymentMethod.PIX] for inst in lines
        ),
    )
