"""Overdue payment projection."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable

from cashflow.billing.tracker import PaymentTracker
from cashflow.models import InstallmentStatus, OverduePayment, ServiceDetail, Severity

if TYPE_CHECKING:
    from cashflow.store.base import RecordStore

logger = logging.getLogger(__name__)

LOW_SEVERITY_DAYS = 3
MEDIUM_SEVERITY_DAYS = 7


def project_overdue(details: Iterable[ServiceDetail], today: date) -> list[OverduePayment]:
    """Flatten every overdue installment with its service and client.

    Only installments already in ``overdue`` status are reported; a pending
    installment past its due date shows up after the next sweep.

    Parameters
    ----------
    details : Iterable[ServiceDetail]
        Services joined with client and installments.
    today : date
        Reference date for ``days_overdue``.

    Returns
    -------
    list[OverduePayment]
        Ordered by due date, oldest first.
    """
    payments = [
        OverduePayment(
            installment_id=inst.installment_id,
            client_name=detail.client.full_name,
            client_phone=detail.client.phone,
            service_name=detail.service.service_name,
            amount=inst.amount,
            due_date=inst.due_date,
            days_overdue=(today - inst.due_date).days,
            installment=inst.installment_number,
            total_installments=detail.service.installments,
        )
        for detail in details
        for inst in detail.installments_with_status(InstallmentStatus.OVERDUE)
    ]
    return sorted(payments, key=lambda p: p.due_date)


def severity(days_overdue: int) -> Severity:
    """Display band for how late a payment is."""
    if days_overdue <= LOW_SEVERITY_DAYS:
        return Severity.LOW
    if days_overdue <= MEDIUM_SEVERITY_DAYS:
        return Severity.MEDIUM
    return Severity.HIGH


def total_overdue_amount(payments: Iterable[OverduePayment]) -> Decimal:
    return sum((p.amount for p in payments), Decimal("0"))


class OverdueAggregator:
    """Read overdue installments from a store."""

    def __init__(self, store: "RecordStore") -> None:
        self.store = store

    def collect(self, today: date | None = None) -> list[OverduePayment]:
        """Overdue payments as currently stored."""
        return project_overdue(self.store.list_service_details(), today or date.today())

    def refresh_and_collect(self, today: date | None = None) -> list[OverduePayment]:
        """Run the overdue sweep, then collect."""
        today = today or date.today()
        PaymentTracker(self.store).update_overdue_status(today)
        payments = self.collect(today)
        logger.info("Collected %d overdue payments", len(payments))
        return payments
