"""Financial report and dashboard aggregation."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable

from dateutil.relativedelta import relativedelta

from cashflow.logging import log_event
from cashflow.models import (
    DashboardStats,
    InstallmentStatus,
    PaymentMethod,
    ReportData,
    ServiceDetail,
    ServiceStatus,
)

if TYPE_CHECKING:
    from cashflow.store.base import RecordStore

logger = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = ("jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez")
REVENUE_WINDOW_MONTHS = 6
RECENT_SERVICES_LIMIT = 10

ZERO = Decimal("0")


def month_label(value: date) -> str:
    """Short pt-BR month label, e.g. ``out/2026``."""
    return f"{MONTH_ABBREVIATIONS[value.month - 1]}/{value.year}"


def default_period(today: date | None = None) -> tuple[date, date]:
    """First day of the current month through today."""
    today = today or date.today()
    return today.replace(day=1), today


def summarize(
    details: Iterable[ServiceDetail],
    start_date: date,
    end_date: date,
    today: date | None = None,
    total_clients: int = 0,
    category: str | None = None,
    status: ServiceStatus | None = None,
) -> ReportData:
    """Fold services and their installments into report figures.

    Parameters
    ----------
    details : Iterable[ServiceDetail]
        Services with installments, newest first.
    start_date, end_date : date
        Inclusive range matched against each service's creation date.
    today : date | None
        Anchor of the six-month revenue window. Defaults to today.
    total_clients : int
        Client count reported as-is (not filtered by period).
    category : str | None
        Keep only services of this category.
    status : ServiceStatus | None
        Keep only services in this status.

    Returns
    -------
    ReportData
        Aggregated figures. Paid installments outside the revenue window
        still count towards ``paid_amount``.
    """
    today = today or date.today()

    services = [
        d
        for d in details
        if d.service.created_at is not None
        and start_date <= d.service.created_at.date() <= end_date
        and (category is None or d.service.service_category == category)
        and (status is None or d.service.status == status)
    ]
    installments = [inst for d in services for inst in d.installments]
    paid = [i for i in installments if i.status == InstallmentStatus.PAID]

    def amount_in(state: InstallmentStatus) -> Decimal:
        return sum((i.amount for i in installments if i.status == state), ZERO)

    monthly_revenue: dict[str, Decimal] = {}
    for offset in range(REVENUE_WINDOW_MONTHS - 1, -1, -1):
        monthly_revenue[month_label(today - relativedelta(months=offset))] = ZERO
    for inst in paid:
        if inst.paid_date is None:
            continue
        label = month_label(inst.paid_date)
        if label in monthly_revenue:
            monthly_revenue[label] += inst.amount

    by_category = Counter(d.service.service_category for d in services)
    by_method = Counter((i.payment_method or PaymentMethod.PIX).value for i in paid)

    return ReportData(
        total_clients=total_clients,
        total_services=len(services),
        total_revenue=sum((d.service.total_amount for d in services), ZERO),
        paid_amount=amount_in(InstallmentStatus.PAID),
        pending_amount=amount_in(InstallmentStatus.PENDING),
        overdue_amount=amount_in(InstallmentStatus.OVERDUE),
        monthly_revenue=monthly_revenue,
        services_by_category=dict(by_category),
        payment_methods=dict(by_method),
        recent_services=services[:RECENT_SERVICES_LIMIT],
    )


def dashboard_stats(
    details: Iterable[ServiceDetail],
    total_clients: int,
    today: date | None = None,
) -> DashboardStats:
    """Headline numbers: revenue paid this month and open installment counts."""
    today = today or date.today()
    installments = [inst for d in details for inst in d.installments]
    return DashboardStats(
        total_clients=total_clients,
        monthly_revenue=sum(
            (
                i.amount
                for i in installments
                if i.status == InstallmentStatus.PAID
                and i.paid_date is not None
                and (i.paid_date.year, i.paid_date.month) == (today.year, today.month)
            ),
            ZERO,
        ),
        pending_installments=sum(1 for i in installments if i.status == InstallmentStatus.PENDING),
        overdue_installments=sum(1 for i in installments if i.status == InstallmentStatus.OVERDUE),
    )


class ReportAggregator:
    """Build reports from a record store.

    Every read happens before any figure is computed; a failing read
    propagates and no partial report is produced.
    """

    def __init__(self, store: "RecordStore") -> None:
        self.store = store

    def build(
        self,
        start_date: date | None = None,
        end_date: date | None = None,
        today: date | None = None,
        category: str | None = None,
        status: ServiceStatus | None = None,
    ) -> ReportData:
        """Report for ``[start_date, end_date]``, the current month by default."""
        today = today or date.today()
        default_start, default_end = default_period(today)
        start_date = start_date or default_start
        end_date = end_date or default_end

        total_clients = self.store.count_clients()
        details = self.store.list_service_details()

        report = summarize(
            details,
            start_date,
            end_date,
            today=today,
            total_clients=total_clients,
            category=category,
            status=status,
        )
        log_event(
            logger,
            "Report built",
            start=start_date,
            end=end_date,
            services=report.total_services,
        )
        return report

    def dashboard(self, today: date | None = None) -> DashboardStats:
        """Dashboard figures over every stored service."""
        return dashboard_stats(
            self.store.list_service_details(),
            self.store.count_clients(),
            today,
        )
