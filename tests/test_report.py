"""Tests for report and dashboard aggregation."""

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from cashflow.billing import ReportAggregator, dashboard_stats, default_period, month_label, summarize
from cashflow.models import InstallmentStatus, PaymentMethod, ServiceStatus
from cashflow.store import InMemoryStore

PAID = InstallmentStatus.PAID
OVERDUE = InstallmentStatus.OVERDUE


@pytest.fixture
def details(make_installment, make_detail) -> list:
    """Three services: two in October, one in March."""
    october_a = make_detail(
        [
            make_installment(1, due=date(2026, 10, 5), status=PAID, paid_date=date(2026, 10, 5),
                             method=PaymentMethod.CREDIT, service_id="s-a"),
            make_installment(2, due=date(2026, 11, 5), service_id="s-a"),
        ],
        service_id="s-a",
        total="200.00",
        created_at=datetime(2026, 10, 5, 10, 0),
    )
    october_b = make_detail(
        [
            make_installment(1, amount="50.00", due=date(2026, 10, 1), status=OVERDUE, service_id="s-b"),
            make_installment(2, amount="50.00", due=date(2026, 9, 1), status=PAID,
                             paid_date=date(2026, 9, 2), service_id="s-b"),
        ],
        service_id="s-b",
        name="IPVA",
        category="Impostos",
        total="100.00",
        created_at=datetime(2026, 10, 1, 0, 0),
    )
    march = make_detail(
        [
            make_installment(1, amount="80.00", due=date(2026, 3, 1), status=PAID,
                             paid_date=date(2026, 3, 1), method=PaymentMethod.PIX, service_id="s-c"),
        ],
        service_id="s-c",
        category="Impostos",
        total="80.00",
        created_at=datetime(2026, 3, 1, 8, 0),
    )
    return [october_a, october_b, march]


class TestHelpers:
    """Tests for label and period helpers."""

    def test_month_label(self) -> None:
        assert month_label(date(2026, 10, 19)) == "out/2026"
        assert month_label(date(2027, 2, 1)) == "fev/2027"

    def test_default_period(self, today: date) -> None:
        assert default_period(today) == (date(2026, 10, 1), today)


class TestSummarize:
    """Tests for summarize."""

    def test_period_filter_is_inclusive(self, details: list, today: date) -> None:
        report = summarize(details, date(2026, 10, 1), date(2026, 10, 5), today=today)

        assert report.total_services == 2
        assert [d.service_id for d in report.recent_services] == ["s-a", "s-b"]

    def test_amounts(self, details: list, today: date) -> None:
        report = summarize(details, date(2026, 10, 1), date(2026, 10, 31), today=today, total_clients=7)

        assert report.total_clients == 7
        assert report.total_revenue == Decimal("300.00")
        assert report.paid_amount == Decimal("150.00")
        assert report.pending_amount == Decimal("100.00")
        assert report.overdue_amount == Decimal("50.00")

    def test_monthly_revenue_window(self, details: list, today: date) -> None:
        report = summarize(details, date(2026, 1, 1), date(2026, 12, 31), today=today)

        assert list(report.monthly_revenue) == [
            "mai/2026",
            "jun/2026",
            "jul/2026",
            "ago/2026",
            "set/2026",
            "out/2026",
        ]
        assert report.monthly_revenue["out/2026"] == Decimal("100.00")
        assert report.monthly_revenue["set/2026"] == Decimal("50.00")
        assert report.monthly_revenue["mai/2026"] == Decimal("0")
        # March payment falls outside the window but still counts as paid
        assert report.paid_amount == Decimal("230.00")

    def test_breakdowns(self, details: list, today: date) -> None:
        report = summarize(details, date(2026, 1, 1), date(2026, 12, 31), today=today)

        assert report.services_by_category == {"Licenciamento": 1, "Impostos": 2}
        # payment without a recorded method counts as pix
        assert report.payment_methods == {"credit": 1, "pix": 2}

    def test_all_pending_services(self, make_installment, make_detail, today: date) -> None:
        services = [
            make_detail(
                [make_installment(1, amount="1000.00", due=date(2026, 11, 5), service_id="s-1")],
                service_id="s-1",
                total="1000.00",
                created_at=datetime(2026, 10, 5, 9, 0),
            ),
            make_detail(
                [
                    make_installment(1, amount="1000.00", due=date(2026, 11, 10), service_id="s-2"),
                    make_installment(2, amount="1000.00", due=date(2026, 12, 10), service_id="s-2"),
                ],
                service_id="s-2",
                total="2000.00",
                created_at=datetime(2026, 10, 10, 9, 0),
            ),
        ]

        report = summarize(services, date(2026, 10, 1), date(2026, 10, 31), today=today)

        assert report.total_services == 2
        assert report.total_revenue == Decimal("3000.00")
        assert report.pending_amount == Decimal("3000.00")
        assert report.paid_amount == Decimal("0")
        assert report.overdue_amount == Decimal("0")

    def test_out_of_range_category_absent(
        self, details: list, make_installment, make_detail, today: date
    ) -> None:
        details.append(
            make_detail(
                [make_installment(1, service_id="s-d")],
                service_id="s-d",
                category="Transferência",
                created_at=datetime(2026, 9, 30, 23, 59),
            )
        )

        report = summarize(details, date(2026, 10, 1), date(2026, 10, 31), today=today)

        assert "Transferência" not in report.services_by_category
        assert report.services_by_category == {"Licenciamento": 1, "Impostos": 1}

    def test_category_filter(self, details: list, today: date) -> None:
        report = summarize(details, date(2026, 1, 1), date(2026, 12, 31), today=today, category="Impostos")

        assert report.total_services == 2
        assert report.total_revenue == Decimal("180.00")

    def test_status_filter(self, details: list, today: date) -> None:
        report = summarize(
            details, date(2026, 1, 1), date(2026, 12, 31), today=today, status=ServiceStatus.COMPLETED
        )

        assert report.total_services == 0
        assert report.paid_amount == Decimal("0")

    def test_recent_services_capped(self, make_installment, make_detail, today: date) -> None:
        many = [
            make_detail([make_installment(1, service_id=f"s{n}")], service_id=f"s{n}")
            for n in range(15)
        ]

        report = summarize(many, date(2026, 10, 1), date(2026, 10, 31), today=today)

        assert report.total_services == 15
        assert len(report.recent_services) == 10

    def test_empty(self, today: date) -> None:
        report = summarize([], date(2026, 10, 1), today, today=today)

        assert report.total_services == 0
        assert report.total_revenue == Decimal("0")
        assert report.services_by_category == {}
        assert len(report.monthly_revenue) == 6


class TestDashboard:
    """Tests for dashboard_stats."""

    def test_counts(self, details: list, today: date) -> None:
        stats = dashboard_stats(details, total_clients=3, today=today)

        assert stats.total_clients == 3
        assert stats.monthly_revenue == Decimal("100.00")
        assert stats.pending_installments == 1
        assert stats.overdue_installments == 1


class TestReportAggregator:
    """Tests for ReportAggregator."""

    def test_build_defaults_to_current_month(
        self, store: InMemoryStore, sample_client, details: list, today: date
    ) -> None:
        store.add_client(sample_client)
        for detail in details:
            store.create_service(detail.service, detail.installments)

        report = ReportAggregator(store).build(today=today)

        assert report.total_clients == 1
        assert report.total_services == 2

    def test_dashboard(self, store: InMemoryStore, sample_client, details: list, today: date) -> None:
        store.add_client(sample_client)
        for detail in details:
            store.create_service(detail.service, detail.installments)

        stats = ReportAggregator(store).dashboard(today)

        assert stats.overdue_installments == 1

    def test_read_failure_propagates(self, today: date) -> None:
        store = MagicMock()
        store.count_clients.return_value = 2
        store.list_service_details.side_effect = ConnectionError("db down")

        with pytest.raises(ConnectionError):
            ReportAggregator(store).build(today=today)
