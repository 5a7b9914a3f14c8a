"""Tests for the payment state tracker."""

from datetime import date
from decimal import Decimal

import pytest

from cashflow.billing import PaymentTracker, apply_payment, sweep_overdue
from cashflow.exceptions import EntityNotFoundError, ValidationError
from cashflow.models import InstallmentStatus, PaymentMethod
from cashflow.store import InMemoryStore


@pytest.fixture
def populated(store: InMemoryStore, sample_client, make_installment, make_detail) -> InMemoryStore:
    """Store with one service: installment 1 due 10/01, 2 due 10/19, 3 paid."""
    installments = [
        make_installment(1, due=date(2026, 10, 1)),
        make_installment(2, due=date(2026, 10, 19)),
        make_installment(
            3,
            due=date(2026, 9, 1),
            status=InstallmentStatus.PAID,
            paid_date=date(2026, 8, 30),
            method=PaymentMethod.CASH,
        ),
    ]
    detail = make_detail(installments)
    store.add_client(sample_client)
    store.create_service(detail.service, installments)
    return store


class TestApplyPayment:
    """Tests for apply_payment."""

    def test_pending_to_paid(self, make_installment) -> None:
        inst = make_installment()

        paid = apply_payment(inst, PaymentMethod.DEBIT, date(2026, 10, 2))

        assert paid.status == InstallmentStatus.PAID
        assert paid.paid_date == date(2026, 10, 2)
        assert paid.payment_method == PaymentMethod.DEBIT
        assert inst.status == InstallmentStatus.PENDING

    def test_overdue_to_paid(self, make_installment) -> None:
        inst = make_installment(status=InstallmentStatus.OVERDUE)

        assert apply_payment(inst, paid_on=date(2026, 10, 20)).status == InstallmentStatus.PAID

    def test_paying_twice_overwrites_date(self, make_installment) -> None:
        first = apply_payment(make_installment(), paid_on=date(2026, 10, 2))

        second = apply_payment(first, paid_on=date(2026, 10, 5))

        assert second.status == InstallmentStatus.PAID
        assert second.paid_date == date(2026, 10, 5)

    def test_defaults_to_pix_today(self, make_installment) -> None:
        paid = apply_payment(make_installment())

        assert paid.payment_method == PaymentMethod.PIX
        assert paid.paid_date == date.today()


class TestSweepOverdue:
    """Tests for sweep_overdue."""

    def test_flips_only_pending_past_due(self, make_installment, today: date) -> None:
        rows = [
            make_installment(1, due=date(2026, 10, 18)),
            make_installment(2, due=today),
            make_installment(3, due=date(2026, 11, 1)),
            make_installment(4, due=date(2026, 9, 1), status=InstallmentStatus.PAID, paid_date=date(2026, 9, 1)),
            make_installment(5, due=date(2026, 9, 1), status=InstallmentStatus.OVERDUE),
        ]

        swept = sweep_overdue(rows, today)

        assert [r.status for r in swept] == [
            InstallmentStatus.OVERDUE,
            InstallmentStatus.PENDING,
            InstallmentStatus.PENDING,
            InstallmentStatus.PAID,
            InstallmentStatus.OVERDUE,
        ]
        assert rows[0].status == InstallmentStatus.PENDING

    def test_idempotent(self, make_installment, today: date) -> None:
        rows = [make_installment(1, due=date(2026, 10, 1)), make_installment(2, due=date(2026, 12, 1))]

        once = sweep_overdue(rows, today)

        assert sweep_overdue(once, today) == once


class TestPaymentTracker:
    """Tests for PaymentTracker against the in-memory store."""

    def test_mark_paid(self, populated: InMemoryStore) -> None:
        tracker = PaymentTracker(populated)

        paid = tracker.mark_paid("service-0001-inst-1", PaymentMethod.CREDIT, date(2026, 10, 3))

        assert paid.status == InstallmentStatus.PAID
        assert paid.paid_date == date(2026, 10, 3)
        assert paid.payment_method == PaymentMethod.CREDIT
        assert populated.get_installment("service-0001-inst-1") == paid

    def test_mark_paid_twice(self, populated: InMemoryStore) -> None:
        tracker = PaymentTracker(populated)
        tracker.mark_paid("service-0001-inst-2", PaymentMethod.PIX, date(2026, 10, 19))

        second = tracker.mark_paid("service-0001-inst-2", PaymentMethod.DEBIT, date(2026, 10, 21))

        stored = populated.get_installment("service-0001-inst-2")
        assert second == stored
        assert stored.status == InstallmentStatus.PAID
        assert stored.paid_date == date(2026, 10, 21)
        assert stored.payment_method == PaymentMethod.DEBIT

    def test_mark_paid_unknown(self, populated: InMemoryStore) -> None:
        with pytest.raises(EntityNotFoundError):
            PaymentTracker(populated).mark_paid("missing")

    def test_update_overdue_status(self, populated: InMemoryStore, today: date) -> None:
        tracker = PaymentTracker(populated)

        changed = tracker.update_overdue_status(today)

        assert changed == 1
        assert populated.get_installment("service-0001-inst-1").status == InstallmentStatus.OVERDUE
        # due today is not overdue yet
        assert populated.get_installment("service-0001-inst-2").status == InstallmentStatus.PENDING
        assert populated.get_installment("service-0001-inst-3").status == InstallmentStatus.PAID

    def test_sweep_is_idempotent(self, populated: InMemoryStore, today: date) -> None:
        tracker = PaymentTracker(populated)

        tracker.update_overdue_status(today)

        assert tracker.update_overdue_status(today) == 0

    def test_paid_never_reverts(self, populated: InMemoryStore) -> None:
        tracker = PaymentTracker(populated)
        tracker.mark_paid("service-0001-inst-1", paid_on=date(2026, 9, 30))

        tracker.update_overdue_status(date(2027, 1, 1))

        assert populated.get_installment("service-0001-inst-1").status == InstallmentStatus.PAID

    def test_overdue_then_paid(self, populated: InMemoryStore, today: date) -> None:
        tracker = PaymentTracker(populated)
        tracker.update_overdue_status(today)

        paid = tracker.mark_paid("service-0001-inst-1", paid_on=today)

        assert paid.status == InstallmentStatus.PAID

    def test_update_installment(self, populated: InMemoryStore) -> None:
        tracker = PaymentTracker(populated)

        updated = tracker.update_installment(
            "service-0001-inst-2",
            amount="150.50",
            due_date=date(2026, 11, 5),
            payment_method="cash",
        )

        assert updated.amount == Decimal("150.50")
        assert updated.due_date == date(2026, 11, 5)
        assert updated.payment_method == PaymentMethod.CASH

    def test_update_installment_negative_amount(self, populated: InMemoryStore) -> None:
        with pytest.raises(ValidationError):
            PaymentTracker(populated).update_installment("service-0001-inst-2", amount="-1")

    def test_update_installment_status_not_editable(self, populated: InMemoryStore) -> None:
        with pytest.raises(ValidationError):
            PaymentTracker(populated).update_installment("service-0001-inst-2", status="paid")
