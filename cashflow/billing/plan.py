"""Installment plan generation.

A service total is split into ``count`` equal installments, one per
calendar month after the start date.
"""

from __future__ import annotations

import dataclasses
from datetime import date
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from cashflow.exceptions import EntityNotFoundError, ValidationError
from cashflow.models import PaymentMethod, PlannedInstallment

MAX_INSTALLMENTS = 12


def generate_plan(
    total_amount: Decimal,
    count: int,
    start_date: date | None = None,
    payment_method: PaymentMethod = PaymentMethod.PIX,
) -> list[PlannedInstallment]:
    """Split a service total into monthly installments.

    Every row gets ``total_amount / count``; the division is not rounded to
    cents and no row absorbs a remainder, so the amounts may not add back
    up to the total exactly.

    Parameters
    ----------
    total_amount : Decimal
        Service price, must be positive.
    count : int
        Number of installments, 1 to 12.
    start_date : date | None
        Reference date; installment ``i`` is due ``i`` months later.
        Defaults to today.
    payment_method : PaymentMethod
        Method pre-selected on every row.

    Returns
    -------
    list[PlannedInstallment]
        Rows numbered 1..count with increasing due dates.

    Raises
    ------
    ValidationError
        If the amount is not positive or the count is out of range.
    """
    total_amount = Decimal(total_amount)
    if total_amount <= 0:
        raise ValidationError(
            "Total amount must be positive",
            detail=f"total_amount={total_amount}",
        )
    if not 1 <= count <= MAX_INSTALLMENTS:
        raise ValidationError(
            f"Installment count must be between 1 and {MAX_INSTALLMENTS}",
            detail=f"count={count}",
        )

    start = start_date or date.today()
    amount = total_amount / count

    return [
        PlannedInstallment(
            installment_number=i,
            # relativedelta clamps to the last day of shorter months
            due_date=start + relativedelta(months=i),
            amount=amount,
            payment_method=payment_method,
        )
        for i in range(1, count + 1)
    ]


def with_payment_method(
    plan: list[PlannedInstallment],
    installment_number: int,
    method: PaymentMethod,
) -> list[PlannedInstallment]:
    """Return a copy of ``plan`` with one row's payment method overridden."""
    if not any(row.installment_number == installment_number for row in plan):
        raise EntityNotFoundError(f"Installment {installment_number} not in plan")
    return [
        dataclasses.replace(row, payment_method=method)
        if row.installment_number == installment_number
        else row
        for row in plan
    ]


def check_plan(
    plan: list[PlannedInstallment],
    total_amount: Decimal,
    count: int,
    start_date: date | None = None,
) -> None:
    """Verify a reviewed plan against the schedule it was generated from.

    Only the payment method of a row may differ from
    ``generate_plan(total_amount, count, start_date)``.

    Raises
    ------
    ValidationError
        If the row count, numbering, amounts, due dates or statuses differ.
    """
    if len(plan) != count:
        raise ValidationError(
            "Installment plan does not match the installment count",
            detail=f"plan has {len(plan)} rows, service declares {count}",
        )
    numbers = [row.installment_number for row in plan]
    if numbers != list(range(1, count + 1)):
        raise ValidationError(
            "Installment numbers must run from 1 to the installment count",
            detail=f"numbers={numbers}",
        )
    expected = generate_plan(total_amount, count, start_date=start_date)
    for row, reference in zip(plan, expected):
        if dataclasses.replace(row, payment_method=reference.payment_method) != reference:
            raise ValidationError(
                "Only the payment method of a planned installment can be changed",
                detail=f"installment {row.installment_number}: "
                f"amount={row.amount} due_date={row.due_date}, "
                f"expected amount={reference.amount} due_date={reference.due_date}",
            )
