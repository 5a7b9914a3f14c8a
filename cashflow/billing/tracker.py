"""Installment payment state machine.

Transitions: ``pending -> paid``, ``pending -> overdue`` (sweep) and
``overdue -> paid``. Nothing leaves ``paid`` and the sweep never moves an
installment back to ``pending``.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from cashflow.exceptions import ValidationError
from cashflow.logging import log_event
from cashflow.models import Installment, InstallmentStatus, PaymentMethod

if TYPE_CHECKING:
    from cashflow.store.base import RecordStore

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("amount", "due_date", "payment_method")


def apply_payment(
    installment: Installment,
    method: PaymentMethod = PaymentMethod.PIX,
    paid_on: date | None = None,
) -> Installment:
    """Return ``installment`` marked as paid.

    Paying an already paid installment overwrites the paid date and method.
    """
    return dataclasses.replace(
        installment,
        status=InstallmentStatus.PAID,
        paid_date=paid_on or date.today(),
        payment_method=method,
    )


def is_overdue(installment: Installment, today: date) -> bool:
    """Whether the sweep would flip ``installment`` to overdue on ``today``."""
    return installment.status == InstallmentStatus.PENDING and installment.due_date < today


def sweep_overdue(installments: list[Installment], today: date) -> list[Installment]:
    """Return the installments with pending rows past due flipped to overdue.

    Parameters
    ----------
    installments : list[Installment]
        Rows to examine; not modified.
    today : date
        Reference date. An installment due on ``today`` is not overdue yet.

    Returns
    -------
    list[Installment]
        Same order and length as the input.
    """
    return [
        dataclasses.replace(inst, status=InstallmentStatus.OVERDUE)
        if is_overdue(inst, today)
        else inst
        for inst in installments
    ]


class PaymentTracker:
    """Record payments and run the overdue sweep against a store.

    Parameters
    ----------
    store : RecordStore
        Backing record store.
    """

    def __init__(self, store: "RecordStore") -> None:
        self.store = store

    def mark_paid(
        self,
        installment_id: str,
        payment_method: PaymentMethod = PaymentMethod.PIX,
        paid_on: date | None = None,
    ) -> Installment:
        """Mark an installment as paid.

        Parameters
        ----------
        installment_id : str
            Installment to settle.
        payment_method : PaymentMethod
            How it was paid (default PIX).
        paid_on : date | None
            Payment date, today when omitted.

        Returns
        -------
        Installment
            The stored installment after the update.

        Raises
        ------
        EntityNotFoundError
            If the installment does not exist.
        """
        current = self.store.get_installment(installment_id)
        paid = apply_payment(current, payment_method, paid_on)
        updated = self.store.update_installment(
            installment_id,
            status=paid.status,
            paid_date=paid.paid_date,
            payment_method=paid.payment_method,
        )
        log_event(
            logger,
            "Installment paid",
            installment_id=installment_id,
            service_id=updated.service_id,
            method=payment_method.value,
            paid_date=updated.paid_date,
        )
        return updated

    def update_overdue_status(self, today: date | None = None) -> int:
        """Flip every pending installment due before ``today`` to overdue.

        Returns
        -------
        int
            Number of installments changed.
        """
        today = today or date.today()
        changed = self.store.update_overdue_installments(today)
        log_event(logger, "Overdue sweep finished", today=today, changed=changed)
        return changed

    def update_installment(self, installment_id: str, **changes: Any) -> Installment:
        """Edit the amount, due date or payment method of one installment.

        Raises
        ------
        ValidationError
            On a field other than amount/due_date/payment_method, or a
            negative amount.
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(
                "Only amount, due_date and payment_method can be edited",
                detail=", ".join(sorted(unknown)),
            )
        if "amount" in changes:
            changes["amount"] = Decimal(changes["amount"])
            if changes["amount"] < 0:
                raise ValidationError("Installment amount must not be negative")
        if changes.get("payment_method") is not None:
            changes["payment_method"] = PaymentMethod(changes["payment_method"])

        updated = self.store.update_installment(installment_id, **changes)
        log_event(logger, "Installment updated", installment_id=installment_id, fields=",".join(changes))
        return updated
