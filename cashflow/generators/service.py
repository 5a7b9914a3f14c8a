"""Service and installment generators with payment behavior."""

from __future__ import annotations

import random
from datetime import date, datetime, timedelta
from decimal import Decimal

from cashflow.billing.plan import generate_plan
from cashflow.billing.tracker import apply_payment, sweep_overdue
from cashflow.catalog import DEFAULT_ENTRIES, CatalogEntry
from cashflow.generators.base import BaseGenerator
from cashflow.models import (
    Client,
    Installment,
    PaymentMethod,
    Service,
    ServiceStatus,
    new_id,
)

PAYMENT_METHODS = list(PaymentMethod)
PAYMENT_METHOD_WEIGHTS = [0.55, 0.15, 0.20, 0.10]


class ServiceGenerator(BaseGenerator):
    """Generate services priced from the catalog, with their installment plans."""

    def __init__(
        self,
        seed: int | None = None,
        catalog: list[CatalogEntry] | None = None,
    ) -> None:
        super().__init__(seed)
        entries = catalog if catalog is not None else list(DEFAULT_ENTRIES)
        self.entries = [e for e in entries if not e.is_placeholder]

    def generate_for_client(
        self,
        client: Client,
        reference: datetime | None = None,
    ) -> tuple[Service, list[Installment]]:
        """Generate a service for a client with pending installments.

        Parameters
        ----------
        client : Client
            Owner of the service.
        reference : datetime | None
            Latest creation time (defaults to now).

        Returns
        -------
        tuple[Service, list[Installment]]
            Generated service and its installments.
        """
        reference = reference or datetime.now()
        entry = random.choice(self.entries)
        count = random.choice([1, 1, 2, 3, 3, 4, 6, 10, 12])

        earliest = client.created_at or reference - timedelta(days=365)
        span = max(0, int((reference - earliest).total_seconds()))
        created_at = earliest + timedelta(seconds=random.randint(0, span))

        # Prices drift a little around the catalog base price
        price = (entry.base_price * Decimal(str(random.uniform(0.9, 1.2)))).quantize(Decimal("0.01"))

        service = Service(
            service_id=new_id(),
            client_id=client.client_id,
            service_name=entry.name,
            service_category=entry.category,
            total_amount=price,
            installments=count,
            status=ServiceStatus.ACTIVE,
            created_at=created_at,
            description=random.choice([None, None, self.fake.sentence(nb_words=6)]),
        )

        method = random.choices(PAYMENT_METHODS, weights=PAYMENT_METHOD_WEIGHTS, k=1)[0]
        installments = [
            Installment(
                installment_id=new_id(),
                service_id=service.service_id,
                installment_number=row.installment_number,
                amount=row.amount,
                due_date=row.due_date,
                status=row.status,
                payment_method=row.payment_method,
                created_at=created_at,
            )
            for row in generate_plan(price, count, start_date=created_at.date(), payment_method=method)
        ]
        return service, installments


class PaymentBehavior:
    """Simulate realistic client payment behavior."""

    def __init__(self, seed: int | None = None) -> None:
        if seed is not None:
            random.seed(seed)

    def apply_payment_behavior(
        self,
        installments: list[Installment],
        on_time_rate: float = 0.75,
        late_rate: float = 0.15,
        default_rate: float = 0.10,
        reference_date: date | None = None,
    ) -> list[Installment]:
        """Pay installments due by ``reference_date`` the way a client would.

        Parameters
        ----------
        installments : list[Installment]
            Installments of one service, in order.
        on_time_rate : float
            Probability of a client paying on time (default 75%).
        late_rate : float
            Probability of a client paying late (default 15%).
        default_rate : float
            Probability of a client stopping payments (default 10%).
        reference_date : date
            Current date; unpaid installments due before it end up overdue.

        Returns
        -------
        list[Installment]
            Installments with payment state applied.
        """
        if reference_date is None:
            reference_date = date.today()

        behavior = random.choices(
            ["good", "late", "defaulter"],
            weights=[on_time_rate, late_rate, default_rate],
            k=1,
        )[0]
        stops_after = random.randint(0, 3)

        result = []
        for inst in installments:
            if inst.due_date > reference_date:
                result.append(inst)
                continue

            if behavior == "good":
                paid_on = inst.due_date - timedelta(days=random.randint(0, 3))
            elif behavior == "late":
                paid_on = inst.due_date + timedelta(days=random.randint(1, 20))
            elif inst.installment_number <= stops_after:
                paid_on = inst.due_date + timedelta(days=random.randint(0, 10))
            else:
                paid_on = None

            if paid_on is not None and paid_on <= reference_date:
                result.append(apply_payment(inst, inst.payment_method or PaymentMethod.PIX, paid_on))
            else:
                result.append(inst)

        return sweep_overdue(result, reference_date)
