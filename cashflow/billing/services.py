"""Service creation and maintenance."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Mapping

from cashflow.billing.plan import check_plan, generate_plan
from cashflow.catalog import CatalogEntry
from cashflow.exceptions import ValidationError
from cashflow.logging import log_event
from cashflow.models import (
    Installment,
    PlannedInstallment,
    Service,
    ServiceDetail,
    ServiceStatus,
    new_id,
)
from cashflow.validation.schemas import ServiceInput, parse

if TYPE_CHECKING:
    from cashflow.store.base import RecordStore

logger = logging.getLogger(__name__)

CUSTOM_SERVICE_NAME = "Serviço Personalizado"
EDITABLE_FIELDS = ("service_name", "service_category", "total_amount", "status", "description")


class ServiceManager:
    """Create, edit and query services with their installment plans.

    Parameters
    ----------
    store : RecordStore
        Backing record store.
    """

    def __init__(self, store: "RecordStore") -> None:
        self.store = store

    def create_service(
        self,
        data: ServiceInput | Mapping[str, Any],
        plan: list[PlannedInstallment] | None = None,
        today: date | None = None,
    ) -> ServiceDetail:
        """Create a service and its installments in one atomic write.

        Parameters
        ----------
        data : ServiceInput | Mapping[str, Any]
            Service form values.
        plan : list[PlannedInstallment] | None
            Reviewed installment plan. Generated from the form when omitted.
        today : date | None
            Plan start date. A reviewed plan must match the plan generated
            from this date in everything but payment methods.

        Returns
        -------
        ServiceDetail
            The stored service with client and installments.

        Raises
        ------
        ValidationError
            Malformed form, or a reviewed plan that differs from the
            generated one in numbering, amounts or due dates.
        EntityNotFoundError
            If the client does not exist.
        """
        form = parse(ServiceInput, data)
        self.store.get_client(form.client_id)

        if plan is None:
            plan = generate_plan(form.total_amount, form.installments, start_date=today)
        else:
            check_plan(plan, form.total_amount, form.installments, start_date=today)

        service = Service(
            service_id=new_id(),
            client_id=form.client_id,
            service_name=form.service_name,
            service_category=form.service_category,
            total_amount=form.total_amount,
            installments=form.installments,
            status=ServiceStatus.ACTIVE,
            description=form.description,
        )
        installments = [
            Installment(
                installment_id=new_id(),
                service_id=service.service_id,
                installment_number=row.installment_number,
                amount=row.amount,
                due_date=row.due_date,
                status=row.status,
                paid_date=row.paid_date,
                payment_method=row.payment_method,
            )
            for row in plan
        ]

        detail = self.store.create_service(service, installments)
        log_event(
            logger,
            "Service created",
            service_id=service.service_id,
            client_id=service.client_id,
            total=service.total_amount,
            installments=len(installments),
        )
        return detail

    def create_from_catalog(
        self,
        client_id: str,
        entry: CatalogEntry,
        count: int = 1,
        name: str | None = None,
        price: Decimal | None = None,
        plan: list[PlannedInstallment] | None = None,
        today: date | None = None,
    ) -> ServiceDetail:
        """Create a service priced from a catalog entry.

        The free-form ``custom`` entry takes ``name`` and ``price`` from the
        caller; other entries may override them.
        """
        if entry.is_placeholder:
            if price is None or Decimal(price) <= 0:
                raise ValidationError("Custom services need a positive price")
            name = name or CUSTOM_SERVICE_NAME

        return self.create_service(
            {
                "client_id": client_id,
                "service_name": name or entry.name,
                "service_category": entry.category,
                "total_amount": price if price is not None else entry.base_price,
                "installments": count,
            },
            plan=plan,
            today=today,
        )

    def update_service(self, service_id: str, **changes: Any) -> Service:
        """Edit name, category, total, status or description of a service.

        Installments are left untouched.
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(
                "Field(s) cannot be edited on a service",
                detail=", ".join(sorted(unknown)),
            )
        if "service_name" in changes and not str(changes["service_name"]).strip():
            raise ValidationError("Service name is required")
        if "total_amount" in changes:
            changes["total_amount"] = Decimal(changes["total_amount"])
            if changes["total_amount"] <= 0:
                raise ValidationError("Total amount must be positive")
        if "status" in changes:
            changes["status"] = ServiceStatus(changes["status"])

        updated = self.store.update_service(service_id, **changes)
        log_event(logger, "Service updated", service_id=service_id, fields=",".join(changes))
        return updated

    def delete_service(self, service_id: str) -> None:
        """Delete a service and its installments."""
        self.store.delete_service(service_id)
        log_event(logger, "Service deleted", service_id=service_id)

    def get(self, service_id: str) -> ServiceDetail:
        return self.store.get_service_detail(service_id)

    def list_services(self) -> list[ServiceDetail]:
        """All services, newest first."""
        return self.store.list_service_details()

    def list_for_client(self, client_id: str) -> list[ServiceDetail]:
        return self.store.list_service_details(client_id)

    def search(self, term: str) -> list[ServiceDetail]:
        """Services whose name, client name or category contains ``term``."""
        needle = term.strip().lower()
        details = self.list_services()
        if not needle:
            return details
        return [
            d
            for d in details
            if needle in d.service.service_name.lower()
            or needle in d.client.full_name.lower()
            or needle in d.service.service_category.lower()
        ]
