"""Domain models for the billing engine."""

from cashflow.models.base import Address, new_id
from cashflow.models.client import Client, ClientDocument
from cashflow.models.enums import (
    DocumentType,
    InstallmentStatus,
    PaymentMethod,
    ServiceStatus,
    Severity,
)
from cashflow.models.service import Installment, PlannedInstallment, Service, ServiceDetail
from cashflow.models.views import DashboardStats, OverduePayment, Receipt, ReportData

__all__ = [
    "Address",
    "Client",
    "ClientDocument",
    "DashboardStats",
    "DocumentType",
    "Installment",
    "InstallmentStatus",
    "OverduePayment",
    "PaymentMethod",
    "PlannedInstallment",
    "Receipt",
    "ReportData",
    "Service",
    "ServiceDetail",
    "ServiceStatus",
    "Severity",
    "new_id",
]
