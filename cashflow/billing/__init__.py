"""Billing engine: plans, payments, overdue tracking, reminders, reports and receipts."""

from cashflow.billing.overdue import (
    OverdueAggregator,
    project_overdue,
    severity,
    total_overdue_amount,
)
from cashflow.billing.plan import check_plan, generate_plan, with_payment_method
from cashflow.billing.receipt import build_receipt, full_address, receipt_number
from cashflow.billing.reminders import (
    DEFAULT_TEMPLATE,
    ReminderDispatcher,
    render_reminder,
    whatsapp_url,
)
from cashflow.billing.report import (
    ReportAggregator,
    dashboard_stats,
    default_period,
    month_label,
    summarize,
)
from cashflow.billing.services import ServiceManager
from cashflow.billing.tracker import PaymentTracker, apply_payment, sweep_overdue

__all__ = [
    "DEFAULT_TEMPLATE",
    "OverdueAggregator",
    "PaymentTracker",
    "ReminderDispatcher",
    "ReportAggregator",
    "ServiceManager",
    "apply_payment",
    "build_receipt",
    "check_plan",
    "dashboard_stats",
    "default_period",
    "full_address",
    "generate_plan",
    "month_label",
    "project_overdue",
    "receipt_number",
    "render_reminder",
    "severity",
    "summarize",
    "sweep_overdue",
    "total_overdue_amount",
    "whatsapp_url",
    "with_payment_method",
]
