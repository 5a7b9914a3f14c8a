#!/usr/bin/env python3
"""Generate sample billing data for validation.

Fills a record store with synthetic clients, services and installments,
runs the overdue sweep and writes clients, services, overdue payments,
reminder previews and the financial report as JSON files in local/.
With ``--postgres-url`` the records are loaded into PostgreSQL instead of
the in-memory store.
"""

import argparse
import json
import logging
import random
import sys
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from cashflow.billing import (
    OverdueAggregator,
    PaymentTracker,
    ReportAggregator,
    render_reminder,
    severity,
    whatsapp_url,
)
from cashflow.catalog import ServiceCatalog
from cashflow.config import CashflowConfig
from cashflow.generators.client import ClientGenerator
from cashflow.generators.service import PaymentBehavior, ServiceGenerator
from cashflow.logging import setup_logging
from cashflow.serialization import serialize_value
from cashflow.store import InMemoryStore, PostgresStore, RecordStore

logger = logging.getLogger("generate_sample_data")


def save_json(data: list | dict, filename: str, output_dir: Path) -> None:
    """Save data to JSON file."""
    filepath = output_dir / filename
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(serialize_value(data), f, indent=2, ensure_ascii=False)
    count = len(data) if isinstance(data, list) else 1
    logger.info("Saved %d records to %s", count, filepath)


def generate_clients(
    client_gen: ClientGenerator,
    store: RecordStore,
    num_clients: int,
    reference: datetime,
) -> list:
    """Generate and store clients."""
    logger.info("1. Generating clients...")
    clients = []
    for client in client_gen.generate_batch(num_clients, reference):
        clients.append(store.add_client(client))
    return clients


def generate_services(
    service_gen: ServiceGenerator,
    payment_behavior: PaymentBehavior,
    store: RecordStore,
    clients: list,
    reference: datetime,
) -> list:
    """Generate services with paid, pending and overdue installments."""
    logger.info("2. Generating services and installments...")
    details = []
    for client in clients:
        for _ in range(random.choice([1, 1, 2, 3])):
            service, installments = service_gen.generate_for_client(client, reference)
            paid = payment_behavior.apply_payment_behavior(
                installments, reference_date=reference.date()
            )
            details.append(store.create_service(service, paid))
    return details


def build_reminders(overdue: list, config: CashflowConfig) -> list[dict[str, Any]]:
    """Render the reminder message and link for each overdue payment."""
    reminders = []
    for payment in overdue:
        message = render_reminder(payment, config.reminders.template)
        reminders.append(
            {
                "installment_id": payment.installment_id,
                "client_name": payment.client_name,
                "severity": severity(payment.days_overdue),
                "message": message,
                "url": whatsapp_url(payment.client_phone, message, config.reminders.country_code),
            }
        )
    return reminders


def main() -> None:
    """Generate all sample data files."""
    parser = argparse.ArgumentParser(description="Generate sample billing data")
    parser.add_argument(
        "--clients",
        type=int,
        default=20,
        help="Number of clients to generate (default: 20)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--today",
        type=date.fromisoformat,
        default=None,
        help="Reference date, YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--postgres-url",
        type=str,
        default=None,
        help="Load into PostgreSQL at this URL instead of memory (default: DATABASE_URL)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=project_root / "local",
        help="Directory for the JSON files (default: local/)",
    )
    args = parser.parse_args()

    config = CashflowConfig.from_env()
    setup_logging(config.log_level, config.log_format)

    today = args.today or date.today()
    reference = datetime.combine(today, datetime.min.time()) + timedelta(hours=18)
    output_dir = args.output_dir
    output_dir.mkdir(parents=True, exist_ok=True)

    logger.info("=" * 60)
    logger.info("Generating sample billing data (seed=%d, today=%s)", args.seed, today)
    logger.info("=" * 60)

    postgres_url = args.postgres_url or config.postgres.url
    if postgres_url:
        store: RecordStore = PostgresStore(postgres_url)
        store.create_schema()
    else:
        store = InMemoryStore()

    client_gen = ClientGenerator(seed=args.seed)
    catalog = ServiceCatalog(config.catalog_path)
    service_gen = ServiceGenerator(seed=args.seed, catalog=catalog.entries())
    payment_behavior = PaymentBehavior(seed=args.seed)

    clients = generate_clients(client_gen, store, args.clients, reference)
    generate_services(service_gen, payment_behavior, store, clients, reference)

    logger.info("3. Running overdue sweep...")
    PaymentTracker(store).update_overdue_status(today)

    logger.info("4. Collecting overdue payments and building report...")
    overdue = OverdueAggregator(store).collect(today)
    reports = ReportAggregator(store)
    report = reports.build(today - timedelta(days=180), today, today=today)
    dashboard = reports.dashboard(today)

    details = store.list_service_details()
    save_json(clients, "clients.json", output_dir)
    save_json([d.service for d in details], "services.json", output_dir)
    save_json([i for d in details for i in d.installments], "installments.json", output_dir)
    save_json(overdue, "overdue_payments.json", output_dir)
    save_json(build_reminders(overdue, config), "reminders.json", output_dir)
    save_json(report, "report.json", output_dir)
    save_json(dashboard, "dashboard.json", output_dir)

    logger.info("=" * 60)
    logger.info("Clients:            %d", len(clients))
    logger.info("Services:           %d", len(details))
    logger.info("Overdue payments:   %d", len(overdue))
    logger.info("All files saved to: %s", output_dir)
    logger.info("=" * 60)


if __name__ == "__main__":
    main()
