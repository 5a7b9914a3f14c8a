"""Faker-based sample data generators."""

from cashflow.generators.client import ClientGenerator
from cashflow.generators.service import PaymentBehavior, ServiceGenerator

__all__ = ["ClientGenerator", "PaymentBehavior", "ServiceGenerator"]
