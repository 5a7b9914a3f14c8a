"""cashflow: billing engine for a vehicle-documentation service provider."""

__version__ = "0.1.0"
