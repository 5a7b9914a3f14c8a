"""Input validation and display formatting."""

from cashflow.validation.cpf import cpf_check_digits, validate_cpf
from cashflow.validation.formatters import (
    format_cnpj,
    format_cpf,
    format_currency,
    format_date,
    format_phone,
    format_postal_code,
    format_rg,
    only_digits,
)
from cashflow.validation.schemas import ClientInput, ServiceInput, parse

__all__ = [
    "ClientInput",
    "ServiceInput",
    "cpf_check_digits",
    "format_cnpj",
    "format_cpf",
    "format_currency",
    "format_date",
    "format_phone",
    "format_postal_code",
    "format_rg",
    "only_digits",
    "parse",
    "validate_cpf",
]
