"""Display masks for Brazilian documents, phones, CEP and money.

Every mask strips its input to digits before applying the pattern, so the
functions accept partially typed values and re-masking a masked value is
a no-op.
"""

import re
from datetime import date
from decimal import Decimal

_NON_DIGITS = re.compile(r"\D")


def only_digits(value: str | None) -> str:
    """Drop every non-digit character."""
    return _NON_DIGITS.sub("", value or "")


def _mask(value: str | None, steps: list[tuple[str, str]]) -> str:
    result = only_digits(value)
    for pattern, replacement in steps:
        result = re.sub(pattern, replacement, result, count=1)
    return result


def format_cpf(value: str | None) -> str:
    """``12345678901`` -> ``123.456.789-01``."""
    return _mask(
        value,
        [
            (r"(\d{3})(\d)", r"\1.\2"),
            (r"(\d{3})(\d)", r"\1.\2"),
            (r"(\d{3})(\d{1,2})", r"\1-\2"),
            (r"(-\d{2})\d+?$", r"\1"),
        ],
    )


def format_rg(value: str | None) -> str:
    """``123456789`` -> ``12.345.678-9``."""
    return _mask(
        value,
        [
            (r"(\d{2})(\d)", r"\1.\2"),
            (r"(\d{3})(\d)", r"\1.\2"),
            (r"(\d{3})(\d{1,2})", r"\1-\2"),
            (r"(-\d)\d+?$", r"\1"),
        ],
    )


def format_phone(value: str | None) -> str:
    """``1133334444`` -> ``(11) 3333-4444``; ``11999998888`` -> ``(11) 99999-8888``."""
    return _mask(
        value,
        [
            (r"(\d{2})(\d)", r"(\1) \2"),
            (r"(\d{4})(\d)", r"\1-\2"),
            # a fifth local digit moves the dash: 9999-98888 -> 99999-8888
            (r"(\d{4})-(\d)(\d{4})", r"\1\2-\3"),
            (r"(-\d{4})\d+?$", r"\1"),
        ],
    )


def format_postal_code(value: str | None) -> str:
    """``01310100`` -> ``01310-100``."""
    return _mask(
        value,
        [
            (r"(\d{5})(\d)", r"\1-\2"),
            (r"(-\d{3})\d+?$", r"\1"),
        ],
    )


def format_cnpj(value: str | None) -> str:
    """``12345678000190`` -> ``12.345.678/0001-90``."""
    return _mask(
        value,
        [
            (r"(\d{2})(\d)", r"\1.\2"),
            (r"(\d{3})(\d)", r"\1.\2"),
            (r"(\d{3})(\d)", r"\1/\2"),
            (r"(\d{4})(\d{1,2})", r"\1-\2"),
            (r"(-\d{2})\d+?$", r"\1"),
        ],
    )


def format_currency(amount: Decimal | float | int) -> str:
    """Format an amount as Brazilian reais: ``R$ 1.234,56``."""
    value = Decimal(str(amount)).quantize(Decimal("0.01"))
    sign = "-" if value < 0 else ""
    text = f"{abs(value):,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"{sign}R$ {text}"


def format_date(value: date) -> str:
    """``date(2026, 10, 19)`` -> ``19/10/2026``."""
    return value.strftime("%d/%m/%Y")
