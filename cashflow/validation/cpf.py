"""Brazilian CPF check-digit validation."""

import re

_NON_DIGITS = re.compile(r"\D")


def _check_digit(digits: list[int]) -> int:
    """Mod-11 check digit over ``digits`` with weights descending to 2."""
    weight = len(digits) + 1
    total = sum(d * w for d, w in zip(digits, range(weight, 1, -1)))
    remainder = 11 - (total % 11)
    return 0 if remainder >= 10 else remainder


def cpf_check_digits(first_nine: str) -> str:
    """Compute the two check digits for the first nine CPF digits.

    Parameters
    ----------
    first_nine : str
        Nine digits (any mask characters are ignored).

    Returns
    -------
    str
        The 10th and 11th digits.
    """
    digits = [int(c) for c in _NON_DIGITS.sub("", first_nine)]
    if len(digits) != 9:
        raise ValueError(f"expected 9 digits, got {len(digits)}")
    d1 = _check_digit(digits)
    d2 = _check_digit(digits + [d1])
    return f"{d1}{d2}"


def validate_cpf(cpf: str) -> bool:
    """Return True if ``cpf`` is a check-digit-valid CPF.

    Masking characters are stripped first. Anything other than 11 digits,
    and the eleven-identical-digit sequences, are rejected.
    """
    raw = _NON_DIGITS.sub("", cpf or "")
    if len(raw) != 11 or raw == raw[0] * 11:
        return False

    digits = [int(c) for c in raw]
    if _check_digit(digits[:9]) != digits[9]:
        return False
    return _check_digit(digits[:10]) == digits[10]
