"""Tests for CPF validation and display formatters."""

from datetime import date
from decimal import Decimal

import pytest

from cashflow.validation import (
    cpf_check_digits,
    format_cnpj,
    format_cpf,
    format_currency,
    format_date,
    format_phone,
    format_postal_code,
    format_rg,
    only_digits,
    validate_cpf,
)


VALID_CPF = "52998224725"


class TestValidateCpf:
    """Tests for validate_cpf."""

    @pytest.mark.parametrize("cpf", ["52998224725", "529.982.247-25", "111.444.777-35", "12345678909"])
    def test_valid(self, cpf: str) -> None:
        assert validate_cpf(cpf) is True

    def test_wrong_first_check_digit(self) -> None:
        assert validate_cpf("529.982.247-35") is False

    def test_wrong_second_check_digit(self) -> None:
        assert validate_cpf("529.982.247-26") is False

    @pytest.mark.parametrize("digit", "0123456789")
    def test_repeated_digits_rejected(self, digit: str) -> None:
        assert validate_cpf(digit * 11) is False

    def test_masked_repeated_digits_rejected(self) -> None:
        assert validate_cpf("111.111.111-11") is False

    @pytest.mark.parametrize(
        "cpf",
        [
            VALID_CPF[:position] + digit + VALID_CPF[position + 1 :]
            for position in range(11)
            for digit in "0123456789"
            if digit != VALID_CPF[position]
        ],
    )
    def test_single_digit_change_rejected(self, cpf: str) -> None:
        assert validate_cpf(cpf) is False

    @pytest.mark.parametrize("cpf", ["", "123", "5299822472", "529982247250", "abc.def.ghi-jk"])
    def test_wrong_length_rejected(self, cpf: str) -> None:
        assert validate_cpf(cpf) is False

    def test_none_is_invalid(self) -> None:
        assert validate_cpf(None) is False  # type: ignore[arg-type]


class TestCpfCheckDigits:
    """Tests for cpf_check_digits."""

    def test_known_values(self) -> None:
        assert cpf_check_digits("529982247") == "25"
        assert cpf_check_digits("111.444.777") == "35"
        assert cpf_check_digits("123456789") == "09"

    def test_generated_cpf_validates(self) -> None:
        base = "987654321"
        assert validate_cpf(base + cpf_check_digits(base))

    def test_requires_nine_digits(self) -> None:
        with pytest.raises(ValueError):
            cpf_check_digits("12345")


class TestOnlyDigits:
    """Tests for only_digits."""

    def test_strips_mask(self) -> None:
        assert only_digits("(11) 98765-4321") == "11987654321"

    def test_none(self) -> None:
        assert only_digits(None) == ""


class TestFormatCpf:
    """Tests for format_cpf."""

    def test_full(self) -> None:
        assert format_cpf("52998224725") == "529.982.247-25"

    def test_partial(self) -> None:
        assert format_cpf("5299") == "529.9"
        assert format_cpf("5299822") == "529.982.2"

    def test_truncates_extra_digits(self) -> None:
        assert format_cpf("529982247251") == "529.982.247-25"

    def test_idempotent(self) -> None:
        assert format_cpf(format_cpf("52998224725")) == "529.982.247-25"

    def test_empty(self) -> None:
        assert format_cpf("") == ""


class TestFormatRg:
    """Tests for format_rg."""

    def test_full(self) -> None:
        assert format_rg("123456789") == "12.345.678-9"

    def test_idempotent(self) -> None:
        assert format_rg("12.345.678-9") == "12.345.678-9"


class TestFormatPhone:
    """Tests for format_phone."""

    def test_landline(self) -> None:
        assert format_phone("1133334444") == "(11) 3333-4444"

    def test_mobile(self) -> None:
        assert format_phone("11987654321") == "(11) 98765-4321"

    def test_truncates_extra_digits(self) -> None:
        assert format_phone("119876543210") == "(11) 98765-4321"

    def test_partial(self) -> None:
        assert format_phone("119") == "(11) 9"

    def test_idempotent(self) -> None:
        assert format_phone("(11) 98765-4321") == "(11) 98765-4321"


class TestFormatPostalCode:
    """Tests for format_postal_code."""

    def test_full(self) -> None:
        assert format_postal_code("01310100") == "01310-100"

    def test_truncates_extra_digits(self) -> None:
        assert format_postal_code("013101009") == "01310-100"


class TestFormatCnpj:
    """Tests for format_cnpj."""

    def test_full(self) -> None:
        assert format_cnpj("12345678000190") == "12.345.678/0001-90"


class TestFormatCurrency:
    """Tests for format_currency."""

    def test_grouping_and_decimal_comma(self) -> None:
        assert format_currency(Decimal("1234.56")) == "R$ 1.234,56"

    def test_millions(self) -> None:
        assert format_currency(Decimal("1234567.8")) == "R$ 1.234.567,80"

    def test_small_value(self) -> None:
        assert format_currency(Decimal("0.5")) == "R$ 0,50"

    def test_rounds_to_cents(self) -> None:
        assert format_currency(Decimal("100") / 3) == "R$ 33,33"

    def test_int_and_float(self) -> None:
        assert format_currency(450) == "R$ 450,00"
        assert format_currency(156.5) == "R$ 156,50"

    def test_negative(self) -> None:
        assert format_currency(Decimal("-10")) == "-R$ 10,00"


class TestFormatDate:
    """Tests for format_date."""

    def test_day_month_year(self) -> None:
        assert format_date(date(2026, 3, 7)) == "07/03/2026"
