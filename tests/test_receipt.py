"""Tests for receipt data."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from cashflow.billing import build_receipt, full_address, receipt_number
from cashflow.billing.receipt import NO_ADDRESS
from cashflow.config import CompanyInfo
from cashflow.exceptions import EntityNotFoundError
from cashflow.models import Address, InstallmentStatus, PaymentMethod

PAID = InstallmentStatus.PAID


@pytest.fixture
def detail(make_installment, make_detail):
    """Service with two paid installments and one pending."""
    return make_detail(
        [
            make_installment(1, due=date(2026, 8, 5), status=PAID, paid_date=date(2026, 8, 5),
                             method=PaymentMethod.CASH),
            make_installment(2, due=date(2026, 9, 5), status=PAID, paid_date=date(2026, 9, 6)),
            make_installment(3, due=date(2026, 10, 5)),
        ],
        service_id="service-ab12",
    )


class TestFullAddress:
    """Tests for full_address."""

    def test_complete(self, sample_client) -> None:
        assert full_address(sample_client.address) == (
            "Rua Augusta, 100, - Consolação, São Paulo/SP, CEP: 01305-000"
        )

    def test_city_without_state_skipped(self) -> None:
        assert full_address(Address(street="Rua A", city="Santos")) == "Rua A"

    def test_empty(self) -> None:
        assert full_address(Address()) == NO_ADDRESS


class TestReceiptNumber:
    """Tests for receipt_number."""

    def test_format(self) -> None:
        issued = datetime(2026, 10, 19, 12, 0)
        millis = str(int(issued.timestamp() * 1000))

        number = receipt_number(issued, "service-ab12")

        assert number == f"{millis[-6:]}-ab12"


class TestBuildReceipt:
    """Tests for build_receipt."""

    def test_all_paid_installments(self, detail) -> None:
        receipt = build_receipt(detail, issued_at=datetime(2026, 10, 19, 12, 0))

        assert [i.installment_number for i in receipt.lines] == [1, 2]
        assert receipt.total_paid == Decimal("200.00")
        assert receipt.payment_method_labels == ("Dinheiro", "PIX")
        assert not receipt.single_installment
        assert receipt.client_cpf == "529.982.247-25"
        assert receipt.company_cnpj == "12.345.678/0001-90"
        assert receipt.service_total == Decimal("300.00")
        assert receipt.receipt_number.endswith("-ab12")

    def test_single_installment(self, detail) -> None:
        receipt = build_receipt(detail, installment_id="service-0001-inst-3")

        assert receipt.single_installment
        assert [i.installment_number for i in receipt.lines] == [3]
        assert receipt.total_paid == Decimal("100.00")

    def test_unknown_installment(self, detail) -> None:
        with pytest.raises(EntityNotFoundError):
            build_receipt(detail, installment_id="nope")

    def test_custom_company(self, detail) -> None:
        company = CompanyInfo(name="Outra LTDA", cnpj="11222333000144")

        receipt = build_receipt(detail, company=company)

        assert receipt.company_name == "Outra LTDA"
        assert receipt.company_cnpj == "11.222.333/0001-44"

    def test_nothing_paid(self, make_installment, make_detail) -> None:
        receipt = build_receipt(make_detail([make_installment(1)]))

        assert receipt.lines == ()
        assert receipt.total_paid == Decimal("0")
