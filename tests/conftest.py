"""Pytest configuration and fixtures."""

from datetime import date, datetime
from decimal import Decimal
from typing import Callable

import pytest

from cashflow.models import (
    Address,
    Client,
    Installment,
    InstallmentStatus,
    PaymentMethod,
    Service,
    ServiceDetail,
)
from cashflow.store import InMemoryStore

# Check-digit-valid CPF
VALID_CPF = "52998224725"


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def today() -> date:
    """Fixed reference date."""
    return date(2026, 10, 19)


@pytest.fixture
def store() -> InMemoryStore:
    """Create a fresh store for each test."""
    return InMemoryStore()


@pytest.fixture
def sample_client() -> Client:
    """Create a sample client."""
    return Client(
        client_id="client-0001",
        full_name="Maria da Silva",
        rg="123456789",
        cpf=VALID_CPF,
        phone="11987654321",
        email="maria@example.com",
        address=Address(
            street="Rua Augusta",
            number="100",
            neighborhood="Consolação",
            city="São Paulo",
            state="SP",
            postal_code="01305000",
        ),
        created_at=datetime(2026, 1, 10, 9, 0),
    )


@pytest.fixture
def client_form() -> dict:
    """Raw client registration form values."""
    return {
        "full_name": "João Pereira",
        "rg": "12.345.678-9",
        "cpf": "529.982.247-25",
        "phone": "(11) 98765-4321",
        "email": "Joao@Example.com",
        "street": "Av. Paulista",
        "number": "1000",
        "neighborhood": "Bela Vista",
        "city": "São Paulo",
        "state": "sp",
        "postal_code": "01310-100",
    }


@pytest.fixture
def make_installment() -> Callable[..., Installment]:
    """Factory for installments with sensible defaults."""

    def _make(
        number: int = 1,
        amount: str = "100.00",
        due: date = date(2026, 10, 1),
        status: InstallmentStatus = InstallmentStatus.PENDING,
        paid_date: date | None = None,
        method: PaymentMethod | None = None,
        service_id: str = "service-0001",
    ) -> Installment:
        return Installment(
            installment_id=f"{service_id}-inst-{number}",
            service_id=service_id,
            installment_number=number,
            amount=Decimal(amount),
            due_date=due,
            status=status,
            paid_date=paid_date,
            payment_method=method,
        )

    return _make


@pytest.fixture
def make_detail(sample_client: Client) -> Callable[..., ServiceDetail]:
    """Factory for a service joined with client and installments."""

    def _make(
        installments: list[Installment],
        service_id: str = "service-0001",
        name: str = "Licenciamento Anual",
        category: str = "Licenciamento",
        total: str = "300.00",
        created_at: datetime = datetime(2026, 10, 5, 14, 30),
        client: Client | None = None,
    ) -> ServiceDetail:
        owner = client or sample_client
        return ServiceDetail(
            service=Service(
                service_id=service_id,
                client_id=owner.client_id,
                service_name=name,
                service_category=category,
                total_amount=Decimal(total),
                installments=len(installments),
                created_at=created_at,
            ),
            client=owner,
            installments=installments,
        )

    return _make
