"""Client generator with Brazilian identity data."""

from __future__ import annotations

import random
from datetime import datetime, timedelta
from typing import Iterator

from cashflow.generators.base import BaseGenerator
from cashflow.models import Address, Client, new_id
from cashflow.validation.cpf import cpf_check_digits
from cashflow.validation.formatters import only_digits

# Area codes of the largest metro regions
AREA_CODES = ["11", "21", "31", "41", "47", "48", "51", "61", "62", "71", "81", "85"]


def random_cpf() -> str:
    """Random CPF with valid check digits (11 digits, unformatted)."""
    while True:
        base = "".join(str(random.randint(0, 9)) for _ in range(9))
        if len(set(base)) > 1:
            return base + cpf_check_digits(base)


class ClientGenerator(BaseGenerator):
    """Generate synthetic clients."""

    def generate(self, reference: datetime | None = None) -> Client:
        """Generate a single client registered up to a year before ``reference``.

        Returns
        -------
        Client
            Generated client.
        """
        reference = reference or datetime.now()
        created_at = reference - timedelta(days=random.randint(0, 365), minutes=random.randint(0, 1440))
        name = self.fake.name()

        return Client(
            client_id=new_id(),
            full_name=name,
            rg=f"{random.randint(10000000, 99999999)}{random.choice('0123456789X')}",
            cpf=random_cpf(),
            phone=f"{random.choice(AREA_CODES)}9{random.randint(10000000, 99999999)}",
            email=self.fake.free_email(),
            address=self._generate_address(),
            created_at=created_at,
        )

    def generate_batch(self, count: int, reference: datetime | None = None) -> Iterator[Client]:
        """Generate multiple clients.

        Parameters
        ----------
        count : int
            Number of clients to generate.
        reference : datetime | None
            Latest registration time.

        Yields
        ------
        Client
            Generated clients.
        """
        for _ in range(count):
            yield self.generate(reference)

    def _generate_address(self) -> Address:
        """Generate Brazilian address using pt_BR-specific methods."""
        return Address(
            street=self.fake.street_name(),
            number=str(random.randint(1, 9999)),
            neighborhood=self.fake.bairro(),
            city=self.fake.city(),
            state=self.fake.estado_sigla(),
            postal_code=only_digits(self.fake.postcode()),
            complement=random.choice(["", "", "", f"Apto {random.randint(1, 500)}"]),
        )
