"""Base models shared across the billing domain."""

import uuid
from dataclasses import dataclass


def new_id() -> str:
    """Return a fresh record identifier (UUID4 string)."""
    return str(uuid.uuid4())


@dataclass
class Address:
    """Brazilian postal address.

    ``postal_code`` holds the 8 CEP digits without the mask; the
    ``00000-000`` form is a display concern.
    """

    street: str = ""
    number: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    complement: str = ""
    country: str = "BR"
