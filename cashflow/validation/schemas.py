"""Input schemas for client registration and service creation.

Parsing goes through pydantic; failures surface as
:class:`cashflow.exceptions.ValidationError` with one line per failing
field in ``detail``.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Any, Mapping, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from cashflow.exceptions import ValidationError
from cashflow.models.base import Address
from cashflow.validation.cpf import validate_cpf
from cashflow.validation.formatters import only_digits

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class ClientInput(BaseModel):
    """Client registration / edit form."""

    model_config = ConfigDict(str_strip_whitespace=True)

    full_name: str = Field(min_length=2)
    rg: str
    cpf: str
    phone: str
    email: EmailStr
    street: str = ""
    number: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    complement: str = ""

    @field_validator("rg")
    @classmethod
    def _rg(cls, value: str) -> str:
        if len(value) < 7:
            raise ValueError("RG deve ter pelo menos 7 caracteres")
        # SP-issued RGs may end in an "X" check digit
        return re.sub(r"[^0-9A-Za-z]", "", value).upper()

    @field_validator("cpf")
    @classmethod
    def _cpf(cls, value: str) -> str:
        if not validate_cpf(value):
            raise ValueError("CPF inválido")
        return only_digits(value)

    @field_validator("phone")
    @classmethod
    def _phone(cls, value: str) -> str:
        digits = only_digits(value)
        if len(digits) < 10:
            raise ValueError("Telefone deve ser válido")
        return digits

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        return value.lower()

    @field_validator("postal_code")
    @classmethod
    def _postal_code(cls, value: str) -> str:
        digits = only_digits(value)
        if digits and len(digits) != 8:
            raise ValueError("CEP deve ter 8 dígitos")
        return digits

    @field_validator("state")
    @classmethod
    def _state(cls, value: str) -> str:
        return value.upper()

    def address(self) -> Address:
        return Address(
            street=self.street,
            number=self.number,
            neighborhood=self.neighborhood,
            city=self.city,
            state=self.state,
            postal_code=self.postal_code,
            complement=self.complement,
        )


class ServiceInput(BaseModel):
    """New service form."""

    model_config = ConfigDict(str_strip_whitespace=True)

    client_id: str = Field(min_length=1)
    service_name: str = Field(min_length=1)
    service_category: str = "Personalizado"
    total_amount: Decimal = Field(gt=0)
    installments: int = Field(default=1, ge=1, le=12)
    description: str | None = None


def parse(schema: type[SchemaT], data: SchemaT | Mapping[str, Any]) -> SchemaT:
    """Validate ``data`` against ``schema``.

    Parameters
    ----------
    schema : type[BaseModel]
        ``ClientInput`` or ``ServiceInput``.
    data : BaseModel | Mapping[str, Any]
        Raw form values, or an already-parsed instance (returned as-is).

    Returns
    -------
    BaseModel
        Parsed and normalised input.

    Raises
    ------
    ValidationError
        If any field fails validation.
    """
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(dict(data))
    except pydantic.ValidationError as exc:
        raise ValidationError(
            f"Invalid {schema.__name__}",
            detail=_describe(exc),
        ) from exc


def _describe(exc: pydantic.ValidationError) -> str:
    lines = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "input"
        message = error["msg"].removeprefix("Value error, ")
        lines.append(f"{location}: {message}")
    return "; ".join(lines)
