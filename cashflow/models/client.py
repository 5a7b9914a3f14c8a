"""Client models."""

from dataclasses import dataclass, field
from datetime import datetime

from cashflow.models.base import Address
from cashflow.models.enums import DocumentType


@dataclass
class Client:
    """Registered client (customer of the service provider)."""

    client_id: str
    full_name: str
    rg: str  # digits only
    cpf: str  # 11 digits, check-digit valid
    phone: str  # digits only
    email: str
    address: Address = field(default_factory=Address)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class ClientDocument:
    """Metadata of an uploaded identity or address document."""

    document_id: str
    client_id: str
    document_type: DocumentType
    file_name: str
    file_path: str  # "{client_id}/{document_type}.{ext}" in the storage bucket
    file_size: int
    uploaded_at: datetime | None = None
