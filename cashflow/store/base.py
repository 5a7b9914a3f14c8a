"""Record store interface shared by the in-memory and Postgres backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Any

from cashflow.models import (
    Client,
    ClientDocument,
    Installment,
    InstallmentStatus,
    Service,
    ServiceDetail,
)


# Identity and parent links are fixed at insert time
KEY_FIELDS = frozenset({"client_id", "service_id", "installment_id", "document_id"})


class RecordStore(ABC):
    """Opaque persistence collaborator for clients, services and installments.

    Every lookup of an unknown id raises
    :class:`~cashflow.exceptions.EntityNotFoundError`; writes that point at
    a missing parent raise
    :class:`~cashflow.exceptions.ReferentialIntegrityError`. Backend failures
    propagate unchanged; nothing here retries.
    """

    # Clients
    @abstractmethod
    def add_client(self, client: Client) -> Client:
        """Insert a client; a CPF already on file raises ``DuplicateEntityError``."""

    @abstractmethod
    def get_client(self, client_id: str) -> Client:
        """Fetch one client."""

    @abstractmethod
    def update_client(self, client_id: str, **changes: Any) -> Client:
        """Apply field changes to a client and return the stored version."""

    @abstractmethod
    def delete_client(self, client_id: str) -> None:
        """Delete a client together with its documents, services and installments."""

    @abstractmethod
    def list_clients(self) -> list[Client]:
        """All clients, newest first."""

    @abstractmethod
    def search_clients(self, term: str) -> list[Client]:
        """Clients whose name, CPF, phone or email contains ``term``."""

    @abstractmethod
    def find_client_by_cpf(self, cpf: str) -> Client | None:
        """Client holding ``cpf`` (digits only), if any."""

    @abstractmethod
    def count_clients(self) -> int:
        """Number of registered clients."""

    # Documents
    @abstractmethod
    def upsert_document(self, document: ClientDocument) -> ClientDocument:
        """Store document metadata, replacing the client's previous one of the same type."""

    @abstractmethod
    def list_documents(self, client_id: str) -> list[ClientDocument]:
        """Documents attached to a client."""

    @abstractmethod
    def delete_document(self, document_id: str) -> ClientDocument:
        """Remove document metadata and return what was removed."""

    # Services
    @abstractmethod
    def create_service(self, service: Service, installments: list[Installment]) -> ServiceDetail:
        """Insert a service and all its installments atomically."""

    @abstractmethod
    def get_service(self, service_id: str) -> Service:
        """Fetch one service."""

    @abstractmethod
    def get_service_detail(self, service_id: str) -> ServiceDetail:
        """Fetch one service with its client and installments."""

    @abstractmethod
    def update_service(self, service_id: str, **changes: Any) -> Service:
        """Apply field changes to a service."""

    @abstractmethod
    def delete_service(self, service_id: str) -> None:
        """Delete a service and its installments."""

    @abstractmethod
    def list_service_details(self, client_id: str | None = None) -> list[ServiceDetail]:
        """Services joined with client and installments, newest first."""

    # Installments
    @abstractmethod
    def get_installment(self, installment_id: str) -> Installment:
        """Fetch one installment."""

    @abstractmethod
    def update_installment(self, installment_id: str, **changes: Any) -> Installment:
        """Apply field changes to an installment."""

    @abstractmethod
    def list_installments(self, status: InstallmentStatus | None = None) -> list[Installment]:
        """Installments, optionally restricted to one status."""

    @abstractmethod
    def update_overdue_installments(self, today: date) -> int:
        """Mark every pending installment due before ``today`` as overdue.

        Returns
        -------
        int
            Number of installments that changed status.
        """
