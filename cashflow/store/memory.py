"""In-memory record store with referential integrity."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from cashflow.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    ReferentialIntegrityError,
    StoreError,
)
from cashflow.models import (
    Client,
    ClientDocument,
    Installment,
    InstallmentStatus,
    Service,
    ServiceDetail,
)
from cashflow.store.base import KEY_FIELDS, RecordStore
from cashflow.validation.formatters import only_digits


def _apply(record: Any, changes: dict[str, Any]) -> Any:
    """Return a copy of ``record`` with ``changes`` applied."""
    known = {f.name for f in dataclasses.fields(record)}
    unknown = set(changes) - known
    if unknown:
        raise StoreError(
            f"Unknown field(s) for {type(record).__name__}",
            detail=", ".join(sorted(unknown)),
        )
    keys = KEY_FIELDS.intersection(changes)
    if keys:
        raise StoreError(
            f"Key field(s) of {type(record).__name__} cannot be changed",
            detail=", ".join(sorted(keys)),
        )
    return dataclasses.replace(record, **changes)


@dataclass
class InMemoryStore(RecordStore):
    """Dict-backed store for clients, documents, services and installments."""

    # Primary entities
    clients: dict[str, Client] = field(default_factory=dict)
    documents: dict[str, ClientDocument] = field(default_factory=dict)
    services: dict[str, Service] = field(default_factory=dict)
    installments: dict[str, Installment] = field(default_factory=dict)

    # Relationship indexes
    _client_services: dict[str, list[str]] = field(default_factory=dict)
    _client_documents: dict[str, list[str]] = field(default_factory=dict)
    _service_installments: dict[str, list[str]] = field(default_factory=dict)
    _cpf_index: dict[str, str] = field(default_factory=dict)

    # Clients
    def add_client(self, client: Client) -> Client:
        """Add a client to the store."""
        cpf = only_digits(client.cpf)
        if cpf in self._cpf_index:
            raise DuplicateEntityError(
                "CPF already registered",
                detail=f"client {self._cpf_index[cpf]}",
            )

        if client.created_at is None:
            client = dataclasses.replace(client, created_at=datetime.now())
        self.clients[client.client_id] = client
        self._cpf_index[cpf] = client.client_id
        self._client_services[client.client_id] = []
        self._client_documents[client.client_id] = []
        return client

    def get_client(self, client_id: str) -> Client:
        """Get a client by id."""
        try:
            return self.clients[client_id]
        except KeyError:
            raise EntityNotFoundError(f"Client {client_id} not found") from None

    def update_client(self, client_id: str, **changes: Any) -> Client:
        """Update client fields."""
        current = self.get_client(client_id)
        updated = _apply(current, {**changes, "updated_at": datetime.now()})

        old_cpf, new_cpf = only_digits(current.cpf), only_digits(updated.cpf)
        if new_cpf != old_cpf:
            if new_cpf in self._cpf_index:
                raise DuplicateEntityError(
                    "CPF already registered",
                    detail=f"client {self._cpf_index[new_cpf]}",
                )
            del self._cpf_index[old_cpf]
            self._cpf_index[new_cpf] = client_id

        self.clients[client_id] = updated
        return updated

    def delete_client(self, client_id: str) -> None:
        """Delete a client and everything that belongs to it."""
        client = self.get_client(client_id)
        for service_id in list(self._client_services.get(client_id, [])):
            self.delete_service(service_id)
        for document_id in list(self._client_documents.get(client_id, [])):
            self.documents.pop(document_id, None)

        del self.clients[client_id]
        self._cpf_index.pop(only_digits(client.cpf), None)
        self._client_services.pop(client_id, None)
        self._client_documents.pop(client_id, None)

    def list_clients(self) -> list[Client]:
        """Get all clients, newest first."""
        return sorted(self.clients.values(), key=_created_key, reverse=True)

    def search_clients(self, term: str) -> list[Client]:
        """Case-insensitive substring search over name, CPF, phone and email."""
        needle = term.strip().lower()
        if not needle:
            return self.list_clients()
        digits = only_digits(needle)
        return [
            client
            for client in self.list_clients()
            if needle in client.full_name.lower()
            or needle in client.email.lower()
            or (digits and (digits in client.cpf or digits in client.phone))
        ]

    def find_client_by_cpf(self, cpf: str) -> Client | None:
        """Get the client holding a CPF."""
        client_id = self._cpf_index.get(only_digits(cpf))
        return self.clients[client_id] if client_id else None

    def count_clients(self) -> int:
        return len(self.clients)

    # Documents
    def upsert_document(self, document: ClientDocument) -> ClientDocument:
        """Add document metadata, replacing any previous one of the same type."""
        if document.client_id not in self.clients:
            raise ReferentialIntegrityError(f"Client {document.client_id} not found")

        if document.uploaded_at is None:
            document = dataclasses.replace(document, uploaded_at=datetime.now())

        index = self._client_documents[document.client_id]
        for existing_id in list(index):
            if self.documents[existing_id].document_type == document.document_type:
                index.remove(existing_id)
                del self.documents[existing_id]

        self.documents[document.document_id] = document
        index.append(document.document_id)
        return document

    def list_documents(self, client_id: str) -> list[ClientDocument]:
        """Get all documents for a client."""
        self.get_client(client_id)
        return [self.documents[did] for did in self._client_documents[client_id]]

    def delete_document(self, document_id: str) -> ClientDocument:
        """Remove a document record."""
        document = self.documents.pop(document_id, None)
        if document is None:
            raise EntityNotFoundError(f"Document {document_id} not found")
        self._client_documents[document.client_id].remove(document_id)
        return document

    # Services
    def create_service(self, service: Service, installments: list[Installment]) -> ServiceDetail:
        """Add a service with its installments; nothing is stored if any check fails."""
        if service.client_id not in self.clients:
            raise ReferentialIntegrityError(f"Client {service.client_id} not found")
        if service.service_id in self.services:
            raise StoreError(f"Service {service.service_id} already exists")
        for inst in installments:
            if inst.service_id != service.service_id:
                raise ReferentialIntegrityError(
                    f"Installment {inst.installment_id} does not belong to service {service.service_id}"
                )
            if inst.installment_id in self.installments:
                raise StoreError(f"Installment {inst.installment_id} already exists")

        now = datetime.now()
        if service.created_at is None:
            service = dataclasses.replace(service, created_at=now)
        stored = [
            inst if inst.created_at is not None else dataclasses.replace(inst, created_at=now)
            for inst in installments
        ]

        self.services[service.service_id] = service
        self._client_services[service.client_id].append(service.service_id)
        self._service_installments[service.service_id] = []
        for inst in stored:
            self.installments[inst.installment_id] = inst
            self._service_installments[service.service_id].append(inst.installment_id)

        return self.get_service_detail(service.service_id)

    def get_service(self, service_id: str) -> Service:
        """Get a service by id."""
        try:
            return self.services[service_id]
        except KeyError:
            raise EntityNotFoundError(f"Service {service_id} not found") from None

    def get_service_detail(self, service_id: str) -> ServiceDetail:
        """Get a service joined with its client and installments."""
        service = self.get_service(service_id)
        return ServiceDetail(
            service=service,
            client=self.clients[service.client_id],
            installments=self._installments_of(service_id),
        )

    def update_service(self, service_id: str, **changes: Any) -> Service:
        """Update service fields."""
        updated = _apply(self.get_service(service_id), changes)
        self.services[service_id] = updated
        return updated

    def delete_service(self, service_id: str) -> None:
        """Delete a service and its installments."""
        service = self.get_service(service_id)
        for installment_id in self._service_installments.pop(service_id, []):
            self.installments.pop(installment_id, None)
        self._client_services[service.client_id].remove(service_id)
        del self.services[service_id]

    def list_service_details(self, client_id: str | None = None) -> list[ServiceDetail]:
        """Get services with client and installments, newest first."""
        if client_id is None:
            service_ids = list(self.services)
        else:
            self.get_client(client_id)
            service_ids = list(self._client_services[client_id])
        services = sorted((self.services[sid] for sid in service_ids), key=_created_key, reverse=True)
        return [self.get_service_detail(s.service_id) for s in services]

    # Installments
    def get_installment(self, installment_id: str) -> Installment:
        """Get an installment by id."""
        try:
            return self.installments[installment_id]
        except KeyError:
            raise EntityNotFoundError(f"Installment {installment_id} not found") from None

    def update_installment(self, installment_id: str, **changes: Any) -> Installment:
        """Update installment fields."""
        updated = _apply(self.get_installment(installment_id), changes)
        self.installments[installment_id] = updated
        return updated

    def list_installments(self, status: InstallmentStatus | None = None) -> list[Installment]:
        """Get all installments, optionally filtered by status."""
        return [
            inst
            for inst in self.installments.values()
            if status is None or inst.status == status
        ]

    def update_overdue_installments(self, today: date) -> int:
        """Flip pending installments due before ``today`` to overdue."""
        changed = 0
        for installment_id, inst in self.installments.items():
            if inst.status == InstallmentStatus.PENDING and inst.due_date < today:
                self.installments[installment_id] = dataclasses.replace(
                    inst, status=InstallmentStatus.OVERDUE
                )
                changed += 1
        return changed

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "clients": len(self.clients),
            "documents": len(self.documents),
            "services": len(self.services),
            "installments": len(self.installments),
        }

    def _installments_of(self, service_id: str) -> list[Installment]:
        ids = self._service_installments.get(service_id, [])
        return sorted((self.installments[i] for i in ids), key=lambda i: i.installment_number)


def _created_key(record: Client | Service) -> datetime:
    return record.created_at or datetime.min
