"""Client registry: registration, edits, search and document metadata."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from cashflow.exceptions import DuplicateEntityError, ValidationError
from cashflow.logging import log_event
from cashflow.models import Client, ClientDocument, DocumentType, new_id
from cashflow.validation.schemas import ClientInput, parse

if TYPE_CHECKING:
    from cashflow.store.base import RecordStore

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ("street", "number", "neighborhood", "city", "state", "postal_code", "complement")


def document_path(client_id: str, document_type: DocumentType, file_name: str) -> str:
    """Storage path of a client document: ``<client_id>/<type>.<extension>``."""
    extension = file_name.rsplit(".", 1)[-1]
    return f"{client_id}/{DocumentType(document_type).value}.{extension}"


def _form_values(client: Client) -> dict[str, Any]:
    values = {
        "full_name": client.full_name,
        "rg": client.rg,
        "cpf": client.cpf,
        "phone": client.phone,
        "email": client.email,
    }
    values.update({name: getattr(client.address, name) for name in ADDRESS_FIELDS})
    return values


class ClientRegistry:
    """Client-facing operations on top of a record store.

    Parameters
    ----------
    store : RecordStore
        Backing record store.
    """

    def __init__(self, store: "RecordStore") -> None:
        self.store = store

    def register(self, data: ClientInput | Mapping[str, Any]) -> Client:
        """Validate and store a new client.

        Raises
        ------
        ValidationError
            If any field is malformed.
        DuplicateEntityError
            If the CPF is already registered.
        """
        form = parse(ClientInput, data)
        existing = self.store.find_client_by_cpf(form.cpf)
        if existing is not None:
            raise DuplicateEntityError("CPF already registered", detail=f"client {existing.client_id}")

        client = self.store.add_client(
            Client(
                client_id=new_id(),
                full_name=form.full_name,
                rg=form.rg,
                cpf=form.cpf,
                phone=form.phone,
                email=form.email,
                address=form.address(),
            )
        )
        log_event(logger, "Client registered", client_id=client.client_id)
        return client

    def update(self, client_id: str, **changes: Any) -> Client:
        """Edit client fields; the merged record is validated again."""
        current = self.store.get_client(client_id)
        values = _form_values(current)
        unknown = set(changes) - set(values)
        if unknown:
            raise ValidationError("Unknown client field(s)", detail=", ".join(sorted(unknown)))
        values.update(changes)
        form = parse(ClientInput, values)

        if form.cpf != current.cpf:
            holder = self.store.find_client_by_cpf(form.cpf)
            if holder is not None and holder.client_id != client_id:
                raise DuplicateEntityError("CPF already registered", detail=f"client {holder.client_id}")

        updated = self.store.update_client(
            client_id,
            full_name=form.full_name,
            rg=form.rg,
            cpf=form.cpf,
            phone=form.phone,
            email=form.email,
            address=form.address(),
        )
        log_event(logger, "Client updated", client_id=client_id, fields=",".join(sorted(changes)))
        return updated

    def delete(self, client_id: str) -> None:
        """Delete a client with its documents, services and installments."""
        self.store.delete_client(client_id)
        log_event(logger, "Client deleted", client_id=client_id)

    def get(self, client_id: str) -> Client:
        return self.store.get_client(client_id)

    def list_clients(self) -> list[Client]:
        """All clients, newest first."""
        return self.store.list_clients()

    def search(self, term: str) -> list[Client]:
        """Clients matching ``term`` by name, email, CPF or phone."""
        return self.store.search_clients(term)

    def filter_by_documents(self, clients: Iterable[Client], complete: bool) -> list[Client]:
        """Keep clients with at least one document (``complete``) or none."""
        return [c for c in clients if bool(self.store.list_documents(c.client_id)) == complete]

    # Documents
    def attach_document(
        self,
        client_id: str,
        document_type: DocumentType,
        file_name: str,
        file_size: int,
    ) -> ClientDocument:
        """Record an uploaded document, replacing any previous one of that type."""
        if file_size < 0:
            raise ValidationError("File size must not be negative", detail=str(file_size))
        document_type = DocumentType(document_type)
        document = self.store.upsert_document(
            ClientDocument(
                document_id=new_id(),
                client_id=client_id,
                document_type=document_type,
                file_name=file_name,
                file_path=document_path(client_id, document_type, file_name),
                file_size=file_size,
            )
        )
        log_event(
            logger,
            "Document attached",
            client_id=client_id,
            document_type=document_type.value,
            path=document.file_path,
        )
        return document

    def list_documents(self, client_id: str) -> list[ClientDocument]:
        return self.store.list_documents(client_id)

    def remove_document(self, document_id: str) -> ClientDocument:
        """Forget a document record and return it."""
        document = self.store.delete_document(document_id)
        log_event(logger, "Document removed", document_id=document_id, client_id=document.client_id)
        return document
