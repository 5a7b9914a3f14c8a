"""PostgreSQL record store (hosted Postgres / Supabase schema)."""

from __future__ import annotations

import logging
from datetime import date
from enum import Enum
from typing import Any

import psycopg
from psycopg import sql
from psycopg.errors import ForeignKeyViolation, UniqueViolation
from psycopg.rows import dict_row

from cashflow.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    ReferentialIntegrityError,
    StoreError,
)
from cashflow.models import (
    Address,
    Client,
    ClientDocument,
    DocumentType,
    Installment,
    InstallmentStatus,
    PaymentMethod,
    Service,
    ServiceDetail,
    ServiceStatus,
)
from cashflow.serialization import to_row
from cashflow.store.base import KEY_FIELDS, RecordStore
from cashflow.validation.formatters import only_digits

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS clients (
    id UUID PRIMARY KEY,
    full_name TEXT NOT NULL,
    rg TEXT NOT NULL,
    cpf CHAR(11) NOT NULL UNIQUE,
    phone TEXT NOT NULL,
    email TEXT NOT NULL,
    street TEXT, number TEXT, neighborhood TEXT, city TEXT, state TEXT,
    zip_code TEXT, complement TEXT, country TEXT DEFAULT 'BR',
    created_at TIMESTAMP NOT NULL DEFAULT now(),
    updated_at TIMESTAMP
);

CREATE TABLE IF NOT EXISTS client_documents (
    id UUID PRIMARY KEY,
    client_id UUID NOT NULL REFERENCES clients(id) ON DELETE CASCADE,
    document_type TEXT NOT NULL CHECK (document_type IN ('rg', 'cpf', 'address_proof')),
    file_name TEXT NOT NULL,
    file_path TEXT NOT NULL,
    file_size INTEGER NOT NULL,
    uploaded_at TIMESTAMP NOT NULL DEFAULT now(),
    UNIQUE (client_id, document_type)
);

CREATE TABLE IF NOT EXISTS services (
    id UUID PRIMARY KEY,
    client_id UUID NOT NULL REFERENCES clients(id) ON DELETE CASCADE,
    service_name TEXT NOT NULL,
    service_category TEXT NOT NULL,
    total_amount NUMERIC(12, 2) NOT NULL CHECK (total_amount > 0),
    installments INTEGER NOT NULL CHECK (installments BETWEEN 1 AND 12),
    status TEXT NOT NULL DEFAULT 'active' CHECK (status IN ('active', 'completed', 'cancelled')),
    description TEXT,
    created_at TIMESTAMP NOT NULL DEFAULT now()
);

CREATE TABLE IF NOT EXISTS service_installments (
    id UUID PRIMARY KEY,
    service_id UUID NOT NULL REFERENCES services(id) ON DELETE CASCADE,
    installment_number INTEGER NOT NULL,
    amount NUMERIC NOT NULL CHECK (amount >= 0),
    due_date DATE NOT NULL,
    paid_date DATE,
    payment_method TEXT CHECK (payment_method IN ('pix', 'debit', 'credit', 'cash')),
    status TEXT NOT NULL DEFAULT 'pending' CHECK (status IN ('pending', 'paid', 'overdue')),
    created_at TIMESTAMP NOT NULL DEFAULT now(),
    UNIQUE (service_id, installment_number)
);

CREATE OR REPLACE FUNCTION update_overdue_installments(ref_date DATE DEFAULT CURRENT_DATE)
RETURNS INTEGER AS $$
DECLARE
    changed INTEGER;
BEGIN
    UPDATE service_installments
       SET status = 'overdue'
     WHERE status = 'pending' AND due_date < ref_date;
    GET DIAGNOSTICS changed = ROW_COUNT;
    RETURN changed;
END;
$$ LANGUAGE plpgsql;
"""

# model field -> column, per table
CLIENT_COLUMNS = {
    "client_id": "id",
    "full_name": "full_name",
    "rg": "rg",
    "cpf": "cpf",
    "phone": "phone",
    "email": "email",
    "created_at": "created_at",
    "updated_at": "updated_at",
}
ADDRESS_COLUMNS = {
    "street": "street",
    "number": "number",
    "neighborhood": "neighborhood",
    "city": "city",
    "state": "state",
    "postal_code": "zip_code",
    "complement": "complement",
    "country": "country",
}
SERVICE_COLUMNS = {
    "service_id": "id",
    "client_id": "client_id",
    "service_name": "service_name",
    "service_category": "service_category",
    "total_amount": "total_amount",
    "installments": "installments",
    "status": "status",
    "description": "description",
    "created_at": "created_at",
}
INSTALLMENT_COLUMNS = {
    "installment_id": "id",
    "service_id": "service_id",
    "installment_number": "installment_number",
    "amount": "amount",
    "due_date": "due_date",
    "paid_date": "paid_date",
    "payment_method": "payment_method",
    "status": "status",
    "created_at": "created_at",
}
DOCUMENT_COLUMNS = {
    "document_id": "id",
    "client_id": "client_id",
    "document_type": "document_type",
    "file_name": "file_name",
    "file_path": "file_path",
    "file_size": "file_size",
    "uploaded_at": "uploaded_at",
}

TIMESTAMP_FIELDS = frozenset({"created_at", "updated_at", "uploaded_at"})


class PostgresStore(RecordStore):
    """Record store backed by PostgreSQL through psycopg 3.

    The connection runs in autocommit mode; the only multi-statement write
    (service plus installments) is wrapped in an explicit transaction.
    ``psycopg.Error`` from the server propagates unchanged, except for the
    unique/foreign-key violations mapped to the store's own exceptions.

    Parameters
    ----------
    connection_string : str
        libpq connection URL.
    """

    def __init__(self, connection_string: str) -> None:
        self.conn = psycopg.connect(connection_string, autocommit=True, row_factory=dict_row)

    def create_schema(self) -> None:
        """Create tables and the overdue sweep procedure if missing."""
        with self.conn.cursor() as cur:
            cur.execute(SCHEMA)
        logger.info("Database schema ensured")

    def close(self) -> None:
        """Close the connection."""
        self.conn.close()

    # Clients
    def add_client(self, client: Client) -> Client:
        row = _client_row(client)
        try:
            with self.conn.cursor() as cur:
                cur.execute(_insert("clients", row), row)
                stored = cur.fetchone()
        except UniqueViolation as exc:
            raise DuplicateEntityError("CPF already registered", detail=str(exc)) from exc
        return _client_from_row(stored)

    def get_client(self, client_id: str) -> Client:
        row = self._fetch_one("SELECT * FROM clients WHERE id = %s", (client_id,))
        if row is None:
            raise EntityNotFoundError(f"Client {client_id} not found")
        return _client_from_row(row)

    def update_client(self, client_id: str, **changes: Any) -> Client:
        address = changes.pop("address", None)
        columns = _columns(changes, CLIENT_COLUMNS, "Client")
        if address is not None:
            columns.update({ADDRESS_COLUMNS[k]: v for k, v in vars(address).items()})
        columns["updated_at"] = sql.SQL("now()")
        row = self._update("clients", client_id, columns, unique_error="CPF already registered")
        if row is None:
            raise EntityNotFoundError(f"Client {client_id} not found")
        return _client_from_row(row)

    def delete_client(self, client_id: str) -> None:
        if self._execute("DELETE FROM clients WHERE id = %s", (client_id,)) == 0:
            raise EntityNotFoundError(f"Client {client_id} not found")

    def list_clients(self) -> list[Client]:
        rows = self._fetch_all("SELECT * FROM clients ORDER BY created_at DESC")
        return [_client_from_row(r) for r in rows]

    def search_clients(self, term: str) -> list[Client]:
        needle = term.strip()
        if not needle:
            return self.list_clients()
        pattern = f"%{needle}%"
        digits = only_digits(needle)
        digit_pattern = f"%{digits}%" if digits else None
        rows = self._fetch_all(
            "SELECT * FROM clients"
            " WHERE full_name ILIKE %(p)s OR email ILIKE %(p)s"
            " OR (%(d)s::text IS NOT NULL AND (cpf LIKE %(d)s OR phone LIKE %(d)s))"
            " ORDER BY created_at DESC",
            {"p": pattern, "d": digit_pattern},
        )
        return [_client_from_row(r) for r in rows]

    def find_client_by_cpf(self, cpf: str) -> Client | None:
        row = self._fetch_one("SELECT * FROM clients WHERE cpf = %s", (only_digits(cpf),))
        return _client_from_row(row) if row else None

    def count_clients(self) -> int:
        row = self._fetch_one("SELECT COUNT(*) AS total FROM clients")
        return int(row["total"])

    # Documents
    def upsert_document(self, document: ClientDocument) -> ClientDocument:
        row = _document_row(document)
        query = sql.SQL(
            "{insert} ON CONFLICT (client_id, document_type) DO UPDATE SET"
            " id = EXCLUDED.id, file_name = EXCLUDED.file_name,"
            " file_path = EXCLUDED.file_path, file_size = EXCLUDED.file_size,"
            " uploaded_at = now() RETURNING *"
        ).format(insert=_insert("client_documents", row, returning=False))
        try:
            with self.conn.cursor() as cur:
                cur.execute(query, row)
                stored = cur.fetchone()
        except ForeignKeyViolation as exc:
            raise ReferentialIntegrityError(f"Client {document.client_id} not found") from exc
        return _document_from_row(stored)

    def list_documents(self, client_id: str) -> list[ClientDocument]:
        rows = self._fetch_all(
            "SELECT * FROM client_documents WHERE client_id = %s ORDER BY uploaded_at",
            (client_id,),
        )
        return [_document_from_row(r) for r in rows]

    def delete_document(self, document_id: str) -> ClientDocument:
        row = self._fetch_one("DELETE FROM client_documents WHERE id = %s RETURNING *", (document_id,))
        if row is None:
            raise EntityNotFoundError(f"Document {document_id} not found")
        return _document_from_row(row)

    # Services
    def create_service(self, service: Service, installments: list[Installment]) -> ServiceDetail:
        service_row = _service_row(service)
        installment_rows = [_installment_row(inst) for inst in installments]
        try:
            with self.conn.transaction():
                with self.conn.cursor() as cur:
                    cur.execute(_insert("services", service_row), service_row)
                    if installment_rows:
                        cur.executemany(
                            _insert("service_installments", installment_rows[0], returning=False),
                            installment_rows,
                        )
        except ForeignKeyViolation as exc:
            raise ReferentialIntegrityError(f"Client {service.client_id} not found") from exc
        logger.debug("Inserted service %s with %d installments", service.service_id, len(installment_rows))
        return self.get_service_detail(service.service_id)

    def get_service(self, service_id: str) -> Service:
        row = self._fetch_one("SELECT * FROM services WHERE id = %s", (service_id,))
        if row is None:
            raise EntityNotFoundError(f"Service {service_id} not found")
        return _service_from_row(row)

    def get_service_detail(self, service_id: str) -> ServiceDetail:
        service = self.get_service(service_id)
        return self._details([service])[0]

    def update_service(self, service_id: str, **changes: Any) -> Service:
        row = self._update("services", service_id, _columns(changes, SERVICE_COLUMNS, "Service"))
        if row is None:
            raise EntityNotFoundError(f"Service {service_id} not found")
        return _service_from_row(row)

    def delete_service(self, service_id: str) -> None:
        if self._execute("DELETE FROM services WHERE id = %s", (service_id,)) == 0:
            raise EntityNotFoundError(f"Service {service_id} not found")

    def list_service_details(self, client_id: str | None = None) -> list[ServiceDetail]:
        if client_id is None:
            rows = self._fetch_all("SELECT * FROM services ORDER BY created_at DESC")
        else:
            self.get_client(client_id)
            rows = self._fetch_all(
                "SELECT * FROM services WHERE client_id = %s ORDER BY created_at DESC",
                (client_id,),
            )
        return self._details([_service_from_row(r) for r in rows])

    # Installments
    def get_installment(self, installment_id: str) -> Installment:
        row = self._fetch_one("SELECT * FROM service_installments WHERE id = %s", (installment_id,))
        if row is None:
            raise EntityNotFoundError(f"Installment {installment_id} not found")
        return _installment_from_row(row)

    def update_installment(self, installment_id: str, **changes: Any) -> Installment:
        columns = _columns(changes, INSTALLMENT_COLUMNS, "Installment")
        row = self._update("service_installments", installment_id, columns)
        if row is None:
            raise EntityNotFoundError(f"Installment {installment_id} not found")
        return _installment_from_row(row)

    def list_installments(self, status: InstallmentStatus | None = None) -> list[Installment]:
        if status is None:
            rows = self._fetch_all("SELECT * FROM service_installments ORDER BY due_date")
        else:
            rows = self._fetch_all(
                "SELECT * FROM service_installments WHERE status = %s ORDER BY due_date",
                (status.value,),
            )
        return [_installment_from_row(r) for r in rows]

    def update_overdue_installments(self, today: date) -> int:
        row = self._fetch_one("SELECT update_overdue_installments(%s) AS changed", (today,))
        return int(row["changed"])

    # Helpers
    def _details(self, services: list[Service]) -> list[ServiceDetail]:
        if not services:
            return []
        service_ids = [s.service_id for s in services]
        client_ids = list({s.client_id for s in services})
        clients = {
            str(r["id"]): _client_from_row(r)
            for r in self._fetch_all("SELECT * FROM clients WHERE id = ANY(%s::uuid[])", (client_ids,))
        }
        by_service: dict[str, list[Installment]] = {sid: [] for sid in service_ids}
        for r in self._fetch_all(
            "SELECT * FROM service_installments WHERE service_id = ANY(%s::uuid[])"
            " ORDER BY service_id, installment_number",
            (service_ids,),
        ):
            inst = _installment_from_row(r)
            by_service.setdefault(inst.service_id, []).append(inst)
        return [
            ServiceDetail(
                service=s,
                client=clients[s.client_id],
                installments=by_service[s.service_id],
            )
            for s in services
        ]

    def _fetch_one(self, query: Any, params: Any = None) -> dict | None:
        with self.conn.cursor() as cur:
            cur.execute(query, params)
            return cur.fetchone()

    def _fetch_all(self, query: Any, params: Any = None) -> list[dict]:
        with self.conn.cursor() as cur:
            cur.execute(query, params)
            return cur.fetchall()

    def _execute(self, query: Any, params: Any = None) -> int:
        with self.conn.cursor() as cur:
            cur.execute(query, params)
            return cur.rowcount

    def _update(
        self,
        table: str,
        record_id: str,
        columns: dict[str, Any],
        unique_error: str | None = None,
    ) -> dict | None:
        if not columns:
            return self._fetch_one(
                sql.SQL("SELECT * FROM {} WHERE id = %(id)s").format(sql.Identifier(table)),
                {"id": record_id},
            )
        assignments = []
        params: dict[str, Any] = {"id": record_id}
        for column, value in columns.items():
            if isinstance(value, sql.Composable):
                assignments.append(sql.SQL("{} = {}").format(sql.Identifier(column), value))
            else:
                assignments.append(
                    sql.SQL("{} = {}").format(sql.Identifier(column), sql.Placeholder(column))
                )
                params[column] = _db_value(value)
        query = sql.SQL("UPDATE {} SET {} WHERE id = %(id)s RETURNING *").format(
            sql.Identifier(table), sql.SQL(", ").join(assignments)
        )
        try:
            return self._fetch_one(query, params)
        except UniqueViolation as exc:
            if unique_error is None:
                raise
            raise DuplicateEntityError(unique_error, detail=str(exc)) from exc


def _insert(table: str, row: dict[str, Any], returning: bool = True) -> sql.Composed:
    query = sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
        sql.Identifier(table),
        sql.SQL(", ").join(sql.Identifier(c) for c in row),
        sql.SQL(", ").join(sql.Placeholder(c) for c in row),
    )
    if returning:
        query = query + sql.SQL(" RETURNING *")
    return query


def _columns(changes: dict[str, Any], mapping: dict[str, str], entity: str) -> dict[str, Any]:
    unknown = set(changes) - set(mapping)
    if unknown:
        raise StoreError(f"Unknown field(s) for {entity}", detail=", ".join(sorted(unknown)))
    keys = KEY_FIELDS.intersection(changes)
    if keys:
        raise StoreError(f"Key field(s) of {entity} cannot be changed", detail=", ".join(sorted(keys)))
    return {mapping[k]: v for k, v in changes.items()}


def _db_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _row(record: Any, mapping: dict[str, str]) -> dict[str, Any]:
    """Column mapping for an insert; unset timestamps fall back to the column default."""
    return {
        mapping[k]: v
        for k, v in to_row(record).items()
        if not (v is None and k in TIMESTAMP_FIELDS)
    }


def _client_row(client: Client) -> dict[str, Any]:
    return _row(client, {**CLIENT_COLUMNS, **ADDRESS_COLUMNS})


def _service_row(service: Service) -> dict[str, Any]:
    return _row(service, SERVICE_COLUMNS)


def _installment_row(inst: Installment) -> dict[str, Any]:
    return _row(inst, INSTALLMENT_COLUMNS)


def _document_row(document: ClientDocument) -> dict[str, Any]:
    return _row(document, DOCUMENT_COLUMNS)


def _client_from_row(row: dict[str, Any]) -> Client:
    return Client(
        client_id=str(row["id"]),
        full_name=row["full_name"],
        rg=row["rg"],
        cpf=row["cpf"],
        phone=row["phone"],
        email=row["email"],
        address=Address(
            **{field: row.get(column) or "" for field, column in ADDRESS_COLUMNS.items()}
        ),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _service_from_row(row: dict[str, Any]) -> Service:
    return Service(
        service_id=str(row["id"]),
        client_id=str(row["client_id"]),
        service_name=row["service_name"],
        service_category=row["service_category"],
        total_amount=row["total_amount"],
        installments=row["installments"],
        status=ServiceStatus(row["status"]),
        created_at=row.get("created_at"),
        description=row.get("description"),
    )


def _installment_from_row(row: dict[str, Any]) -> Installment:
    method = row.get("payment_method")
    return Installment(
        installment_id=str(row["id"]),
        service_id=str(row["service_id"]),
        installment_number=row["installment_number"],
        amount=row["amount"],
        due_date=row["due_date"],
        status=InstallmentStatus(row["status"]),
        paid_date=row.get("paid_date"),
        payment_method=PaymentMethod(method) if method else None,
        created_at=row.get("created_at"),
    )


def _document_from_row(row: dict[str, Any]) -> ClientDocument:
    return ClientDocument(
        document_id=str(row["id"]),
        client_id=str(row["client_id"]),
        document_type=DocumentType(row["document_type"]),
        file_name=row["file_name"],
        file_path=row["file_path"],
        file_size=row["file_size"],
        uploaded_at=row.get("uploaded_at"),
    )
