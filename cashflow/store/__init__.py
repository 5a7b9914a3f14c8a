"""Record stores for clients, services and installments."""

from cashflow.store.base import RecordStore
from cashflow.store.memory import InMemoryStore
from cashflow.store.postgres import PostgresStore

__all__ = ["InMemoryStore", "PostgresStore", "RecordStore"]
