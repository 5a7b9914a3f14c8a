"""Predefined service catalog kept in a JSON file."""

from __future__ import annotations

import dataclasses
import json
import logging
import time
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path

from cashflow.exceptions import EntityNotFoundError, InvalidEntityStateError, ValidationError
from cashflow.serialization import to_dict

logger = logging.getLogger(__name__)

CUSTOM_ENTRY_ID = "custom"


@dataclass(frozen=True)
class CatalogEntry:
    """Predefined service with a suggested base price."""

    entry_id: str
    name: str
    base_price: Decimal
    category: str
    is_custom: bool = False

    @property
    def is_placeholder(self) -> bool:
        """The free-form entry whose name and price are typed in per service."""
        return self.entry_id == CUSTOM_ENTRY_ID


DEFAULT_ENTRIES: tuple[CatalogEntry, ...] = (
    CatalogEntry("1", "Licenciamento Anual", Decimal("450"), "Licenciamento"),
    CatalogEntry("2", "Transferência de Veículo", Decimal("890"), "Transferência"),
    CatalogEntry("3", "IPVA", Decimal("1200"), "Tributário"),
    CatalogEntry("4", "DPVAT", Decimal("156"), "Seguro"),
    CatalogEntry("5", "Mudança de Categoria", Decimal("320"), "Alteração"),
    CatalogEntry("6", "CNH Digital", Decimal("280"), "Habilitação"),
    CatalogEntry("7", "Renovação CNH", Decimal("380"), "Habilitação"),
    CatalogEntry("8", "Segunda Via CNH", Decimal("180"), "Habilitação"),
    CatalogEntry("9", "Multa de Trânsito", Decimal("250"), "Infrações"),
    CatalogEntry("10", "Recurso de Multa", Decimal("150"), "Infrações"),
    CatalogEntry(CUSTOM_ENTRY_ID, "Serviço Personalizado", Decimal("0"), "Personalizado"),
)


class ServiceCatalog:
    """Editable list of predefined services.

    The list is loaded from ``path``; a missing or unreadable file yields
    the built-in defaults. Every change is written back immediately.

    Parameters
    ----------
    path : Path | None
        JSON file backing the catalog. ``None`` keeps it in memory only.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self._entries: list[CatalogEntry] = self._load()

    def _load(self) -> list[CatalogEntry]:
        if self.path is None or not self.path.exists():
            return list(DEFAULT_ENTRIES)
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return [
                CatalogEntry(
                    entry_id=str(item["entry_id"]),
                    name=item["name"],
                    base_price=Decimal(str(item["base_price"])),
                    category=item["category"],
                    is_custom=bool(item.get("is_custom", False)),
                )
                for item in raw
            ]
        except (OSError, ValueError, KeyError, TypeError, InvalidOperation) as exc:
            logger.warning("Unreadable service catalog %s, using defaults: %s", self.path, exc)
            return list(DEFAULT_ENTRIES)

    def save(self) -> None:
        """Write the catalog to its file."""
        if self.path is None:
            return
        payload = [to_dict(entry) for entry in self._entries]
        self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.debug("Saved %d catalog entries to %s", len(self._entries), self.path)

    def entries(self) -> list[CatalogEntry]:
        return list(self._entries)

    def categories(self) -> list[str]:
        """Distinct categories in catalog order."""
        return list(dict.fromkeys(entry.category for entry in self._entries))

    def get(self, entry_id: str) -> CatalogEntry:
        """Get an entry by id."""
        for entry in self._entries:
            if entry.entry_id == entry_id:
                return entry
        raise EntityNotFoundError(f"Catalog entry {entry_id} not found")

    def add(
        self,
        name: str = "Novo Serviço",
        base_price: Decimal = Decimal("100"),
        category: str = "Personalizado",
    ) -> CatalogEntry:
        """Append a user-defined entry."""
        entry = CatalogEntry(
            entry_id=self._new_entry_id(),
            name=name,
            base_price=self._price(base_price),
            category=category,
            is_custom=True,
        )
        self._entries.append(entry)
        self.save()
        logger.info("Added catalog entry %s (%s)", entry.entry_id, entry.name)
        return entry

    def update(
        self,
        entry_id: str,
        name: str | None = None,
        base_price: Decimal | None = None,
        category: str | None = None,
    ) -> CatalogEntry:
        """Change name, base price or category of an entry."""
        current = self.get(entry_id)
        changes = {}
        if name is not None:
            changes["name"] = name
        if base_price is not None:
            changes["base_price"] = self._price(base_price)
        if category is not None:
            changes["category"] = category
        updated = dataclasses.replace(current, **changes)
        self._entries = [updated if e.entry_id == entry_id else e for e in self._entries]
        self.save()
        return updated

    def remove(self, entry_id: str) -> None:
        """Delete an entry; the free-form ``custom`` entry cannot be removed."""
        if entry_id == CUSTOM_ENTRY_ID:
            raise InvalidEntityStateError("The custom service entry cannot be removed")
        self.get(entry_id)
        self._entries = [e for e in self._entries if e.entry_id != entry_id]
        self.save()
        logger.info("Removed catalog entry %s", entry_id)

    def _new_entry_id(self) -> str:
        stamp = int(time.time() * 1000)
        existing = {e.entry_id for e in self._entries}
        while f"custom_{stamp}" in existing:
            stamp += 1
        return f"custom_{stamp}"

    @staticmethod
    def _price(value: Decimal | int | str) -> Decimal:
        try:
            price = Decimal(str(value))
        except InvalidOperation:
            raise ValidationError("Invalid base price", detail=repr(value)) from None
        if price < 0:
            raise ValidationError("Base price must not be negative", detail=str(price))
        return price
