"""Tests for the service catalog."""

import json
from decimal import Decimal
from pathlib import Path

import pytest

from cashflow.catalog import CUSTOM_ENTRY_ID, DEFAULT_ENTRIES, ServiceCatalog
from cashflow.exceptions import EntityNotFoundError, InvalidEntityStateError, ValidationError


class TestLoading:
    """Tests for loading the catalog."""

    def test_defaults_in_memory(self) -> None:
        catalog = ServiceCatalog()

        assert len(catalog.entries()) == 11
        assert catalog.get("3").name == "IPVA"
        assert catalog.get(CUSTOM_ENTRY_ID).is_placeholder

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        catalog = ServiceCatalog(tmp_path / "catalog.json")

        assert catalog.entries() == list(DEFAULT_ENTRIES)

    def test_corrupt_file_gives_defaults(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        path = tmp_path / "catalog.json"
        path.write_text("{not json", encoding="utf-8")

        catalog = ServiceCatalog(path)

        assert catalog.entries() == list(DEFAULT_ENTRIES)
        assert "Unreadable service catalog" in caplog.text

    def test_round_trip_through_file(self, tmp_path: Path) -> None:
        path = tmp_path / "catalog.json"
        catalog = ServiceCatalog(path)
        entry = catalog.add("Vistoria", Decimal("199.90"), "Vistoria")

        reloaded = ServiceCatalog(path)

        assert reloaded.get(entry.entry_id) == entry
        stored = json.loads(path.read_text(encoding="utf-8"))
        assert stored[-1]["base_price"] == "199.90"

    def test_categories_distinct_in_order(self) -> None:
        categories = ServiceCatalog().categories()

        assert categories[0] == "Licenciamento"
        assert categories.count("Habilitação") == 1
        assert categories[-1] == "Personalizado"


class TestEditing:
    """Tests for catalog edits."""

    def test_add_defaults(self) -> None:
        entry = ServiceCatalog().add()

        assert entry.entry_id.startswith("custom_")
        assert entry.name == "Novo Serviço"
        assert entry.base_price == Decimal("100")
        assert entry.is_custom

    def test_add_ids_unique(self) -> None:
        catalog = ServiceCatalog()

        first, second = catalog.add(), catalog.add()

        assert first.entry_id != second.entry_id

    def test_update(self) -> None:
        catalog = ServiceCatalog()

        updated = catalog.update("1", base_price="475.50")

        assert updated.base_price == Decimal("475.50")
        assert updated.name == "Licenciamento Anual"
        assert catalog.get("1") == updated

    def test_negative_price(self) -> None:
        with pytest.raises(ValidationError):
            ServiceCatalog().update("1", base_price=Decimal("-1"))

    def test_invalid_price(self) -> None:
        with pytest.raises(ValidationError):
            ServiceCatalog().add(base_price="abc")

    def test_remove(self) -> None:
        catalog = ServiceCatalog()

        catalog.remove("4")

        with pytest.raises(EntityNotFoundError):
            catalog.get("4")

    def test_custom_entry_cannot_be_removed(self) -> None:
        with pytest.raises(InvalidEntityStateError):
            ServiceCatalog().remove(CUSTOM_ENTRY_ID)

    def test_remove_missing(self) -> None:
        with pytest.raises(EntityNotFoundError):
            ServiceCatalog().remove("999")
