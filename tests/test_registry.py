"""
Tests for the index registry.

Coverage is textual: table names match case-insensitively,
column names are case-sensitive substrings of the definition text.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from queryadvisor.exceptions import RegistryError
from queryadvisor.registry import (
    IndexRegistryEntry,
    IndexRegistrySnapshot,
    column_is_covered,
    load_registry,
)


# =============================================================================
# Snapshot construction
# =============================================================================


class TestSnapshotConstruction:
    def test_from_mapping_keeps_order(self) -> None:
        snapshot = IndexRegistrySnapshot.from_mapping({"B": "ix b", "A": "ix a"})
        assert snapshot.table_names == ("B", "A")
        assert len(snapshot) == 2

    def test_from_pairs_accepts_entries(self) -> None:
        entry = IndexRegistryEntry("T", "CREATE INDEX ix ON T(a);")
        snapshot = IndexRegistrySnapshot.from_pairs([entry, ("U", "ix u")])
        assert list(snapshot) == [entry, IndexRegistryEntry("U", "ix u")]

    def test_from_pairs_rejects_non_text(self) -> None:
        with pytest.raises(TypeError):
            IndexRegistrySnapshot.from_pairs([("T", 42)])  # type: ignore[list-item]

    def test_fields_are_stripped(self) -> None:
        snapshot = IndexRegistrySnapshot.from_mapping({"  Customers ": "\n ix \n"})
        assert list(snapshot) == [IndexRegistryEntry("Customers", "ix")]

    @pytest.mark.parametrize(
        "table,definition",
        [("Customers", ""), ("Customers", "   \n"), ("", "ix"), ("  ", "ix")],
    )
    def test_blank_fields_rejected(self, table: str, definition: str) -> None:
        with pytest.raises(ValueError):
            IndexRegistrySnapshot.from_pairs([(table, definition)])
        with pytest.raises(ValueError):
            IndexRegistrySnapshot.empty().with_entry(table, definition)

    @pytest.mark.parametrize("items", [["ab"], [("T", "ix", "extra")], [42]])
    def test_items_must_be_pairs(self, items: list[object]) -> None:
        with pytest.raises(TypeError):
            IndexRegistrySnapshot.coerce(items)  # type: ignore[arg-type]

    def test_coerce_none_is_empty(self) -> None:
        assert len(IndexRegistrySnapshot.coerce(None)) == 0

    def test_coerce_returns_snapshot_unchanged(self) -> None:
        snapshot = IndexRegistrySnapshot.from_mapping({"T": "ix"})
        assert IndexRegistrySnapshot.coerce(snapshot) is snapshot

    def test_coerce_mapping_and_pairs(self) -> None:
        from_mapping = IndexRegistrySnapshot.coerce({"T": "ix"})
        from_pairs = IndexRegistrySnapshot.coerce([("T", "ix")])
        assert from_mapping == from_pairs

    @pytest.mark.parametrize("value", ["T: ix", b"T", 42, 3.5])
    def test_coerce_rejects_unsupported_shapes(self, value: object) -> None:
        with pytest.raises(TypeError):
            IndexRegistrySnapshot.coerce(value)  # type: ignore[arg-type]

    def test_to_dict(self) -> None:
        snapshot = IndexRegistrySnapshot.from_mapping({"T": "ix t", "U": "ix u"})
        assert snapshot.to_dict() == {"T": "ix t", "U": "ix u"}


# =============================================================================
# Lookup and coverage
# =============================================================================


class TestLookup:
    def test_find_is_case_insensitive(self) -> None:
        snapshot = IndexRegistrySnapshot.from_mapping({"Customers": "ix"})
        entry = snapshot.find("CUSTOMERS")
        assert entry is not None
        assert entry.table_name == "Customers"
        assert snapshot.has_entry("customers")
        assert not snapshot.has_entry("Orders")

    def test_with_entry_returns_new_snapshot(self) -> None:
        original = IndexRegistrySnapshot.empty()
        updated = original.with_entry("T", "ix")

        assert len(original) == 0
        assert updated.has_entry("T")

    def test_without_table_returns_new_snapshot(self) -> None:
        original = IndexRegistrySnapshot.from_mapping({"T": "ix", "U": "ix"})
        trimmed = original.without_table("t")

        assert trimmed.table_names == ("U",)
        assert original.table_names == ("T", "U")


class TestCoverage:
    """column_is_covered consults only the query's tables."""

    def test_column_in_definition(self, t1_registry: IndexRegistrySnapshot) -> None:
        assert t1_registry.column_is_covered("x", ["T1"])

    def test_table_match_is_case_insensitive(self, t1_registry: IndexRegistrySnapshot) -> None:
        assert t1_registry.column_is_covered("x", ["t1"])

    def test_column_match_is_case_sensitive(self, t1_registry: IndexRegistrySnapshot) -> None:
        assert not t1_registry.column_is_covered("ix_t1_x", ["T1"])

    def test_substring_counts_as_covered(self, t1_registry: IndexRegistrySnapshot) -> None:
        # "DEX" occurs inside "INDEX"
        assert t1_registry.column_is_covered("DEX", ["T1"])

    def test_other_tables_are_ignored(self, t1_registry: IndexRegistrySnapshot) -> None:
        assert not t1_registry.column_is_covered("x", ["T2"])

    def test_uncovered_column(self, t1_registry: IndexRegistrySnapshot) -> None:
        assert not t1_registry.column_is_covered("y", ["T1", "T2"])

    def test_empty_registry_covers_nothing(self, empty_registry: IndexRegistrySnapshot) -> None:
        assert not column_is_covered("x", ["T1"], empty_registry)

    def test_module_level_function(self, t1_registry: IndexRegistrySnapshot) -> None:
        assert column_is_covered("x", ["T1"], t1_registry)


# =============================================================================
# File loading
# =============================================================================


class TestLoadRegistry:
    def test_yaml_mapping_with_text_and_list(self, registry_yaml: Path) -> None:
        snapshot = load_registry(registry_yaml)

        assert snapshot.table_names == ("Customers", "Orders")
        customers = snapshot.find("customers")
        orders = snapshot.find("orders")
        assert customers is not None and orders is not None
        assert "IX_Customers_Name" in customers.index_definition
        assert orders.index_definition.splitlines() == [
            "CREATE CLUSTERED INDEX PK_Orders ON Orders(OrderID);",
            "CREATE NONCLUSTERED INDEX IX_Orders_CustomerID ON Orders(CustomerID);",
        ]

    def test_json_list_layout(self, registry_json: Path) -> None:
        snapshot = load_registry(registry_json)

        assert snapshot.table_names == ("Customers", "Orders")
        assert snapshot.column_is_covered("OrderID", ["Orders"])

    def test_accepts_str_path(self, registry_yaml: Path) -> None:
        assert len(load_registry(str(registry_yaml))) == 2

    def test_empty_file_gives_empty_snapshot(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert len(load_registry(path)) == 0

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(RegistryError) as exc_info:
            load_registry(tmp_path / "nope.yaml")
        assert exc_info.value.source == str(tmp_path / "nope.yaml")

    @pytest.mark.parametrize(
        "content",
        [
            "just a string",
            "- not an object",
            "T1: 5",
            "T1: [1, 2]",
            "- indexes: [ix]",
            "- table: Orders",
            "- {table: '  ', indexes: [ix]}",
            "Customers: ''",
            "Customers: ['', '  ']",
            "a: [",
        ],
    )
    def test_bad_yaml_shapes(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "registry.yaml"
        path.write_text(content)
        with pytest.raises(RegistryError):
            load_registry(path)

    def test_undecodable_file(self, tmp_path: Path) -> None:
        path = tmp_path / "registry.yaml"
        path.write_bytes(b"Caf\xe9: \xff\xfe\n")
        with pytest.raises(RegistryError):
            load_registry(path)

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "registry.json"
        path.write_text("{not json")
        with pytest.raises(RegistryError):
            load_registry(path)
