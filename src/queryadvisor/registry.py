"""
Index registry: table name -> free-text index definitions.

The registry is the only schema knowledge the analyzer has. Callers build
an IndexRegistrySnapshot (from a mapping, from pairs, or from a YAML/JSON
file) and pass it into each analysis call. A snapshot never changes; the
``with_entry`` / ``without_table`` helpers return new snapshots.

Coverage is a textual check: a column counts as covered
when its name appears anywhere in the index definition text of one of the
query's tables. Index definitions are never parsed.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

import yaml

from queryadvisor.exceptions import RegistryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexRegistryEntry:
    """
    Index definitions registered for one table.

    Attributes:
        table_name: Table name as entered by the user
        index_definition: Opaque index definition text (usually CREATE INDEX statements)
    """
    table_name: str
    index_definition: str

    def matches(self, table: str) -> bool:
        """Case-insensitive table name match."""
        return self.table_name.lower() == table.lower()


def _checked_entry(table_name: str, index_definition: str) -> IndexRegistryEntry:
    """
    Build an entry with both fields stripped.

    Raises:
        ValueError: If the table name or the index definitions are blank
    """
    table_name = table_name.strip()
    index_definition = index_definition.strip()
    if not table_name:
        raise ValueError("Registry table name is blank")
    if not index_definition:
        raise ValueError(f"Table '{table_name}' has no index definitions")
    return IndexRegistryEntry(table_name, index_definition)


RegistryLike = Union[
    "IndexRegistrySnapshot",
    Mapping[str, str],
    Iterable[Union[IndexRegistryEntry, tuple[str, str]]],
    None,
]


@dataclass(frozen=True)
class IndexRegistrySnapshot:
    """Immutable, ordered view of the index registry for one analysis call."""

    entries: tuple[IndexRegistryEntry, ...] = ()

    @classmethod
    def empty(cls) -> "IndexRegistrySnapshot":
        return cls()

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "IndexRegistrySnapshot":
        """Build from ``{table_name: index_definition_text}``, keeping order."""
        return cls.from_pairs(mapping.items())

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[IndexRegistryEntry | tuple[str, str]],
    ) -> "IndexRegistrySnapshot":
        """
        Build from ``(table_name, index_definition_text)`` pairs or entries.

        Both fields are stripped.

        Raises:
            TypeError: If an item is not an entry or a two-item tuple/list of text
            ValueError: If a table name or its index definitions are blank
        """
        entries: list[IndexRegistryEntry] = []
        for item in pairs:
            if isinstance(item, IndexRegistryEntry):
                entries.append(_checked_entry(item.table_name, item.index_definition))
                continue
            if not isinstance(item, (tuple, list)) or len(item) != 2:
                raise TypeError(
                    f"Registry items must be (table, definitions) pairs, got {item!r}"
                )
            table_name, index_definition = item
            if not isinstance(table_name, str) or not isinstance(index_definition, str):
                raise TypeError(
                    "Registry pairs must be (str, str), got "
                    f"({type(table_name).__name__}, {type(index_definition).__name__})"
                )
            entries.append(_checked_entry(table_name, index_definition))
        return cls(tuple(entries))

    @classmethod
    def coerce(cls, registry: RegistryLike) -> "IndexRegistrySnapshot":
        """
        Turn any accepted registry shape into a snapshot.

        Accepts a snapshot (returned as-is), a mapping, an iterable of pairs
        or entries, or None (empty registry).

        Raises:
            TypeError: If the value has an unsupported shape
            ValueError: If an entry has a blank table name or definitions
        """
        if registry is None:
            return cls.empty()
        if isinstance(registry, IndexRegistrySnapshot):
            return registry
        if isinstance(registry, Mapping):
            return cls.from_mapping(registry)
        if isinstance(registry, (str, bytes)):
            raise TypeError("Registry must be a mapping or pairs, not text")
        if isinstance(registry, Iterable):
            return cls.from_pairs(registry)
        raise TypeError(f"Unsupported registry type: {type(registry).__name__}")

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[IndexRegistryEntry]:
        return iter(self.entries)

    @property
    def table_names(self) -> tuple[str, ...]:
        return tuple(entry.table_name for entry in self.entries)

    def find(self, table: str) -> IndexRegistryEntry | None:
        """First entry whose table name matches case-insensitively."""
        for entry in self.entries:
            if entry.matches(table):
                return entry
        return None

    def has_entry(self, table: str) -> bool:
        return self.find(table) is not None

    def with_entry(self, table_name: str, index_definition: str) -> "IndexRegistrySnapshot":
        """New snapshot with an entry appended."""
        entry = _checked_entry(table_name, index_definition)
        return IndexRegistrySnapshot(self.entries + (entry,))

    def without_table(self, table_name: str) -> "IndexRegistrySnapshot":
        """New snapshot with every entry for ``table_name`` removed."""
        return IndexRegistrySnapshot(
            tuple(e for e in self.entries if not e.matches(table_name))
        )

    def column_is_covered(self, column: str, tables: Iterable[str]) -> bool:
        """
        Check whether ``column`` is covered by an index on any of ``tables``.

        Only entries whose table name is in ``tables`` (case-insensitive)
        are consulted. The column is covered if it appears as a
        case-sensitive substring of that entry's definition text.
        """
        wanted = {t.lower() for t in tables}
        for entry in self.entries:
            if entry.table_name.lower() in wanted and column in entry.index_definition:
                return True
        return False

    def to_dict(self) -> dict[str, str]:
        result: dict[str, str] = {}
        for entry in self.entries:
            result.setdefault(entry.table_name, entry.index_definition)
        return result


def column_is_covered(
    column: str,
    tables: Iterable[str],
    registry: IndexRegistrySnapshot,
) -> bool:
    """Module-level form of IndexRegistrySnapshot.column_is_covered."""
    return registry.column_is_covered(column, tables)


# =============================================================================
# File loading
# =============================================================================


def _definition_text(value: Any, source: str, table: str) -> str:
    if isinstance(value, str):
        text = value.strip()
    elif isinstance(value, list) and all(isinstance(v, str) for v in value):
        text = "\n".join(v.strip() for v in value if v.strip())
    else:
        raise RegistryError(
            f"Index definitions for table '{table}' must be text or a list of text",
            source=source,
        )
    if not text:
        raise RegistryError(f"Table '{table}' has no index definitions", source=source)
    return text


def _table_name(value: Any, source: str) -> str:
    name = str(value).strip() if value is not None else ""
    if not name:
        raise RegistryError("Registry table name is blank", source=source)
    return name


def load_registry(path: str | Path) -> IndexRegistrySnapshot:
    """
    Load an index registry from a YAML or JSON file.

    Two layouts are accepted:

        Customers: |
          CREATE CLUSTERED INDEX PK_Customers ON Customers(CustomerID);

    or a list of objects:

        - table: Orders
          indexes:
            - CREATE CLUSTERED INDEX PK_Orders ON Orders(OrderID);

    Raises:
        RegistryError: If the file cannot be read or has the wrong shape
    """
    filepath = Path(path)
    source = str(filepath)

    try:
        raw = filepath.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise RegistryError(f"Cannot read registry file: {e}", source=source) from e

    try:
        if filepath.suffix == ".json":
            data = json.loads(raw)
        else:
            data = yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise RegistryError(f"Invalid registry file: {e}", source=source) from e

    if data is None:
        logger.warning("Registry file %s is empty", source)
        return IndexRegistrySnapshot.empty()

    pairs: list[tuple[str, str]] = []
    if isinstance(data, dict):
        for key, value in data.items():
            table = _table_name(key, source)
            pairs.append((table, _definition_text(value, source, table)))
    elif isinstance(data, list):
        for item in data:
            if not isinstance(item, dict) or "table" not in item:
                raise RegistryError(
                    "Registry list items must be objects with a 'table' key",
                    source=source,
                )
            table = _table_name(item["table"], source)
            pairs.append((table, _definition_text(item.get("indexes", ""), source, table)))
    else:
        raise RegistryError(
            f"Registry must be a mapping or a list, got {type(data).__name__}",
            source=source,
        )

    snapshot = IndexRegistrySnapshot.from_pairs(pairs)
    logger.debug("Loaded %d registry entries from %s", len(snapshot), source)
    return snapshot
