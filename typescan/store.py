"""Multi-index store for scanned relationships.

Indexes map string keys to append-only lists of string values. Reads
deduplicate values and keep first-occurrence order; writes never do.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional, Union

from .errors import ConfigurationError

Keys = Union[str, Iterable[str]]


def _as_keys(keys: Keys) -> List[str]:
    if isinstance(keys, str):
        return [keys]
    return list(keys)


class Store:
    """Index -> key -> values, safe for concurrent ``put`` from scanning workers."""

    def __init__(self, indexes: Optional[Dict[str, Dict[str, List[str]]]] = None) -> None:
        self._indexes: Dict[str, Dict[str, List[str]]] = {}
        self._lock = threading.Lock()
        if indexes:
            for index, multimap in indexes.items():
                for key, values in multimap.items():
                    for value in values:
                        self.put(index, key, value)

    def indexes(self) -> List[str]:
        return list(self._indexes)

    def has_index(self, index: str) -> bool:
        return index in self._indexes

    def _index(self, index: str) -> Dict[str, List[str]]:
        multimap = self._indexes.get(index)
        if multimap is None:
            raise ConfigurationError(index)
        return multimap

    def put(self, index: str, key: str, value: str) -> bool:
        """Append ``value`` under ``(index, key)``.

        Returns True when the value was not recorded for that key before.
        """
        with self._lock:
            values = self._indexes.setdefault(index, {}).setdefault(key, [])
            added = value not in values
            values.append(value)
        return added

    def get(self, index: str, keys: Keys) -> List[str]:
        """Union of the values recorded directly under ``keys``."""
        multimap = self._index(index)
        result: Dict[str, None] = {}
        for key in _as_keys(keys):
            for value in multimap.get(key, ()):
                result.setdefault(value, None)
        return list(result)

    def get_all_including(self, index: str, keys: Keys) -> List[str]:
        """Transitive closure from ``keys``, seeds included."""
        multimap = self._index(index)
        work = _as_keys(keys)
        visited: Dict[str, None] = {}
        i = 0
        while i < len(work):
            key = work[i]
            i += 1
            if key in visited:
                continue
            visited[key] = None
            work.extend(multimap.get(key, ()))
        return list(visited)

    def get_all(self, index: str, keys: Keys) -> List[str]:
        """Transitive closure seeded by the direct values of ``keys``."""
        return self.get_all_including(index, self.get(index, keys))

    def keys(self, index: str) -> List[str]:
        return list(self._indexes.get(index, {}))

    def values(self, index: str) -> List[str]:
        result: Dict[str, None] = {}
        for values in list(self._indexes.get(index, {}).values()):
            for value in values:
                result.setdefault(value, None)
        return list(result)

    def merge(self, other: Optional["Store"]) -> "Store":
        if other is None:
            return self
        for index, multimap in other.as_dict().items():
            for key, values in multimap.items():
                for value in values:
                    self.put(index, key, value)
        return self

    def as_dict(self) -> Dict[str, Dict[str, List[str]]]:
        """Copy of the raw mapping, duplicates included."""
        with self._lock:
            return {
                index: {key: list(values) for key, values in multimap.items()}
                for index, multimap in self._indexes.items()
            }

    def describe(self) -> str:
        keys = sum(len(self.keys(index)) for index in self.indexes())
        values = sum(len(self.values(index)) for index in self.indexes())
        return f"{keys} keys and {values} values"

    def __repr__(self) -> str:
        return f"Store({self.describe()})"
