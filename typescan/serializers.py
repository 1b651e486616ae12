"""Snapshot serialization for stores."""

from __future__ import annotations

from pathlib import Path
from typing import IO, Union

from .model import StoreSnapshot
from .store import Store


class JsonSerializer:
    """Reads and writes ``StoreSnapshot`` JSON documents."""

    suffix = ".json"

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def dumps(self, store: Store) -> str:
        return StoreSnapshot(indexes=store.as_dict()).model_dump_json(indent=self.indent)

    def loads(self, text: Union[str, bytes]) -> Store:
        snapshot = StoreSnapshot.model_validate_json(text)
        return Store(snapshot.indexes)

    def read(self, stream: IO) -> Store:
        return self.loads(stream.read())

    def save(self, store: Store, filename: Union[str, Path]) -> Path:
        """Write ``store`` to ``filename``, adding the ``.json`` suffix when missing."""
        path = Path(filename)
        if path.suffix != self.suffix:
            path = path.with_name(path.name + self.suffix)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.dumps(store), encoding="utf-8")
        return path

    def __repr__(self) -> str:
        return f"{type(self).__name__}(indent={self.indent})"
