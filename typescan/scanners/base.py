from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Callable, Optional

from ..adapters import MetadataAdapter, SourceAdapter
from ..errors import ExtractionError
from ..model import ModuleDescriptor
from ..store import Store
from ..vfs import VirtualFile

if TYPE_CHECKING:
    from ..config import ScanConfig


class Scanner(abc.ABC):
    """Writes index entries for one extraction policy.

    ``kind`` names the index the scanner writes to and identifies the
    scanner: two scanners with the same kind are equal whatever their
    configuration.
    """

    kind: str = ""

    def __init__(self) -> None:
        self._filter: Callable[[str], bool] = lambda key: True
        self._adapter: Optional[MetadataAdapter] = None

    def bind(self, config: "ScanConfig") -> "Scanner":
        self._adapter = config.adapter
        return self

    @property
    def adapter(self) -> MetadataAdapter:
        if self._adapter is None:
            self._adapter = SourceAdapter()
        return self._adapter

    def filter_results_by(self, predicate: Callable[[str], bool]) -> "Scanner":
        self._filter = predicate
        return self

    def accepts(self, key: Optional[str]) -> bool:
        return key is not None and self._filter(key)

    def supports(self, path: str) -> bool:
        return self.adapter.supports(path)

    def scan(self, file: VirtualFile, descriptor: Optional[ModuleDescriptor], store: Store) -> Optional[ModuleDescriptor]:
        """Scan one file, creating its descriptor when none was passed in.

        Returns the descriptor so later scanners can reuse it.

        Raises:
            ExtractionError: If the descriptor cannot be created or scanned.
        """
        try:
            if descriptor is None:
                descriptor = self.adapter.descriptor_of(file)
            self.scan_descriptor(descriptor, store)
        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError(file.relative_path, f"{type(e).__name__}: {e}") from e
        return descriptor

    @abc.abstractmethod
    def scan_descriptor(self, module: ModuleDescriptor, store: Store) -> None:
        ...

    def put(self, store: Store, key: str, value: str) -> bool:
        return store.put(self.kind, key, value)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Scanner) and other.kind == self.kind

    def __hash__(self) -> int:
        return hash(self.kind)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r})"
