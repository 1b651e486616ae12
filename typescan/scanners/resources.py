from __future__ import annotations

from typing import Optional

from ..model import ModuleDescriptor
from ..names import is_source_path
from ..store import Store
from ..vfs import VirtualFile
from .base import Scanner


class ResourcesScanner(Scanner):
    """Records ``file name -> relative path`` for every non-module file."""

    kind = "Resources"

    def supports(self, path: str) -> bool:
        return not is_source_path(path)

    def scan(self, file: VirtualFile, descriptor: Optional[ModuleDescriptor], store: Store) -> Optional[ModuleDescriptor]:
        if self.accepts(file.name):
            self.put(store, file.name, file.relative_path)
        return descriptor

    def scan_descriptor(self, module: ModuleDescriptor, store: Store) -> None:
        """Resources carry no module descriptor; see ``scan``."""
