from __future__ import annotations

from ..filters import ScannerFilter
from ..model import ModuleDescriptor
from ..store import Store
from .base import Scanner

OBJECT = "builtins.object"


class SubTypesScanner(Scanner):
    """Records ``base -> type`` for every base of every scanned class."""

    kind = "SubTypes"

    def __init__(self, exclude_object: bool = True) -> None:
        super().__init__()
        if exclude_object:
            # direct object subtypes are left out unless asked for
            self.filter_results_by(ScannerFilter().exclude(OBJECT.replace(".", r"\.")))

    def scan_descriptor(self, module: ModuleDescriptor, store: Store) -> None:
        adapter = self.adapter
        for cls in adapter.types(module):
            name = adapter.name(cls)
            superclass = adapter.super_name(cls)
            if self.accepts(superclass):
                self.put(store, superclass, name)
            for interface in adapter.interface_names(cls):
                if self.accepts(interface):
                    self.put(store, interface, name)
