from __future__ import annotations

from ..model import ModuleDescriptor
from ..store import Store
from .base import Scanner


class TypeElementsScanner(Scanner):
    """Records ``type -> element`` for the fields, members and tags of each class.

    An empty value is always written so every accepted type appears as a key.
    """

    kind = "TypeElements"

    def __init__(
        self,
        include_fields: bool = True,
        include_methods: bool = True,
        include_tags: bool = True,
        public_only: bool = True,
    ) -> None:
        super().__init__()
        self.include_fields = include_fields
        self.include_methods = include_methods
        self.include_tags = include_tags
        self.public_only = public_only

    def scan_descriptor(self, module: ModuleDescriptor, store: Store) -> None:
        adapter = self.adapter
        for cls in adapter.types(module):
            name = adapter.name(cls)
            if not self.accepts(name):
                continue
            self.put(store, name, "")

            if self.include_fields:
                for field in adapter.fields(cls):
                    if not self.public_only or adapter.is_public(field):
                        self.put(store, name, adapter.field_name(field))

            if self.include_methods:
                for method in adapter.methods(cls):
                    if not self.public_only or adapter.is_public(method):
                        self.put(store, name, adapter.member_key(method))

            if self.include_tags:
                for tag in adapter.class_tags(cls):
                    self.put(store, name, "@" + tag)
