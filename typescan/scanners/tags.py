from __future__ import annotations

from ..model import ModuleDescriptor
from ..store import Store
from .base import Scanner


class TypeTagsScanner(Scanner):
    """Records ``decorator -> type`` for class decorators."""

    kind = "TypeTags"

    def scan_descriptor(self, module: ModuleDescriptor, store: Store) -> None:
        adapter = self.adapter
        for cls in adapter.types(module):
            name = adapter.name(cls)
            for tag in adapter.class_tags(cls):
                if self.accepts(tag):
                    self.put(store, tag, name)


class MethodTagsScanner(Scanner):
    """Records ``decorator -> member key`` for methods and module functions."""

    kind = "MethodTags"

    def scan_descriptor(self, module: ModuleDescriptor, store: Store) -> None:
        adapter = self.adapter
        members = list(adapter.functions(module))
        for cls in adapter.types(module):
            members.extend(adapter.methods(cls))
        for member in members:
            for tag in adapter.member_tags(member):
                if self.accepts(tag):
                    self.put(store, tag, adapter.member_full_key(member))


class FieldTagsScanner(Scanner):
    """Records ``Annotated`` metadata on class fields: ``tag -> owner.field``."""

    kind = "FieldTags"

    def scan_descriptor(self, module: ModuleDescriptor, store: Store) -> None:
        adapter = self.adapter
        for cls in adapter.types(module):
            for field in adapter.fields(cls):
                for tag in adapter.field_tags(field):
                    if self.accepts(tag):
                        self.put(store, tag, f"{adapter.name(cls)}.{adapter.field_name(field)}")
