from __future__ import annotations

from typing import Iterable, Iterator

from ..model import MemberDescriptor, ModuleDescriptor
from ..names import join_names
from ..store import Store
from .base import Scanner


def iter_members(scanner: Scanner, module: ModuleDescriptor) -> Iterator[MemberDescriptor]:
    adapter = scanner.adapter
    yield from adapter.functions(module)
    for cls in adapter.types(module):
        yield from adapter.methods(cls)


def signature_key(types: Iterable[str]) -> str:
    return f"[{join_names(types)}]"


class MethodSignaturesScanner(Scanner):
    """Indexes members by parameter type list, return type and parameter tags."""

    kind = "MethodSignatures"

    def scan_descriptor(self, module: ModuleDescriptor, store: Store) -> None:
        adapter = self.adapter
        for member in iter_members(self, module):
            full_key = adapter.member_full_key(member)

            signature = signature_key(adapter.parameter_types(member))
            if self.accepts(signature):
                self.put(store, signature, full_key)

            return_type = adapter.return_type_name(member)
            if self.accepts(return_type):
                self.put(store, return_type, full_key)

            for i in range(len(adapter.parameter_names(member))):
                for tag in adapter.parameter_tags(member, i):
                    if self.accepts(tag):
                        self.put(store, tag, full_key)


class MethodParameterNamesScanner(Scanner):
    """Records ``member key -> "a, b"`` for members taking parameters."""

    kind = "MethodParameterNames"

    def scan_descriptor(self, module: ModuleDescriptor, store: Store) -> None:
        adapter = self.adapter
        for member in iter_members(self, module):
            key = adapter.member_full_key(member)
            if not self.accepts(key):
                continue
            names = adapter.parameter_names(member)
            if names:
                self.put(store, key, join_names(names))
