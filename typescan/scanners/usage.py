from __future__ import annotations

from ..model import ModuleDescriptor
from ..store import Store
from .base import Scanner
from .signatures import iter_members


class MemberUsageScanner(Scanner):
    """Records ``target -> "member key #line"`` for calls and attribute reads."""

    kind = "MemberUsage"

    def scan_descriptor(self, module: ModuleDescriptor, store: Store) -> None:
        adapter = self.adapter
        for member in iter_members(self, module):
            caller = adapter.member_full_key(member)
            for usage in adapter.usages(member):
                if self.accepts(usage.target):
                    self.put(store, usage.target, f"{caller} #{usage.line}")
