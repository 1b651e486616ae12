from __future__ import annotations

import ast
from typing import Callable, Dict, List, Optional, Set, Tuple

from ..model import UsageDescriptor

# Resolves a dotted name to a qualified one, None when the head is unknown
Resolve = Callable[[str], Optional[str]]

RECEIVERS = ("self", "cls")


def dotted_name(node: ast.AST) -> Optional[str]:
    """``a.b.c`` for Name/Attribute chains, None for anything else."""
    parts: List[str] = []
    cursor = node
    while isinstance(cursor, ast.Attribute):
        parts.append(cursor.attr)
        cursor = cursor.value
    if isinstance(cursor, ast.Name):
        parts.append(cursor.id)
        return ".".join(reversed(parts))
    return None


class UsageCollector(ast.NodeVisitor):
    """Collects calls and attribute reads made inside one function body."""

    def __init__(self, resolve: Resolve, owner_type: Optional[str] = None) -> None:
        self.resolve = resolve
        self.owner_type = owner_type
        self.usages: Dict[Tuple[str, int], None] = {}
        self._inner: Set[int] = set()

    def collect(self, func: ast.AST) -> List[UsageDescriptor]:
        body = getattr(func, "body", [])
        for stmt in body:
            for node in ast.walk(stmt):
                if isinstance(node, ast.Attribute):
                    self._inner.add(id(node.value))
                elif isinstance(node, ast.Call):
                    self._inner.add(id(node.func))
        for stmt in body:
            self.visit(stmt)
        return [UsageDescriptor(target=target, line=line) for target, line in self.usages]

    def visit_Call(self, node: ast.Call) -> None:
        self._record(node.func, node.lineno)
        self.generic_visit(node)

    def visit_Attribute(self, node: ast.Attribute) -> None:
        if id(node) not in self._inner and isinstance(node.ctx, ast.Load):
            self._record(node, node.lineno)
        self.generic_visit(node)

    def visit_Name(self, node: ast.Name) -> None:
        if id(node) not in self._inner and isinstance(node.ctx, ast.Load):
            target = self.resolve(node.id)
            if target and not target.startswith("builtins."):
                self.usages.setdefault((target, node.lineno), None)

    def _record(self, node: ast.AST, line: int) -> None:
        name = dotted_name(node)
        if not name:
            return
        head, _, tail = name.partition(".")
        if head in RECEIVERS and self.owner_type and tail:
            # self.items.append() is a use of the "items" member
            target: Optional[str] = f"{self.owner_type}.{tail.split('.', 1)[0]}"
        else:
            target = self.resolve(name)
        if target:
            self.usages.setdefault((target, line), None)


def collect_usages(func: ast.AST, resolve: Resolve, owner_type: Optional[str] = None) -> List[UsageDescriptor]:
    return UsageCollector(resolve, owner_type).collect(func)
