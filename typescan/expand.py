"""Supertype closure expansion.

Scanning records ``base -> subtype`` edges only for bases that were seen in
scanned files. Types whose own bases were never scanned leave the hierarchy
cut short. ``expand_supertypes`` loads those roots through a resolver and
records the missing ancestor edges so transitive queries reach them.
"""

from __future__ import annotations

import abc
import importlib
import sys
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional, Set

from .log import logger
from .store import Store

SUBTYPES = "SubTypes"
OBJECT = "builtins.object"


class TypeResolver(abc.ABC):
    @abc.abstractmethod
    def supertypes(self, name: str) -> Optional[List[str]]:
        """Direct supertype names of ``name``, or None when it cannot be loaded."""


class MappingResolver(TypeResolver):
    """Resolves against a fixed ``name -> bases`` table."""

    def __init__(self, mapping: Dict[str, Iterable[str]]) -> None:
        self.mapping = {name: list(bases) for name, bases in mapping.items()}

    def supertypes(self, name: str) -> Optional[List[str]]:
        bases = self.mapping.get(name)
        if bases is None:
            return None
        return [base for base in bases if base != OBJECT]


@contextmanager
def _search_paths(paths: List[str]) -> Iterator[None]:
    added = [p for p in paths if p not in sys.path]
    sys.path[:0] = added
    try:
        yield
    finally:
        for path in added:
            if path in sys.path:
                sys.path.remove(path)


class ImportResolver(TypeResolver):
    """Loads types by importing them, with ``search_paths`` on ``sys.path``."""

    def __init__(self, search_paths: Optional[Iterable[str]] = None) -> None:
        self.search_paths = list(search_paths or [])

    def load(self, name: str) -> Optional[type]:
        parts = name.split(".")
        with _search_paths(self.search_paths):
            for i in range(len(parts) - 1, 0, -1):
                module_name = ".".join(parts[:i])
                try:
                    obj = importlib.import_module(module_name)
                except ImportError:
                    continue
                except Exception as e:
                    logger.debug("importing {} failed while loading {}: {}", module_name, name, e)
                    return None
                for attr in parts[i:]:
                    obj = getattr(obj, attr, None)
                    if obj is None:
                        break
                if isinstance(obj, type):
                    return obj
        return None

    def supertypes(self, name: str) -> Optional[List[str]]:
        cls = self.load(name)
        if cls is None:
            return None
        names = [f"{base.__module__}.{base.__qualname__}" for base in cls.__bases__]
        return [n for n in names if n != OBJECT]


def expand_supertypes(store: Store, resolver: TypeResolver) -> int:
    """Add the unscanned ancestors of every root type. Returns the edges added.

    Roots are types recorded as a supertype but never as a subtype. The walk
    stops along a branch as soon as an edge is already known, so running it
    again adds nothing.
    """
    if not store.has_index(SUBTYPES):
        return 0
    keys = store.keys(SUBTYPES)
    known = set(store.values(SUBTYPES))
    added = 0
    for root in keys:
        if root in known:
            continue
        added += _expand(store, resolver, root, set())
    return added


def _expand(store: Store, resolver: TypeResolver, name: str, visited: Set[str]) -> int:
    if name in visited:
        return 0
    visited.add(name)
    supertypes = resolver.supertypes(name)
    if supertypes is None:
        logger.debug("could not load {}, not expanding its supertypes", name)
        return 0
    added = 0
    for ancestor in supertypes:
        if name in store.get(SUBTYPES, ancestor):
            continue
        store.put(SUBTYPES, ancestor, name)
        added += 1
        logger.debug("expanded subtype {} -> {}", ancestor, name)
        added += _expand(store, resolver, ancestor, visited)
    return added
