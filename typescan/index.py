"""``TypeIndex``: scan once, query many times."""

from __future__ import annotations

import re
from pathlib import Path
from typing import IO, Callable, Iterable, List, Optional, Pattern, Union

from .config import ScanConfig
from .errors import ConfigurationError, MergeError
from .expand import OBJECT, ImportResolver, TypeResolver, expand_supertypes
from .log import logger
from .scan import scan
from .scanners.signatures import signature_key
from .serializers import JsonSerializer
from .store import Store
from .vfs import Vfs

SNAPSHOT_PREFIX = "META-INF/typescan"


def _default_name_filter(name: str) -> bool:
    return name.endswith(".json")


class TypeIndex:
    """Scans the configured locators on construction and answers queries.

    Every query reads the index of one scanner kind. Asking a query whose
    scanner was not configured raises ``ConfigurationError``; a configured
    scanner that found nothing yields an empty result.
    """

    def __init__(
        self,
        config: Optional[ScanConfig] = None,
        store: Optional[Store] = None,
        resolver: Optional[TypeResolver] = None,
    ) -> None:
        self.config = config if config is not None else ScanConfig()
        self.store = store if store is not None else Store()
        self.resolver = resolver
        if self.config.scanners and self.config.locators:
            scan(self.config, self.store)
            if self.config.expand_supertypes and self.config.has_scanner("SubTypes"):
                self.expand_supertypes()

    @classmethod
    def for_packages(cls, *packages: str, **options) -> "TypeIndex":
        return cls(ScanConfig.for_packages(*packages, **options))

    def expand_supertypes(self) -> int:
        resolver = self.resolver or ImportResolver(self.config.resolution_paths)
        added = expand_supertypes(self.store, resolver)
        if added:
            logger.debug("expanded {} supertype edges", added)
        return added

    def _get(self, kind: str, keys: Union[str, Iterable[str]]) -> List[str]:
        if not self.store.has_index(kind) and self.config.has_scanner(kind):
            return []
        return self.store.get(kind, keys)

    def _get_all_including(self, kind: str, keys: Iterable[str]) -> List[str]:
        if not self.store.has_index(kind) and self.config.has_scanner(kind):
            return list(keys)
        return self.store.get_all_including(kind, keys)

    def get_subtypes_of(self, name: str) -> List[str]:
        """Every transitive subtype of ``name``, excluding ``name`` itself."""
        if not self.store.has_index("SubTypes") and self.config.has_scanner("SubTypes"):
            return []
        return self.store.get_all("SubTypes", name)

    def get_types_tagged_with(self, tag: str, honor_inherited: bool = False) -> List[str]:
        """Types decorated with ``tag``.

        By default subtypes of tagged types are included, as are types tagged
        with a tag that is itself tagged with ``tag``. With ``honor_inherited``
        only the directly decorated types are returned.
        """
        tagged = self._get("TypeTags", tag)
        if honor_inherited:
            return tagged
        meta_tagged = self._get_all_including("TypeTags", tagged)
        return self._get_all_including("SubTypes", meta_tagged)

    def get_methods_tagged_with(self, tag: str) -> List[str]:
        return self._get("MethodTags", tag)

    def get_fields_tagged_with(self, tag: str) -> List[str]:
        return self._get("FieldTags", tag)

    def get_methods_matching_params(self, *types: str) -> List[str]:
        return self._get("MethodSignatures", signature_key(types))

    def get_methods_returning(self, type_name: str) -> List[str]:
        return self._get("MethodSignatures", type_name)

    def get_methods_with_any_param_tagged(self, tag: str) -> List[str]:
        return self._get("MethodSignatures", tag)

    def get_param_names(self, member_key: str) -> List[str]:
        names = self._get("MethodParameterNames", member_key)
        if not names:
            return []
        if len(names) > 1:
            raise ConfigurationError(
                "MethodParameterNames", f"more than one parameter list recorded for {member_key}"
            )
        return names[0].split(", ")

    def get_usages(self, target: str) -> List[str]:
        """Call sites of ``target`` as ``"caller #line"``."""
        return self._get("MemberUsage", target)

    def get_resources(self, pattern: Union[str, Pattern[str], Callable[[str], bool]]) -> List[str]:
        """Relative paths of resources whose file name matches ``pattern``."""
        if callable(pattern):
            predicate = pattern
        else:
            compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
            predicate = lambda name: compiled.fullmatch(name) is not None  # noqa: E731
        if not self.store.has_index("Resources"):
            if self.config.has_scanner("Resources"):
                return []
            raise ConfigurationError("Resources")
        names = [key for key in self.store.keys("Resources") if predicate(key)]
        return self.store.get("Resources", names)

    def get_all_types(self) -> List[str]:
        """Every type recorded as a subtype of ``builtins.object``.

        Needs ``SubTypesScanner(exclude_object=False)``.
        """
        all_types = self.store.get_all("SubTypes", OBJECT) if self.store.has_index("SubTypes") else []
        if not all_types:
            raise ConfigurationError(
                "SubTypes",
                "could not find subtypes of builtins.object; "
                "configure SubTypesScanner(exclude_object=False)",
            )
        return all_types

    def save(self, filename: Union[str, Path], serializer: Optional[JsonSerializer] = None) -> Path:
        serializer = serializer or self.config.serializer
        path = serializer.save(self.store, filename)
        logger.info("saved {} to {}", self.store.describe(), path)
        return path

    def merge(self, other: Optional["TypeIndex"]) -> "TypeIndex":
        if other is not None:
            self.store.merge(other.store)
        return self

    def collect_stream(self, stream: IO, serializer: Optional[JsonSerializer] = None) -> "TypeIndex":
        serializer = serializer or self.config.serializer
        source = getattr(stream, "name", repr(stream))
        try:
            loaded = serializer.read(stream)
        except (OSError, ValueError) as e:
            raise MergeError(str(source), str(e)) from e
        self.store.merge(loaded)
        return self

    def collect_file(self, path: Union[str, Path], serializer: Optional[JsonSerializer] = None) -> "TypeIndex":
        try:
            with open(path, "rb") as stream:
                return self.collect_stream(stream, serializer)
        except OSError as e:
            raise MergeError(str(path), str(e)) from e

    @classmethod
    def collect(
        cls,
        locators: Iterable[str],
        prefix: str = SNAPSHOT_PREFIX,
        name_filter: Callable[[str], bool] = _default_name_filter,
        serializer: Optional[JsonSerializer] = None,
    ) -> "TypeIndex":
        """Merge every saved snapshot found under ``prefix`` in ``locators``.

        Raises:
            MergeError: If a snapshot cannot be read.
        """
        serializer = serializer or JsonSerializer()
        index = cls(ScanConfig(serializer=serializer))
        count = 0
        for file in Vfs().find_resources(locators, prefix, name_filter):
            try:
                with file.open() as stream:
                    loaded = serializer.read(stream)
            except (OSError, ValueError) as e:
                raise MergeError(file.relative_path, str(e)) from e
            index.store.merge(loaded)
            count += 1
        logger.info("collected {} snapshots, producing {}", count, index.store.describe())
        return index

    def __repr__(self) -> str:
        return f"TypeIndex({self.store.describe()})"
