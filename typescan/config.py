"""Scan configuration.

``ScanConfig`` carries everything a scan needs: the source locators, the
scanners and their metadata adapter, the input filter, the optional worker
pool and the resolution contexts used by supertype expansion.
"""

from __future__ import annotations

import importlib.util
import os
from concurrent.futures import Executor
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .adapters import MetadataAdapter, SourceAdapter
from .errors import ConfigurationError
from .filters import ScannerFilter
from .scanners import Scanner, default_scanners
from .serializers import JsonSerializer

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


class ScanConfig(BaseModel):
    """Validated scan configuration.

    Attributes:
        locators: Directory paths, archive paths or archive URLs to scan.
        scanners: Scanners to run, in order; kinds must be unique.
        adapter: Metadata adapter shared by all scanners.
        inputs_filter: Accepts a file when it matches its relative path or logical name.
        executor: Caller-owned pool; one task per locator. Left running after the scan.
        workers: Size of a pool owned by the scan when no executor is given.
        resolution_paths: Import search paths used to load types during supertype expansion.
        expand_supertypes: Whether to fill in unscanned ancestors after scanning.
        serializer: Snapshot format used by save and collect.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    locators: List[str] = []
    scanners: List[Scanner] = Field(default_factory=default_scanners)
    adapter: MetadataAdapter = Field(default_factory=SourceAdapter)
    inputs_filter: Optional[Callable[[str], bool]] = None
    executor: Optional[Executor] = None
    workers: Optional[int] = None
    resolution_paths: List[str] = []
    expand_supertypes: bool = True
    serializer: JsonSerializer = Field(default_factory=JsonSerializer)

    @field_validator("locators", "resolution_paths", mode="before")
    @classmethod
    def coerce_paths(cls, value: Any) -> Any:
        if isinstance(value, (str, os.PathLike)):
            value = [value]
        return [os.fspath(v) for v in value]

    @model_validator(mode="after")
    def check_scanners(self) -> "ScanConfig":
        kinds = [scanner.kind for scanner in self.scanners]
        duplicates = sorted({kind for kind in kinds if kinds.count(kind) > 1})
        if duplicates:
            raise ConfigurationError(
                "scanners", f"scanner kinds must be unique, got duplicates: {', '.join(duplicates)}"
            )
        if self.workers is not None and self.workers < 1:
            raise ConfigurationError("workers", f"workers must be at least 1, got {self.workers}")
        for scanner in self.scanners:
            scanner.bind(self)
        return self

    def scanner_kinds(self) -> List[str]:
        return [scanner.kind for scanner in self.scanners]

    def has_scanner(self, kind: str) -> bool:
        return kind in self.scanner_kinds()

    @property
    def parallel(self) -> bool:
        return self.executor is not None or self.workers is not None

    @classmethod
    def for_locators(cls, *locators: Any, **options: Any) -> "ScanConfig":
        return cls(locators=list(locators), **options)

    @classmethod
    def for_packages(cls, *packages: str, **options: Any) -> "ScanConfig":
        """Scan the installed location of each package, restricted to that package."""
        locators: List[str] = []
        for package in packages:
            for root in package_roots(package):
                if root not in locators:
                    locators.append(root)
        options.setdefault("inputs_filter", ScannerFilter().include_package(*packages))
        return cls(locators=locators, **options)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, **options: Any) -> "ScanConfig":
        """Build a config from TYPESCAN_* environment variables.

        Raises:
            ConfigurationError: If an environment value is invalid.
        """
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        raw_locators = env.get("TYPESCAN_LOCATORS")
        if raw_locators:
            values["locators"] = [p for p in raw_locators.split(os.pathsep) if p]
        raw_workers = env.get("TYPESCAN_WORKERS")
        if raw_workers:
            values["workers"] = _parse_workers(raw_workers)
        raw_expand = env.get("TYPESCAN_EXPAND_SUPERTYPES")
        if raw_expand:
            values["expand_supertypes"] = _parse_flag("TYPESCAN_EXPAND_SUPERTYPES", raw_expand)
        values.update(options)
        return cls(**values)


def package_roots(package: str) -> List[str]:
    """Directories or archives a top-level package is importable from."""
    top_level = package.split(".", 1)[0]
    try:
        spec = importlib.util.find_spec(top_level)
    except (ImportError, ValueError) as error:
        raise ConfigurationError(package, f"could not locate package {package}: {error}") from error
    if spec is None:
        raise ConfigurationError(package, f"could not locate package {package}")
    if spec.submodule_search_locations:
        return [os.path.dirname(location) for location in spec.submodule_search_locations]
    if spec.origin and os.path.isfile(spec.origin):
        return [os.path.dirname(spec.origin)]
    raise ConfigurationError(package, f"package {package} has no filesystem location")


def _parse_workers(raw_value: str) -> int:
    try:
        workers = int(raw_value)
    except ValueError as error:
        raise ConfigurationError(
            "TYPESCAN_WORKERS",
            f"Invalid TYPESCAN_WORKERS value: expected integer, got '{raw_value}'.",
        ) from error
    if workers < 1:
        raise ConfigurationError(
            "TYPESCAN_WORKERS", f"Invalid TYPESCAN_WORKERS value: expected at least 1, got {workers}."
        )
    return workers


def _parse_flag(name: str, raw_value: str) -> bool:
    value = raw_value.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigurationError(name, f"Invalid {name} value: expected a boolean, got '{raw_value}'.")
