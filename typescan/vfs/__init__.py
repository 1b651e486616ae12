"""Virtual filesystem over directories, zip archives and streamed tar archives.

``Vfs`` owns an ordered chain of ``UrlType`` strategies. The first strategy
that matches a locator and builds a container wins.
"""

from __future__ import annotations

import os
from typing import Callable, Iterable, Iterator, List, Optional, Union

from ..errors import ResolutionError
from ..log import logger
from .base import UrlType, VirtualDir, VirtualFile
from .stream import TarStreamDir, TarStreamFile
from .system import SystemDir, SystemFile
from .url_types import (
    ArchiveFileType,
    ArchiveStreamType,
    ArchiveUrlType,
    DirectoryType,
    EmbeddedArchiveType,
)
from .zip import ZipDir, ZipEntryFile

Locator = Union[str, "os.PathLike[str]"]


def default_url_types() -> List[UrlType]:
    """A fresh copy of the default strategy chain."""
    return [
        ArchiveFileType(),
        ArchiveUrlType(),
        DirectoryType(),
        EmbeddedArchiveType(),
        ArchiveStreamType(),
    ]


class Vfs:
    def __init__(self, url_types: Optional[Iterable[UrlType]] = None) -> None:
        self.url_types: List[UrlType] = (
            list(url_types) if url_types is not None else default_url_types()
        )

    def add_url_type(self, url_type: UrlType) -> "Vfs":
        self.url_types.insert(0, url_type)
        return self

    def from_locator(self, locator: Locator) -> VirtualDir:
        location = os.fspath(locator)
        for url_type in self.url_types:
            try:
                if url_type.matches(location):
                    container = url_type.create_dir(location)
                    if container is not None:
                        return container
            except Exception as e:
                logger.warning(
                    "could not create dir using {} from {}, skipping: {}", url_type, location, e
                )
        raise ResolutionError(location, "no matching UrlType was found")

    def find_files(
        self, locators: Iterable[Locator], predicate: Callable[[VirtualFile], bool]
    ) -> Iterator[VirtualFile]:
        """Lazily yield matching files across locators.

        Each container stays open only while its files are being yielded.
        """
        for locator in locators:
            try:
                container = self.from_locator(locator)
            except ResolutionError as e:
                logger.error("could not find files for locator, continuing: {}", e)
                continue
            with container:
                for file in container.files():
                    if predicate(file):
                        yield file

    def find_resources(
        self, locators: Iterable[Locator], prefix: str, name_filter: Callable[[str], bool]
    ) -> Iterator[VirtualFile]:
        """Files under ``prefix`` whose remaining path is accepted by ``name_filter``."""
        prefix = prefix.strip("/")

        def accept(file: VirtualFile) -> bool:
            path = file.relative_path
            if prefix and not path.startswith(prefix + "/"):
                return False
            rest = path[len(prefix) + 1:] if prefix else path
            return bool(rest) and name_filter(rest)

        return self.find_files(locators, accept)


__all__ = [
    "ArchiveFileType",
    "ArchiveStreamType",
    "ArchiveUrlType",
    "DirectoryType",
    "EmbeddedArchiveType",
    "Locator",
    "SystemDir",
    "SystemFile",
    "TarStreamDir",
    "TarStreamFile",
    "UrlType",
    "Vfs",
    "VirtualDir",
    "VirtualFile",
    "ZipDir",
    "ZipEntryFile",
    "default_url_types",
]
