"""Default container resolution strategies."""

from __future__ import annotations

import os
import re
import urllib.parse
import urllib.request
import zipfile
from typing import Optional, Tuple

from ..errors import ResolutionError
from ..log import logger
from .base import UrlType, VirtualDir
from .stream import TarStreamDir, is_tar_path
from .system import SystemDir
from .zip import ZipDir, is_zip_path

ARCHIVE_SCHEMES = ("zip", "jar", "wsjar")

# An archive deployed inside another archive, e.g. "app.zip/lib/inner.whl"
EMBEDDED_MARKER = re.compile(r"\.(?:zip|whl|egg|jar|war|ear|sar|har|par)/", re.IGNORECASE)


def scheme_of(locator: str) -> str:
    scheme = urllib.parse.urlsplit(locator).scheme
    # Windows drive letters are not schemes
    return scheme.lower() if len(scheme) > 1 else ""


def local_path(locator: str) -> str:
    """Filesystem path for plain paths and ``file:`` URLs."""
    if scheme_of(locator) == "file":
        return urllib.request.url2pathname(urllib.parse.urlsplit(locator).path)
    return locator


def split_archive_entry(path: str) -> Tuple[str, str]:
    """Split ``archive!/entry`` into ``("archive", "entry")``."""
    if "!" in path:
        archive, entry = path.split("!", 1)
        return archive, entry.lstrip("/")
    return path, ""


class ArchiveFileType(UrlType):
    name = "archive_file"

    def matches(self, locator: str) -> bool:
        if scheme_of(locator) not in ("", "file"):
            return False
        archive, _ = split_archive_entry(local_path(locator))
        return is_zip_path(archive) and os.path.isfile(archive)

    def create_dir(self, locator: str) -> Optional[VirtualDir]:
        archive, _ = split_archive_entry(local_path(locator))
        return ZipDir.from_path(archive)


class ArchiveUrlType(UrlType):
    name = "archive_url"

    def matches(self, locator: str) -> bool:
        return scheme_of(locator) in ARCHIVE_SCHEMES

    def create_dir(self, locator: str) -> Optional[VirtualDir]:
        rest = locator
        while scheme_of(rest) in ARCHIVE_SCHEMES:
            rest = rest.split(":", 1)[1]
        archive, _ = split_archive_entry(local_path(rest))
        if not os.path.isfile(archive):
            return None
        return ZipDir.from_path(archive)


class DirectoryType(UrlType):
    name = "directory"

    def matches(self, locator: str) -> bool:
        if scheme_of(locator) not in ("", "file"):
            return False
        return os.path.isdir(local_path(locator))

    def create_dir(self, locator: str) -> Optional[VirtualDir]:
        return SystemDir(local_path(locator))


class EmbeddedArchiveType(UrlType):
    """Resolve paths that descend into archives nested in other archives."""

    name = "embedded_archive"

    def matches(self, locator: str) -> bool:
        if scheme_of(locator) not in ("", "file"):
            return False
        return EMBEDDED_MARKER.search(local_path(locator).replace("\\", "/")) is not None

    def create_dir(self, locator: str) -> Optional[VirtualDir]:
        path = local_path(locator).replace("\\", "/")
        for match in EMBEDDED_MARKER.finditer(path):
            outer = path[: match.end() - 1]
            if os.path.isfile(outer):
                return self._open_nested(outer, path[match.end():], locator)
        raise ResolutionError(locator, "unable to identify the real archive in path")

    def _open_nested(self, outer: str, tail: str, locator: str) -> VirtualDir:
        current = ZipDir(zipfile.ZipFile(outer), locator)
        remaining = tail
        try:
            while remaining:
                match = EMBEDDED_MARKER.search(remaining)
                if match:
                    entry, remaining = remaining[: match.end() - 1], remaining[match.end():]
                elif is_zip_path(remaining):
                    entry, remaining = remaining, ""
                else:
                    # trailing folder inside the innermost archive
                    logger.debug("ignoring inner path {} of {}", remaining, locator)
                    break
                data = current.zip_file.read(entry)
                current.close()
                current = ZipDir.from_bytes(data, locator)
        except (KeyError, OSError, zipfile.BadZipFile):
            current.close()
            raise
        return current


class ArchiveStreamType(UrlType):
    name = "archive_stream"

    def matches(self, locator: str) -> bool:
        scheme = scheme_of(locator)
        if scheme in ("", "file"):
            path = local_path(locator)
            return is_tar_path(path) and os.path.isfile(path)
        return is_tar_path(urllib.parse.urlsplit(locator).path)

    def create_dir(self, locator: str) -> Optional[VirtualDir]:
        if scheme_of(locator) in ("", "file"):
            return TarStreamDir(local_path(locator))
        return TarStreamDir(locator)
