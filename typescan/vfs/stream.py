"""Lazy access to tar archives over a single forward-only stream.

Content is decompressed in one sequential pass. Each entry remembers the
window ``[start, end)`` it occupies in the stream of member data; a file can
only be read while the shared cursor is inside its window, so nothing is
buffered and entries must be consumed in enumeration order.
"""

from __future__ import annotations

import io
import posixpath
import tarfile
import urllib.parse
import urllib.request
from typing import BinaryIO, Iterator, Optional

from ..log import logger
from .base import VirtualDir, VirtualFile

TAR_SUFFIXES = (".tar", ".tar.gz", ".tgz", ".tar.bz2", ".tbz2", ".tar.xz", ".txz")


def is_tar_path(path: str) -> bool:
    return path.lower().endswith(TAR_SUFFIXES)


def open_source(locator: str) -> BinaryIO:
    scheme = urllib.parse.urlsplit(locator).scheme
    if len(scheme) > 1:
        return urllib.request.urlopen(locator)
    return open(locator, "rb")


class _WindowReader(io.RawIOBase):
    def __init__(self, archive: "TarStreamDir", start: int, end: int) -> None:
        self.archive = archive
        self.start = start
        self.end = end

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        archive = self.archive
        cursor = archive.cursor
        if archive.member_stream is None or not (self.start <= cursor < self.end):
            return 0
        wanted = min(len(buffer), self.end - cursor)
        data = archive.member_stream.read(wanted)
        buffer[: len(data)] = data
        archive.cursor += len(data)
        return len(data)


class TarStreamFile(VirtualFile):
    def __init__(self, archive: "TarStreamDir", member: tarfile.TarInfo, start: int, end: int) -> None:
        super().__init__()
        self.archive = archive
        self.member = member
        self.start = start
        self.end = end

    @property
    def name(self) -> str:
        return posixpath.basename(self.member.name)

    @property
    def relative_path(self) -> str:
        return self.member.name

    def _open_stream(self) -> BinaryIO:
        return _WindowReader(self.archive, self.start, self.end)


class TarStreamDir(VirtualDir):
    """A tar archive read from a path or URL without seeking."""

    def __init__(self, locator: str) -> None:
        self.locator = locator
        self.cursor = 0
        self.member_stream: Optional[BinaryIO] = None
        self._source: Optional[BinaryIO] = None
        self._tar: Optional[tarfile.TarFile] = None

    @property
    def path(self) -> str:
        return self.locator

    def files(self) -> Iterator[VirtualFile]:
        # A new enumeration restarts the stream from the beginning
        self.close()
        self._source = open_source(self.locator)
        self._tar = tarfile.open(fileobj=self._source, mode="r|*")
        self.cursor = 0
        next_cursor = 0
        try:
            for member in self._tar:
                start = next_cursor
                next_cursor += member.size if member.isfile() else 0
                self.cursor = start
                if not member.isfile():
                    continue
                self.member_stream = self._tar.extractfile(member)
                yield TarStreamFile(self, member, start, next_cursor)
        finally:
            self.member_stream = None

    def close(self) -> None:
        tar, self._tar = self._tar, None
        source, self._source = self._source, None
        self.member_stream = None
        for closeable in (tar, source):
            if closeable is None:
                continue
            try:
                closeable.close()
            except (OSError, tarfile.TarError) as e:
                logger.warning("could not close stream for {}: {}", self.locator, e)
