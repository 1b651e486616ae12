from __future__ import annotations

import io
import posixpath
import zipfile
from typing import BinaryIO, Iterator, Optional

from ..log import logger
from .base import VirtualDir, VirtualFile

ZIP_SUFFIXES = (".zip", ".whl", ".egg", ".jar", ".war", ".ear", ".pyz")


def is_zip_path(path: str) -> bool:
    return path.lower().endswith(ZIP_SUFFIXES)


class ZipEntryFile(VirtualFile):
    def __init__(self, archive: "ZipDir", info: zipfile.ZipInfo) -> None:
        super().__init__()
        self.archive = archive
        self.info = info

    @property
    def name(self) -> str:
        return posixpath.basename(self.info.filename)

    @property
    def relative_path(self) -> str:
        return self.info.filename

    def _open_stream(self) -> BinaryIO:
        return self.archive.zip_file.open(self.info)


class ZipDir(VirtualDir):
    """A zip-format archive, read through random access."""

    def __init__(self, zip_file: zipfile.ZipFile, path: Optional[str] = None) -> None:
        self.zip_file = zip_file
        self._path = path or str(zip_file.filename)

    @classmethod
    def from_path(cls, path: str) -> "ZipDir":
        return cls(zipfile.ZipFile(path), path)

    @classmethod
    def from_bytes(cls, data: bytes, path: str) -> "ZipDir":
        return cls(zipfile.ZipFile(io.BytesIO(data)), path)

    @property
    def path(self) -> str:
        return self._path

    def files(self) -> Iterator[VirtualFile]:
        for info in self.zip_file.infolist():
            if not info.is_dir():
                yield ZipEntryFile(self, info)

    def close(self) -> None:
        try:
            self.zip_file.close()
        except OSError as e:
            logger.warning("could not close zip file {}: {}", self._path, e)
