from __future__ import annotations

import abc
import contextlib
from typing import BinaryIO, Iterator, Optional

from ..log import logger


class VirtualFile(abc.ABC):
    """One entry of a container."""

    def __init__(self) -> None:
        self._stream: Optional[BinaryIO] = None

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Base file name."""

    @property
    @abc.abstractmethod
    def relative_path(self) -> str:
        """Container-relative path using ``/`` separators."""

    @abc.abstractmethod
    def _open_stream(self) -> BinaryIO:
        ...

    @contextlib.contextmanager
    def open(self) -> Iterator[BinaryIO]:
        """Yield the content stream and release it on every exit path."""
        self._stream = self._open_stream()
        try:
            yield self._stream
        finally:
            self.close()

    def read_bytes(self) -> bytes:
        with self.open() as stream:
            return stream.read()

    def read_text(self, encoding: str = "utf-8") -> str:
        return self.read_bytes().decode(encoding)

    def close(self) -> None:
        stream, self._stream = self._stream, None
        if stream is not None:
            try:
                stream.close()
            except OSError as e:
                logger.warning("could not close {}: {}", self.relative_path, e)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.relative_path})"


class VirtualDir(abc.ABC):
    """A container exposing a lazy, restartable sequence of files."""

    @property
    @abc.abstractmethod
    def path(self) -> str:
        """Locator-like description of the container."""

    @abc.abstractmethod
    def files(self) -> Iterator[VirtualFile]:
        """Enumerate files from scratch on every call."""

    def close(self) -> None:
        pass

    def __enter__(self) -> "VirtualDir":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __iter__(self) -> Iterator[VirtualFile]:
        return self.files()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.path})"


class UrlType(abc.ABC):
    """One container resolution strategy in a resolver chain."""

    name: str = ""

    @abc.abstractmethod
    def matches(self, locator: str) -> bool:
        ...

    @abc.abstractmethod
    def create_dir(self, locator: str) -> Optional[VirtualDir]:
        ...

    def __repr__(self) -> str:
        return self.name or type(self).__name__
