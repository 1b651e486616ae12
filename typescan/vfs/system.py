from __future__ import annotations

import os
from typing import BinaryIO, Iterator, Set

from ..names import relative_to, unix_path
from .base import VirtualDir, VirtualFile


IGNORED_DIRS: Set[str] = {".git", "node_modules", "__pycache__", ".tox", ".venv", ".mypy_cache"}


class SystemFile(VirtualFile):
	def __init__(self, root: str, path: str) -> None:
		super().__init__()
		self.root = root
		self.full_path = path

	@property
	def name(self) -> str:
		return os.path.basename(self.full_path)

	@property
	def relative_path(self) -> str:
		return relative_to(self.root, self.full_path)

	def _open_stream(self) -> BinaryIO:
		return open(self.full_path, "rb")


class SystemDir(VirtualDir):
	def __init__(self, root: str) -> None:
		if not os.path.isdir(root) or not os.access(root, os.R_OK):
			raise NotADirectoryError(f"cannot use dir {root}")
		self.root = os.path.abspath(root)

	@property
	def path(self) -> str:
		return unix_path(self.root)

	def files(self) -> Iterator[VirtualFile]:
		for dirpath, dirnames, filenames in os.walk(self.root):
			# Skip common ignore dirs
			dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_DIRS)
			for filename in sorted(filenames):
				path = os.path.join(dirpath, filename)
				if os.path.isfile(path):
					yield SystemFile(self.root, path)
