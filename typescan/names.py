from __future__ import annotations

import os
import posixpath
from typing import Iterable

SOURCE_SUFFIX = ".py"


def unix_path(path: str) -> str:
	return path.replace("\\", "/")


def to_logical_name(rel_path: str) -> str:
	"""Dotted form of a container-relative path: ``pkg/mod.py`` -> ``pkg.mod.py``."""
	return unix_path(rel_path).strip("/").replace("/", ".")


def to_module_name(rel_path: str) -> str:
	without_ext = posixpath.splitext(unix_path(rel_path).strip("/"))[0]
	parts = []
	for part in without_ext.split("/"):
		if part == "__init__":
			continue
		parts.append(part)
	return ".".join(parts).replace("-", "_")


def to_package_name(module_name: str, rel_path: str = "") -> str:
	# A package's __init__ module is its own package
	if posixpath.basename(unix_path(rel_path)) == "__init__.py":
		return module_name
	if "." in module_name:
		return module_name.rsplit(".", 1)[0]
	return ""


def is_source_path(path: str) -> bool:
	return path.endswith(SOURCE_SUFFIX)


def join_names(names: Iterable[str], separator: str = ", ") -> str:
	return separator.join(names)


def relative_to(root: str, path: str) -> str:
	return unix_path(os.path.relpath(path, root))
