"""Include/exclude regex predicates for input paths and scanner keys.

A ``ScannerFilter`` is an ordered chain of include and exclude patterns. A
string is accepted by default when the chain is empty or starts with an
exclude; otherwise it must be included by some pattern and not excluded by a
later one. Patterns must match the whole string.
"""

from __future__ import annotations

import abc
import re
from typing import Callable, List

from .errors import ConfigurationError


class _Matcher(abc.ABC):
    def __init__(self, regex: str) -> None:
        self.pattern = re.compile(regex)

    @abc.abstractmethod
    def __call__(self, value: str) -> bool:
        ...

    def __repr__(self) -> str:
        return self.pattern.pattern


class _Include(_Matcher):
    def __call__(self, value: str) -> bool:
        return self.pattern.fullmatch(value) is not None

    def __repr__(self) -> str:
        return "+" + self.pattern.pattern


class _Exclude(_Matcher):
    def __call__(self, value: str) -> bool:
        return self.pattern.fullmatch(value) is None

    def __repr__(self) -> str:
        return "-" + self.pattern.pattern


def _package_regex(prefix: str) -> str:
    return re.escape(prefix) + ".*"


class ScannerFilter:
    def __init__(self) -> None:
        self._chain: List[Callable[[str], bool]] = []

    def include(self, regex: str) -> "ScannerFilter":
        return self.add(_Include(regex))

    def exclude(self, regex: str) -> "ScannerFilter":
        return self.add(_Exclude(regex))

    def include_package(self, *prefixes: str) -> "ScannerFilter":
        for prefix in prefixes:
            self.add(_Include(_package_regex(prefix)))
        return self

    def exclude_package(self, *prefixes: str) -> "ScannerFilter":
        for prefix in prefixes:
            self.add(_Exclude(_package_regex(prefix)))
        return self

    def add(self, predicate: Callable[[str], bool]) -> "ScannerFilter":
        self._chain.append(predicate)
        return self

    def test(self, value: str) -> bool:
        accept = not self._chain or isinstance(self._chain[0], _Exclude)
        for predicate in self._chain:
            if accept and isinstance(predicate, _Include):
                continue  # already included
            if not accept and isinstance(predicate, _Exclude):
                continue  # already excluded
            accept = predicate(value)
            if not accept and isinstance(predicate, _Exclude):
                break
        return accept

    __call__ = test

    def __repr__(self) -> str:
        return ", ".join(repr(p) for p in self._chain)

    @classmethod
    def parse(cls, text: str) -> "ScannerFilter":
        """Parse ``"+regex, -regex"`` into a filter."""
        result = cls()
        for token in _tokens(text):
            prefix, pattern = token[0], token[1:]
            if prefix == "+":
                result.include(pattern)
            elif prefix == "-":
                result.exclude(pattern)
            else:
                raise ConfigurationError(
                    "inputs_filter",
                    f"filter entries should start with either + or -, got '{token}'",
                )
        return result

    @classmethod
    def parse_packages(cls, text: str) -> "ScannerFilter":
        """Parse ``"+package, -package"``; each entry matches its whole subtree."""
        result = cls()
        for token in _tokens(text):
            prefix, package = token[0], token[1:]
            if not package.endswith("."):
                package += "."
            if prefix == "+":
                result.include_package(package)
            elif prefix == "-":
                result.exclude_package(package)
            else:
                raise ConfigurationError(
                    "inputs_filter",
                    f"filter entries should start with either + or -, got '{token}'",
                )
        return result


def _tokens(text: str) -> List[str]:
    return [token.strip() for token in text.split(",") if token.strip()]
