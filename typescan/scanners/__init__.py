"""Scanner kinds.

Each scanner writes to the index named by its ``kind``.
"""

from typing import List

from .base import Scanner
from .elements import TypeElementsScanner
from .resources import ResourcesScanner
from .signatures import MethodParameterNamesScanner, MethodSignaturesScanner
from .subtypes import SubTypesScanner
from .tags import FieldTagsScanner, MethodTagsScanner, TypeTagsScanner
from .usage import MemberUsageScanner


def default_scanners() -> List[Scanner]:
    return [SubTypesScanner(), TypeTagsScanner()]


__all__ = [
    "FieldTagsScanner",
    "MemberUsageScanner",
    "MethodParameterNamesScanner",
    "MethodSignaturesScanner",
    "MethodTagsScanner",
    "ResourcesScanner",
    "Scanner",
    "SubTypesScanner",
    "TypeElementsScanner",
    "TypeTagsScanner",
    "default_scanners",
]
