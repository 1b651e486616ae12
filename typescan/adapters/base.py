"""The contract scanners use to read module descriptors."""

from __future__ import annotations

import abc
from typing import List, Union

from ..model import FieldDescriptor, MemberDescriptor, ModuleDescriptor, TypeDescriptor, UsageDescriptor
from ..names import is_source_path, join_names
from ..vfs import VirtualFile

Described = Union[TypeDescriptor, MemberDescriptor, FieldDescriptor]


class MetadataAdapter(abc.ABC):
    """Turns one virtual file into a ``ModuleDescriptor`` and reads it back.

    Implementations differ in how the descriptor is produced; the accessors
    below are shared so scanners never touch descriptor internals.
    """

    def supports(self, path: str) -> bool:
        return is_source_path(path)

    @abc.abstractmethod
    def descriptor_of(self, file: VirtualFile) -> ModuleDescriptor:
        """Raises ExtractionError when the file cannot be described."""

    def types(self, module: ModuleDescriptor) -> List[TypeDescriptor]:
        return module.types

    def functions(self, module: ModuleDescriptor) -> List[MemberDescriptor]:
        return module.functions

    def name(self, cls: TypeDescriptor) -> str:
        return cls.name

    def super_name(self, cls: TypeDescriptor) -> str:
        return cls.bases[0] if cls.bases else "builtins.object"

    def interface_names(self, cls: TypeDescriptor) -> List[str]:
        return cls.bases[1:]

    def fields(self, cls: TypeDescriptor) -> List[FieldDescriptor]:
        return cls.fields

    def methods(self, cls: TypeDescriptor) -> List[MemberDescriptor]:
        return cls.methods

    def class_tags(self, cls: TypeDescriptor) -> List[str]:
        return cls.tags

    def member_tags(self, member: MemberDescriptor) -> List[str]:
        return member.tags

    def field_tags(self, field: FieldDescriptor) -> List[str]:
        return field.tags

    def parameter_tags(self, member: MemberDescriptor, index: int) -> List[str]:
        if index < len(member.parameters):
            return member.parameters[index].tags
        return []

    def parameter_types(self, member: MemberDescriptor) -> List[str]:
        return [p.type_name for p in member.parameters]

    def parameter_names(self, member: MemberDescriptor) -> List[str]:
        return [p.name for p in member.parameters]

    def return_type_name(self, member: MemberDescriptor) -> str:
        return member.return_type

    def usages(self, member: MemberDescriptor) -> List[UsageDescriptor]:
        return member.usages

    def field_name(self, field: FieldDescriptor) -> str:
        return field.name

    def is_public(self, described: Described) -> bool:
        return described.public

    def member_key(self, member: MemberDescriptor) -> str:
        return f"{member.name}({join_names(self.parameter_types(member))})"

    def member_full_key(self, member: MemberDescriptor) -> str:
        return f"{member.owner}.{self.member_key(member)}"
