"""Describes modules by executing them and inspecting the live objects.

Decorators and call sites are not kept by the runtime, so tag names and
usages are taken from the parsed source of the same file.
"""

from __future__ import annotations

import inspect
import sys
import types
import typing
from typing import Any, Dict, List, Optional

from ..errors import ExtractionError
from ..model import (
    FieldDescriptor,
    MemberDescriptor,
    ModuleDescriptor,
    ParameterDescriptor,
    TypeDescriptor,
)
from ..names import to_module_name, to_package_name
from ..vfs import VirtualFile
from .base import MetadataAdapter
from .source import is_public_name, parse_python_module, read_source

PARAMETER_KINDS = {
    inspect.Parameter.POSITIONAL_ONLY: "positional",
    inspect.Parameter.POSITIONAL_OR_KEYWORD: "positional",
    inspect.Parameter.VAR_POSITIONAL: "vararg",
    inspect.Parameter.KEYWORD_ONLY: "keyword",
    inspect.Parameter.VAR_KEYWORD: "kwarg",
}


def is_generated(name: str) -> bool:
    # PEP 649 annotation functions
    return name.startswith("__annotate")


def qualified_name(obj: Any) -> str:
    return f"{obj.__module__}.{obj.__qualname__}"


def type_display(hint: Any) -> str:
    if hint is inspect.Parameter.empty:
        return "object"
    if hint is None or hint is type(None):
        return "None"
    if isinstance(hint, str):
        return hint
    if isinstance(hint, type) and not typing.get_args(hint):
        return qualified_name(hint)
    return repr(hint)


def tag_display(metadata: Any) -> str:
    return qualified_name(metadata if isinstance(metadata, type) else type(metadata))


def split_annotated(hint: Any) -> tuple:
    if typing.get_origin(hint) is typing.Annotated:
        return type_display(hint.__origin__), [tag_display(m) for m in hint.__metadata__]
    return type_display(hint), []


def _hints(obj: Any) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(obj, include_extras=True)
    except (NameError, TypeError, AttributeError):
        # unresolvable forward references fall back to the raw annotations
        return dict(getattr(obj, "__annotations__", {}) or {})


def _unregister(module: types.ModuleType) -> None:
    if sys.modules.get(module.__name__) is module:
        del sys.modules[module.__name__]


class IntrospectionAdapter(MetadataAdapter):
    """Executes each module in a fresh namespace and reads it with ``inspect``."""

    def descriptor_of(self, file: VirtualFile) -> ModuleDescriptor:
        text = read_source(file)
        path = file.relative_path
        module_name = to_module_name(path)
        package = to_package_name(module_name, path)
        try:
            static = parse_python_module(module_name, path, text, package)
        except (SyntaxError, ValueError) as e:
            raise ExtractionError(path, str(e)) from e
        module = self._execute(module_name, package, path, text)
        try:
            return self._describe(module, static)
        finally:
            _unregister(module)

    def _execute(self, module_name: str, package: str, path: str, text: str) -> types.ModuleType:
        module = types.ModuleType(module_name)
        module.__file__ = path
        module.__package__ = package
        if path.endswith("__init__.py"):
            module.__path__ = []
        # Registered while alive so dataclasses and get_type_hints can find it.
        # An already imported module of the same name is left in place.
        sys.modules.setdefault(module_name, module)
        try:
            exec(compile(text, path, "exec"), module.__dict__)
        except Exception as e:
            _unregister(module)
            raise ExtractionError(path, f"{type(e).__name__}: {e}") from e
        return module

    def _describe(self, module: types.ModuleType, static: ModuleDescriptor) -> ModuleDescriptor:
        static_types = {t.name: t for t in static.types}
        static_functions = {f.name: f for f in static.functions}
        classes: List[TypeDescriptor] = []
        functions: List[MemberDescriptor] = []
        seen = set()
        for attr, value in list(vars(module).items()):
            if is_generated(attr) or getattr(value, "__module__", None) != module.__name__ or id(value) in seen:
                continue
            seen.add(id(value))
            if inspect.isclass(value):
                classes.extend(self._describe_class(value, static_types))
            elif inspect.isfunction(value):
                functions.append(
                    self._describe_member(value, module.__name__, "function", static_functions.get(value.__name__))
                )
        return ModuleDescriptor(
            name=static.name,
            path=static.path,
            imports=static.imports,
            types=classes,
            functions=functions,
        )

    def _describe_class(self, cls: type, static_types: Dict[str, TypeDescriptor]) -> List[TypeDescriptor]:
        name = qualified_name(cls)
        static = static_types.get(name)
        static_methods = {m.name: m for m in static.methods} if static else {}
        methods: List[MemberDescriptor] = []
        nested: List[TypeDescriptor] = []
        for attr, value in list(vars(cls).items()):
            if is_generated(attr):
                continue
            if isinstance(value, staticmethod):
                methods.append(self._describe_member(value.__func__, name, "staticmethod", static_methods.get(attr)))
            elif isinstance(value, classmethod):
                methods.append(self._describe_member(value.__func__, name, "classmethod", static_methods.get(attr)))
            elif inspect.isfunction(value):
                methods.append(self._describe_member(value, name, "method", static_methods.get(attr)))
            elif inspect.isclass(value) and value.__qualname__.startswith(cls.__qualname__ + "."):
                nested.extend(self._describe_class(value, static_types))
        described = TypeDescriptor(
            name=name,
            bases=[qualified_name(base) for base in cls.__bases__],
            tags=static.tags if static else [],
            fields=self._describe_fields(cls, name, static),
            methods=methods,
            public=is_public_name(cls.__name__),
            line=static.line if static else 0,
        )
        return [described] + nested

    def _describe_fields(self, cls: type, owner: str, static: Optional[TypeDescriptor]) -> List[FieldDescriptor]:
        hints = _hints(cls)
        own = inspect.get_annotations(cls)
        fields: Dict[str, FieldDescriptor] = {}
        for name in own:
            type_name, tags = split_annotated(hints.get(name, own[name]))
            fields[name] = FieldDescriptor(
                name=name, owner=owner, type_name=type_name, tags=tags, public=is_public_name(name)
            )
        for field in static.fields if static else []:
            fields.setdefault(field.name, field)
        return list(fields.values())

    def _describe_member(
        self, func: Any, owner: str, kind: str, static: Optional[MemberDescriptor]
    ) -> MemberDescriptor:
        hints = _hints(func)
        try:
            signature = inspect.signature(func)
        except (TypeError, ValueError):
            signature = None
        parameters: List[ParameterDescriptor] = []
        if signature is not None:
            entries = list(signature.parameters.values())
            if kind in ("method", "classmethod") and entries:
                entries = entries[1:]  # self / cls
            for param in entries:
                type_name, tags = split_annotated(hints.get(param.name, param.annotation))
                parameters.append(
                    ParameterDescriptor(
                        name=param.name, type_name=type_name, tags=tags, kind=PARAMETER_KINDS[param.kind]
                    )
                )
        return_hint = hints.get("return", signature.return_annotation if signature else inspect.Parameter.empty)
        return MemberDescriptor(
            name=func.__name__,
            owner=owner,
            parameters=parameters,
            return_type=type_display(return_hint),
            tags=static.tags if static else [],
            usages=static.usages if static else [],
            kind=kind,
            public=is_public_name(func.__name__),
            line=getattr(getattr(func, "__code__", None), "co_firstlineno", 0),
        )
