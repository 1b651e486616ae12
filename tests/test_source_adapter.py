from textwrap import dedent

import pytest

from typescan.adapters import SourceAdapter, parse_python_module
from typescan.errors import ExtractionError
from typescan.vfs import SystemFile


def test_parse_simple_module(tmp_path):
	code = dedent(
		"""
		import os
		from sys import path as sys_path

		class A(Base):
			def m(self, x, *, y=1, **kw):
				return x

		def f(a, b=2, *args, **kwargs):
			return a + b
		"""
	)
	p = tmp_path / "m.py"
	p.write_text(code)
	module = parse_python_module("pkg.m", str(p), p.read_text())
	assert module.name == "pkg.m"
	assert "os" in module.imports
	assert "sys.path" in module.imports
	assert any(c.name == "pkg.m.A" for c in module.types)
	assert any(fn.name == "f" for fn in module.functions)

	(cls,) = module.types
	assert cls.bases == ["Base"]
	(method,) = cls.methods
	assert method.kind == "method"
	assert [(p.name, p.kind) for p in method.parameters] == [("x", "positional"), ("y", "keyword"), ("kw", "kwarg")]
	f = module.functions[0]
	assert [p.kind for p in f.parameters] == ["positional", "positional", "vararg", "kwarg"]
	assert all(p.type_name == "object" for p in f.parameters)


def test_names_resolve_through_imports_and_builtins():
	code = dedent(
		"""
		import collections.abc as cabc
		from typing import Annotated, Generic, TypeVar
		from .models import Record
		from ..core import registry

		T = TypeVar("T")

		@registry.register
		class Repo(Generic[T], cabc.Mapping):
			items: Annotated[list[Record], registry.Indexed(unique=True)]

			def __init__(self, size: int):
				self.size = size
				self._cache = {}

			@staticmethod
			def create(name: "str | None" = None) -> "Repo":
				return Repo(0)

			@classmethod
			def empty(cls) -> Record:
				return cls.create()
		"""
	)
	module = parse_python_module("app.store.repo", "app/store/repo.py", code)
	(repo,) = module.types
	assert repo.name == "app.store.repo.Repo"
	assert repo.bases == ["typing.Generic", "collections.abc.Mapping"]
	assert repo.tags == ["app.core.registry.register"]

	fields = {f.name: f for f in repo.fields}
	assert fields["items"].type_name == "builtins.list[app.store.models.Record]"
	assert fields["items"].tags == ["app.core.registry.Indexed"]
	assert fields["size"].public
	assert not fields["_cache"].public

	methods = {m.name: m for m in repo.methods}
	assert methods["__init__"].parameters[0].type_name == "builtins.int"
	create = methods["create"]
	assert create.kind == "staticmethod"
	assert create.tags == ["builtins.staticmethod"]
	assert create.parameters[0].type_name == "builtins.str | None"
	assert create.return_type == "app.store.repo.Repo"
	empty = methods["empty"]
	assert empty.kind == "classmethod"
	assert empty.parameters == []
	assert empty.return_type == "app.store.models.Record"
	assert [u.target for u in empty.usages] == ["app.store.repo.Repo.create"]


def test_nested_classes_are_qualified():
	code = dedent(
		"""
		class Outer:
			class Inner(Exception):
				pass
		"""
	)
	module = parse_python_module("m", "m.py", code)
	assert [t.name for t in module.types] == ["m.Outer", "m.Outer.Inner"]
	assert module.types[1].bases == ["builtins.Exception"]


def test_usages_of_calls_and_attributes():
	code = dedent(
		"""
		import os
		from pkg.util import helper

		class Service:
			def run(self, path):
				self.items.append(path)
				helper(os.path.join(path, "x"))
				return len(path)
		"""
	)
	module = parse_python_module("pkg.svc", "pkg/svc.py", code)
	(run,) = module.types[0].methods
	targets = {u.target for u in run.usages}
	assert targets == {"pkg.svc.Service.items", "pkg.util.helper", "os.path.join", "builtins.len"}
	assert all(u.line > 0 for u in run.usages)


def test_package_init_resolves_relative_imports_against_itself():
	module = parse_python_module("pkg", "pkg/__init__.py", "from .base import Base\n")
	assert module.imports == ["pkg.base.Base"]


def test_adapter_reads_virtual_files(sample_tree):
	adapter = SourceAdapter()
	module = adapter.descriptor_of(SystemFile(str(sample_tree), str(sample_tree / "pkg" / "base.py")))
	assert module.name == "pkg.base"
	assert adapter.super_name(module.types[0]) == "builtins.object"
	base = next(t for t in module.types if t.name == "pkg.base.Base")
	assert adapter.member_full_key(base.methods[0]) == "pkg.base.Base.run(builtins.int, builtins.str)"


def test_adapter_wraps_syntax_errors(sample_tree):
	file = SystemFile(str(sample_tree), str(sample_tree / "pkg" / "broken.py"))
	with pytest.raises(ExtractionError) as info:
		SourceAdapter().descriptor_of(file)
	assert info.value.path == "pkg/broken.py"
