import json
import sys
from textwrap import dedent

import pytest

from typescan.adapters import IntrospectionAdapter, SourceAdapter
from typescan.errors import ExtractionError
from typescan.vfs import SystemFile

SERVICE = dedent(
	"""\
	from typing import Annotated


	class Marker:
		pass


	def tagged(fn):
		return fn


	class Service:
		port: Annotated[int, Marker]

		@tagged
		def handle(self, request: str, retries: int = 3) -> bool:
			return self.check(request)

		@staticmethod
		def build(name: str) -> "Service":
			return Service()

		class Options:
			verbose: bool = False


	Alias = Service


	def main(argv: list) -> int:
		return 0
	"""
)


def _file(tmp_path, rel, text):
	path = tmp_path / rel
	path.parent.mkdir(parents=True, exist_ok=True)
	path.write_text(text)
	return SystemFile(str(tmp_path), str(path))


def test_describes_live_module(tmp_path):
	module = IntrospectionAdapter().descriptor_of(_file(tmp_path, "svcpkg/intro.py", SERVICE))
	assert module.name == "svcpkg.intro"
	assert "svcpkg.intro" not in sys.modules

	types = {t.name: t for t in module.types}
	assert set(types) == {"svcpkg.intro.Marker", "svcpkg.intro.Service", "svcpkg.intro.Service.Options"}
	service = types["svcpkg.intro.Service"]
	assert service.bases == ["builtins.object"]

	(port,) = service.fields
	assert port.type_name == "builtins.int"
	assert port.tags == ["svcpkg.intro.Marker"]

	methods = {m.name: m for m in service.methods}
	handle = methods["handle"]
	assert handle.kind == "method"
	assert [p.name for p in handle.parameters] == ["request", "retries"]
	assert [p.type_name for p in handle.parameters] == ["builtins.str", "builtins.int"]
	assert handle.return_type == "builtins.bool"
	assert handle.tags == ["svcpkg.intro.tagged"]
	assert [u.target for u in handle.usages] == ["svcpkg.intro.Service.check"]
	assert handle.line > 0

	build = methods["build"]
	assert build.kind == "staticmethod"
	assert build.return_type == "svcpkg.intro.Service"

	assert [f.name for f in module.functions] == ["tagged", "main"]


def test_agrees_with_source_adapter_on_keys(tmp_path):
	file = _file(tmp_path, "svcpkg/intro.py", SERVICE)
	native = IntrospectionAdapter()
	static = SourceAdapter()
	native_module = native.descriptor_of(file)
	static_module = static.descriptor_of(file)

	def keys(adapter, module):
		found = {adapter.member_full_key(f) for f in module.functions}
		for cls in module.types:
			found.update(adapter.member_full_key(m) for m in cls.methods)
		return found

	assert keys(native, native_module) == keys(static, static_module)


def test_execution_failures_raise_extraction_error(tmp_path):
	file = _file(tmp_path, "bad_runtime.py", "raise RuntimeError('boom')\n")
	with pytest.raises(ExtractionError) as info:
		IntrospectionAdapter().descriptor_of(file)
	assert info.value.path == "bad_runtime.py"
	assert "RuntimeError" in str(info.value)
	assert "bad_runtime" not in sys.modules


def test_imported_module_of_the_same_name_is_kept(tmp_path):
	file = _file(tmp_path, "json/__init__.py", "class Payload:\n\tpass\n")
	module = IntrospectionAdapter().descriptor_of(file)
	assert [t.name for t in module.types] == ["json.Payload"]
	assert sys.modules["json"] is json


def test_failed_module_of_the_same_name_keeps_imported_one(tmp_path):
	file = _file(tmp_path, "json/__init__.py", "raise RuntimeError('boom')\n")
	with pytest.raises(ExtractionError):
		IntrospectionAdapter().descriptor_of(file)
	assert sys.modules["json"] is json
