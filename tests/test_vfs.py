import os

import pytest

from typescan.errors import ResolutionError
from typescan.vfs import SystemDir, TarStreamDir, UrlType, Vfs, ZipDir

EXPECTED_PATHS = {
	"pkg/__init__.py",
	"pkg/base.py",
	"pkg/other.py",
	"pkg/broken.py",
	"pkg/data/config.yaml",
}


def _read_all(container):
	return [(f.relative_path, f.read_bytes()) for f in container.files()]


def test_directory_listing_is_restartable(sample_tree):
	with Vfs().from_locator(sample_tree) as container:
		assert isinstance(container, SystemDir)
		first = _read_all(container)
		second = _read_all(container)
	assert first == second
	assert {path for path, _ in first} == EXPECTED_PATHS


def test_directory_skips_ignored_dirs(sample_tree):
	cache = sample_tree / "pkg" / "__pycache__"
	cache.mkdir()
	(cache / "base.cpython-311.pyc").write_bytes(b"\0")
	with Vfs().from_locator(sample_tree) as container:
		assert {f.relative_path for f in container.files()} == EXPECTED_PATHS


def test_file_url_resolves_to_directory(sample_tree):
	with Vfs().from_locator(sample_tree.as_uri()) as container:
		assert isinstance(container, SystemDir)
		assert {f.relative_path for f in container.files()} == EXPECTED_PATHS


def test_zip_archive(sample_zip):
	with Vfs().from_locator(str(sample_zip)) as container:
		assert isinstance(container, ZipDir)
		files = {f.relative_path: f for f in container.files()}
		assert set(files) == EXPECTED_PATHS
		assert files["pkg/data/config.yaml"].name == "config.yaml"
		assert files["pkg/data/config.yaml"].read_text() == "a: 1\n"
		assert _read_all(container) == _read_all(container)


def test_zip_url_scheme(sample_zip):
	with Vfs().from_locator(f"zip:{sample_zip}!/") as container:
		assert isinstance(container, ZipDir)
		assert {f.relative_path for f in container.files()} == EXPECTED_PATHS


def test_tar_stream_restarts_from_the_beginning(sample_tar):
	container = Vfs().from_locator(str(sample_tar))
	try:
		assert isinstance(container, TarStreamDir)
		first = _read_all(container)
		second = _read_all(container)
	finally:
		container.close()
	assert first == second
	assert dict(first)["pkg/data/config.yaml"] == b"a: 1\n"


def test_tar_entries_are_readable_only_while_current(sample_tar):
	container = TarStreamDir(str(sample_tar))
	try:
		files = list(container.files())
		assert {f.relative_path for f in files} == EXPECTED_PATHS
		# the stream has moved past every entry
		assert files[1].read_bytes() == b""
	finally:
		container.close()


def test_tar_partial_reads_stay_inside_window(sample_tar):
	container = TarStreamDir(str(sample_tar))
	try:
		for f in container.files():
			if f.relative_path == "pkg/base.py":
				with f.open() as stream:
					head = stream.read(6)
					rest = stream.read()
				assert head == b"import"
				assert rest.endswith(b"pass\n")
				assert b"from pkg.base" not in rest
	finally:
		container.close()


def test_embedded_archive(embedded_archive):
	locator = f"{embedded_archive}/lib/inner.whl"
	with Vfs().from_locator(locator) as container:
		assert isinstance(container, ZipDir)
		assert container.path == locator
		assert {f.relative_path for f in container.files()} == EXPECTED_PATHS


def test_embedded_archive_ignores_trailing_folder(embedded_archive):
	with Vfs().from_locator(f"{embedded_archive}/lib/inner.whl/pkg") as container:
		assert "pkg/base.py" in {f.relative_path for f in container.files()}


def test_unresolvable_locator_raises(tmp_path):
	missing = tmp_path / "missing"
	with pytest.raises(ResolutionError) as info:
		Vfs().from_locator(missing)
	assert info.value.locator == str(missing)


def test_find_resources_filters_by_prefix_and_name(sample_tree, sample_zip):
	found = Vfs().find_resources(
		[sample_tree, str(sample_zip), sample_tree / "missing"],
		"pkg/data",
		lambda name: name.endswith(".yaml"),
	)
	assert [f.relative_path for f in found] == ["pkg/data/config.yaml", "pkg/data/config.yaml"]


def test_file_close_is_idempotent(sample_zip):
	with Vfs().from_locator(str(sample_zip)) as container:
		file = next(iter(container))
		with file.open() as stream:
			assert stream.read() is not None
		file.close()
		file.close()


class DataOnlyType(UrlType):
	name = "data_only"

	def __init__(self):
		self.seen = []

	def matches(self, locator):
		return True

	def create_dir(self, locator):
		self.seen.append(locator)
		return SystemDir(os.path.join(locator, "pkg", "data"))


def test_added_url_type_takes_precedence(sample_tree):
	custom = DataOnlyType()
	vfs = Vfs().add_url_type(custom)
	assert vfs.url_types[0] is custom
	with vfs.from_locator(sample_tree) as container:
		assert {f.relative_path for f in container.files()} == {"config.yaml"}
	assert custom.seen == [str(sample_tree)]

	with Vfs().from_locator(sample_tree) as container:
		assert {f.relative_path for f in container.files()} == EXPECTED_PATHS


class UnclosableZip:
	filename = "broken.zip"

	def close(self):
		raise OSError("disk gone")


def test_zip_close_is_best_effort(sample_zip):
	ZipDir(UnclosableZip()).close()
	container = ZipDir.from_path(str(sample_zip))
	container.close()
	container.close()
