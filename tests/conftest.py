import io
import tarfile
import zipfile

import pytest

from samples import SAMPLE_FILES, write_tree, zip_bytes


@pytest.fixture
def sample_tree(tmp_path):
	return write_tree(tmp_path / "tree")


@pytest.fixture
def sample_zip(tmp_path):
	path = tmp_path / "sample.whl"
	path.write_bytes(zip_bytes())
	return path


@pytest.fixture
def sample_tar(tmp_path):
	path = tmp_path / "sample.tar.gz"
	with tarfile.open(path, "w:gz") as tf:
		for rel, text in SAMPLE_FILES.items():
			data = text.encode("utf-8")
			info = tarfile.TarInfo(rel)
			info.size = len(data)
			tf.addfile(info, io.BytesIO(data))
	return path


@pytest.fixture
def embedded_archive(tmp_path):
	"""An outer zip holding the sample archive at lib/inner.whl."""
	outer = tmp_path / "outer.zip"
	with zipfile.ZipFile(outer, "w") as zf:
		zf.writestr("README.txt", "outer")
		zf.writestr("lib/inner.whl", zip_bytes())
	return outer
