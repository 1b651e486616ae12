from concurrent.futures import ThreadPoolExecutor

import pytest

from typescan.adapters import SourceAdapter
from typescan.config import ScanConfig
from typescan.filters import ScannerFilter
from typescan.scan import scan
from typescan.scanners import (
	MemberUsageScanner,
	MethodTagsScanner,
	ResourcesScanner,
	SubTypesScanner,
	TypeTagsScanner,
)
from typescan.store import Store

from samples import write_tree


def _all_scanners():
	return [SubTypesScanner(), TypeTagsScanner(), MethodTagsScanner(), MemberUsageScanner(), ResourcesScanner()]


def _normalized(store):
	return {
		index: {key: sorted(store.get(index, key)) for key in store.keys(index)}
		for index in store.indexes()
	}


def test_scans_directory(sample_tree):
	store = scan(ScanConfig.for_locators(sample_tree, scanners=_all_scanners()))
	assert store.get("SubTypes", "pkg.base.Child") == ["pkg.base.GrandChild", "pkg.other.Leaf"]
	assert store.get("TypeTags", "pkg.base.tagged") == ["pkg.base.Child"]
	assert store.get("Resources", "config.yaml") == ["pkg/data/config.yaml"]


def test_failing_file_does_not_abort_scan(sample_tree):
	# pkg/broken.py has a syntax error
	store = scan(ScanConfig.for_locators(sample_tree))
	assert "pkg.base.Child" in store.keys("SubTypes")


def test_unresolvable_locator_is_skipped(sample_tree, tmp_path):
	config = ScanConfig.for_locators(tmp_path / "missing", sample_tree)
	store = scan(config)
	assert "pkg.base.Base" in store.keys("SubTypes")


@pytest.mark.parametrize("workers", [None, 2])
def test_unreadable_tarball_is_skipped(sample_tree, tmp_path, workers):
	corrupt = tmp_path / "corrupt.tar.gz"
	corrupt.write_bytes(b"not a tarball")
	store = scan(ScanConfig.for_locators(corrupt, sample_tree, workers=workers))
	assert "pkg.base.Base" in store.keys("SubTypes")


def test_empty_locators_produce_nothing():
	store = scan(ScanConfig())
	assert store.indexes() == []


def test_archives_scan_like_directories(sample_tree, sample_zip, sample_tar):
	expected = _normalized(scan(ScanConfig.for_locators(sample_tree, scanners=_all_scanners())))
	assert _normalized(scan(ScanConfig.for_locators(sample_zip, scanners=_all_scanners()))) == expected
	assert _normalized(scan(ScanConfig.for_locators(sample_tar, scanners=_all_scanners()))) == expected


def test_sequential_and_parallel_scans_agree(tmp_path, sample_tree, sample_zip, sample_tar):
	extra = write_tree(
		tmp_path / "extra",
		{"ext/impl.py": "from pkg.base import Base, tagged\n\n\n@tagged\nclass Impl(Base):\n\tpass\n"},
	)
	locators = [sample_tree, sample_zip, sample_tar, extra]
	sequential = scan(ScanConfig.for_locators(*locators, scanners=_all_scanners()))
	parallel = scan(ScanConfig.for_locators(*locators, scanners=_all_scanners(), workers=4))
	assert _normalized(sequential) == _normalized(parallel)
	assert "ext.impl.Impl" in parallel.get("SubTypes", "pkg.base.Base")


def test_caller_executor_is_left_running(sample_tree, sample_zip):
	with ThreadPoolExecutor(max_workers=2) as pool:
		store = scan(ScanConfig.for_locators(sample_tree, sample_zip, executor=pool))
		assert pool.submit(lambda: 42).result() == 42
	assert store.get("TypeTags", "pkg.base.tagged") == ["pkg.base.Child"]


def test_inputs_filter_accepts_paths_or_logical_names(sample_tree):
	by_logical = scan(ScanConfig.for_locators(sample_tree, inputs_filter=ScannerFilter().include_package("pkg.other")))
	assert by_logical.keys("SubTypes") == ["pkg.base.Child"]
	assert by_logical.get("SubTypes", "pkg.base.Child") == ["pkg.other.Leaf"]

	by_path = scan(ScanConfig.for_locators(sample_tree, inputs_filter=lambda name: name == "pkg/base.py"))
	assert "pkg.other.Leaf" not in by_path.values("SubTypes")
	assert "pkg.base.GrandChild" in by_path.values("SubTypes")


class CountingAdapter(SourceAdapter):
	def __init__(self):
		self.calls = {}

	def descriptor_of(self, file):
		self.calls[file.relative_path] = self.calls.get(file.relative_path, 0) + 1
		return super().descriptor_of(file)


def test_descriptor_is_shared_across_scanners(sample_tree):
	adapter = CountingAdapter()
	config = ScanConfig.for_locators(sample_tree, scanners=_all_scanners(), adapter=adapter)
	scan(config)
	assert adapter.calls["pkg/base.py"] == 1
	assert adapter.calls["pkg/other.py"] == 1
	assert "pkg/data/config.yaml" not in adapter.calls


def test_scan_fills_a_given_store(sample_tree):
	store = Store()
	store.put("SubTypes", "seed.A", "seed.B")
	assert scan(ScanConfig.for_locators(sample_tree), store) is store
	assert store.get("SubTypes", "seed.A") == ["seed.B"]
	assert "pkg.base.Base" in store.keys("SubTypes")


class FailingScanner(SubTypesScanner):
	kind = "Failing"

	def scan_descriptor(self, module, store):
		raise KeyError(module.name)


def test_scanner_failures_are_isolated(sample_tree):
	config = ScanConfig.for_locators(sample_tree, scanners=[FailingScanner(), TypeTagsScanner()])
	store = scan(config)
	assert store.get("TypeTags", "pkg.base.tagged") == ["pkg.base.Child"]
	assert not store.has_index("Failing")
