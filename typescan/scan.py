"""Scan orchestration: locators -> files -> scanners -> store."""

from __future__ import annotations

import tarfile
import time
import zipfile
from concurrent.futures import Executor, ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Optional

from .errors import ExtractionError, ResolutionError
from .log import logger
from .model import ModuleDescriptor
from .names import to_logical_name
from .store import Store
from .vfs import Vfs, VirtualFile

if TYPE_CHECKING:
    from .config import ScanConfig


def accepts_input(config: "ScanConfig", path: str, logical_name: str) -> bool:
    predicate = config.inputs_filter
    return predicate is None or predicate(path) or predicate(logical_name)


def scan_file(config: "ScanConfig", file: VirtualFile, store: Store, locator: str = "") -> None:
    """Offer one file to every configured scanner that supports it.

    The descriptor is created once by the first scanner that needs it and
    shared with the others. A failing scanner does not stop the rest.
    """
    path = file.relative_path
    logical_name = to_logical_name(path)
    if not accepts_input(config, path, logical_name):
        return
    descriptor: Optional[ModuleDescriptor] = None
    for scanner in config.scanners:
        if not (scanner.supports(path) or scanner.supports(logical_name)):
            continue
        try:
            descriptor = scanner.scan(file, descriptor, store)
        except ExtractionError as e:
            logger.debug(
                "could not scan file {} in {} with scanner {}: {}", path, locator, scanner.kind, e
            )


def scan_locator(config: "ScanConfig", locator: str, store: Store, vfs: Vfs) -> int:
    """Scan every file of one locator. Returns the number of files visited."""
    try:
        container = vfs.from_locator(locator)
    except ResolutionError as e:
        logger.warning("could not create dir for {}, skipping: {}", locator, e)
        return 0
    count = 0
    try:
        for file in container.files():
            scan_file(config, file, store, locator)
            count += 1
    except (OSError, tarfile.TarError, zipfile.BadZipFile) as e:
        logger.warning("could not read dir for {} after {} files, skipping the rest: {}", locator, count, e)
    finally:
        try:
            container.close()
        except OSError as e:
            logger.warning("could not close dir {}: {}", container.path, e)
    return count


def scan(config: "ScanConfig", store: Optional[Store] = None, vfs: Optional[Vfs] = None) -> Store:
    """Run every configured scanner over every locator, filling ``store``."""
    store = Store() if store is None else store
    if not config.locators:
        logger.error("given scan locators are empty. set locators for scanning")
        return store
    vfs = Vfs() if vfs is None else vfs
    start = time.perf_counter()

    executor: Optional[Executor] = config.executor
    owned = executor is None and config.workers is not None
    if owned:
        executor = ThreadPoolExecutor(max_workers=config.workers, thread_name_prefix="typescan")

    files = 0
    try:
        if executor is None:
            for locator in config.locators:
                files += scan_locator(config, locator, store, vfs)
        else:
            futures = [
                executor.submit(scan_locator, config, locator, store, vfs)
                for locator in config.locators
            ]
            wait(futures)
            for future in futures:
                files += future.result()
    finally:
        if owned:
            executor.shutdown(wait=True)

    elapsed = (time.perf_counter() - start) * 1000
    logger.info(
        "scanned {} locators ({} files) in {:.0f} ms, producing {}{}",
        len(config.locators),
        files,
        elapsed,
        store.describe(),
        f" [using {config.workers} workers]" if config.workers else "",
    )
    return store
