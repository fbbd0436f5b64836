"""Concurrent analysis of many directories into one catalog."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from gotestshard.discovery.analyzer import analyze_dir
from gotestshard.discovery.catalog import Catalog

if TYPE_CHECKING:
    from collections.abc import Iterable

    from gotestshard.discovery.build_context import BuildContext
    from gotestshard.models.item import DiscoveredItem

logger = logging.getLogger(__name__)

_DEFAULT_WORKERS = 4


async def analyze_dirs(
    dirs: Iterable[str],
    build: BuildContext | None = None,
    *,
    workers: int = _DEFAULT_WORKERS,
) -> list[list[DiscoveredItem]]:
    """Analyze *dirs* on worker threads, returning one batch per directory.

    Batches come back in the order of *dirs*.  The first failing directory
    aborts the run and its exception propagates.
    """
    if workers < 1:
        msg = f"workers must be >= 1, got {workers}"
        raise ValueError(msg)

    semaphore = asyncio.Semaphore(workers)

    async def _analyze(directory: str) -> list[DiscoveredItem]:
        async with semaphore:
            logger.debug("Analyzing %s", directory)
            return await asyncio.to_thread(analyze_dir, directory, build)

    tasks = [asyncio.ensure_future(_analyze(d)) for d in dirs]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


def build_catalog(
    dirs: Iterable[str],
    build: BuildContext | None = None,
    *,
    workers: int = _DEFAULT_WORKERS,
) -> Catalog:
    """Analyze every directory and return the merged catalog.

    Directories are processed in sorted order so the catalog never depends
    on scheduling.
    """
    ordered = sorted(set(dirs))
    batches = asyncio.run(analyze_dirs(ordered, build, workers=workers))
    catalog = Catalog(batches)
    logger.info("Analyzed %d directories, found %d tests", len(ordered), len(catalog))
    return catalog
