"""Tear down every panel and dataset recorded in the id registry."""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from functools import partial
from typing import Any, List, Optional

from . import config
from .storage.datasets import delete_dataset
from .storage.registry import FeedSourceMap, IdRegistry

log = logging.getLogger(__name__)


def _read_ids(registry: IdRegistry, category: str) -> List[str]:
    try:
        return registry.read_all(category)
    except Exception as exc:
        log.warning("Could not read registry %s, nothing to clean up: %s", category, exc)
        return []


def _report_delete_failure(dataset_id: str, future: Future) -> None:
    if future.cancelled():
        log.warning("Deletion of dataset %s was cancelled", dataset_id)
        return
    exc = future.exception()
    if exc is not None:
        log.error("Could not delete dataset %s: %s", dataset_id, exc)
    else:
        log.debug("Deleted dataset %s", dataset_id)


def uninstall_all(
    prefs: Any,
    panels: Any,
    datasets: Any,
    *,
    executor: Optional[Executor] = None,
    forget: bool = False,
) -> List[Future]:
    """Uninstall and unregister all panels and delete all datasets.

    Panels are removed synchronously, one id at a time. Dataset deletions are
    submitted to ``executor`` (a private thread pool by default) and are not
    waited for; the returned futures let callers wait if they want to. Every
    id is handled independently, so one failure never stops the others.

    The registries are left as they are unless ``forget`` is set, in which
    case both id lists and the feed source map are removed as well.
    """

    registry = IdRegistry(prefs)

    panel_ids = _read_ids(registry, config.PANEL_IDS_PREF)
    for panel_id in panel_ids:
        try:
            panels.uninstall(panel_id)
        except Exception as exc:
            log.error("Could not uninstall panel %s: %s", panel_id, exc)
        try:
            panels.unregister(panel_id)
        except Exception as exc:
            log.error("Could not unregister panel %s: %s", panel_id, exc)

    futures: List[Future] = []
    dataset_ids = _read_ids(registry, config.DATASET_IDS_PREF)
    if dataset_ids:
        own_executor = executor is None
        pool = executor or ThreadPoolExecutor(
            max_workers=config.build_settings().uninstall_workers,
            thread_name_prefix="home-rss-uninstall",
        )
        try:
            for dataset_id in dataset_ids:
                future = pool.submit(delete_dataset, datasets, dataset_id)
                future.add_done_callback(partial(_report_delete_failure, dataset_id))
                futures.append(future)
        finally:
            if own_executor:
                pool.shutdown(wait=False)

    log.info(
        "Uninstall: removed %d panels, scheduled %d dataset deletions",
        len(panel_ids),
        len(futures),
    )

    if forget:
        try:
            registry.clear(config.PANEL_IDS_PREF)
            registry.clear(config.DATASET_IDS_PREF)
            FeedSourceMap(prefs).clear()
        except Exception as exc:
            log.error("Could not clear the id registries: %s", exc)

    return futures


__all__ = ["uninstall_all"]
