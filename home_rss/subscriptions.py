"""Subscribe to a feed: mint ids, record them, install a panel, fill its dataset.

Order of a subscription:

1. mint a panel id and a dataset id,
2. append both to the id registry (before anything becomes visible, so an
   interrupted subscription can still be cleaned up on uninstall),
3. register and install the panel,
4. fetch the feed, extract items and replace the dataset,
5. open the panel.

Failures in steps 3-5 are collected in a :class:`SubscriptionReport`, logged,
and never rolled back or re-raised. A feed that cannot be fetched at all leaves
an installed panel with an empty dataset until the next refresh.
"""

from __future__ import annotations

import logging
import uuid
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, List, Optional, Sequence

from .config import DATASET_IDS_PREF, PANEL_IDS_PREF
from .feed.extract import extract_items
from .feed.fetch import fetch_feed
from .feed.models import FeedDescriptor, ParsedFeed
from .panels import home_page_uri, list_panel_options
from .reporting import (
    STATUS_EMPTY,
    STATUS_ERROR,
    STATUS_OK,
    SubscriptionReport,
    report_errors,
)
from .storage.datasets import replace_dataset
from .storage.registry import FeedSourceMap, IdRegistry
from .uninstall import uninstall_all

log = logging.getLogger(__name__)

Fetcher = Callable[[str], Optional[ParsedFeed]]
Prompt = Callable[[List[str]], Optional[int]]


def new_id() -> str:
    return str(uuid.uuid4())


def log_open_panel(panel_id: str) -> None:
    log.info("Opening %s", home_page_uri(panel_id))


class SubscriptionManager:
    """Owns id minting and the subscribe/refresh/teardown entry points.

    ``prefs``, ``panels`` and ``datasets`` are the host collaborators (see
    :mod:`home_rss.storage` and :mod:`home_rss.panels` for local versions).
    """

    def __init__(
        self,
        prefs: Any,
        panels: Any,
        datasets: Any,
        *,
        fetcher: Optional[Fetcher] = None,
        session: Any = None,
        opener: Optional[Callable[[str], None]] = None,
        prompt: Optional[Prompt] = None,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.prefs = prefs
        self.panels = panels
        self.datasets = datasets
        self.registry = IdRegistry(prefs)
        self.sources = FeedSourceMap(prefs)
        if fetcher is None:
            fetcher = partial(fetch_feed, session=session) if session is not None else fetch_feed
        self.fetcher = fetcher
        self.opener = opener or log_open_panel
        self.prompt = prompt
        self.id_factory = id_factory

    def subscribe(self, feed: FeedDescriptor) -> SubscriptionReport:
        panel_id = self.id_factory()
        dataset_id = self.id_factory()
        report = SubscriptionReport(panel_id=panel_id, dataset_id=dataset_id, feed_url=feed.href)
        report.start()

        try:
            self.registry.append(PANEL_IDS_PREF, panel_id)
            self.registry.append(DATASET_IDS_PREF, dataset_id)
        except Exception as exc:
            report.add_error("record ids", exc)
            report.finish(STATUS_ERROR, message=f"Could not record panel for {feed.href}")
            report_errors(report, log)
            return report

        try:
            self.sources.record(dataset_id, href=feed.href, title=feed.title, panel_id=panel_id)
        except Exception as exc:
            # Only refresh depends on the source map; the subscription goes on.
            report.add_error("record feed source", exc)

        # Untitled feeds show their URL until the channel title is known.
        labels = {"title": feed.label}

        def options_provider() -> dict:
            return list_panel_options(labels["title"], dataset_id)

        try:
            self.panels.register(panel_id, options_provider)
            self.panels.install(panel_id)
        except Exception as exc:
            report.add_error("install panel", exc)
            report.finish(STATUS_ERROR, message=f"Could not install panel for {feed.href}")
            report_errors(report, log)
            return report

        log.info("Subscribed to %s (panel %s, dataset %s)", feed.href, panel_id, dataset_id)
        parsed = self._sync(report, feed.href, dataset_id)
        if parsed is not None:
            if not feed.title and parsed.title:
                labels["title"] = parsed.title
                self._adopt_channel_title(report, feed.href, dataset_id, panel_id, parsed.title)
            try:
                self.opener(panel_id)
                report.opened = True
            except Exception as exc:
                report.add_error("open panel", exc)
                report.finish(STATUS_ERROR, items=report.items, message=f"Could not open panel {panel_id}")

        report_errors(report, log)
        return report

    def subscribe_async(self, feed: FeedDescriptor, executor: Optional[Executor] = None) -> Future:
        """Run :meth:`subscribe` off the calling thread.

        The future resolves to the :class:`SubscriptionReport`; pipeline
        failures end up in the report, not in the future.
        """

        if executor is not None:
            return executor.submit(self.subscribe, feed)
        pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="home-rss-subscribe")
        try:
            return pool.submit(self.subscribe, feed)
        finally:
            pool.shutdown(wait=False)

    def _adopt_channel_title(
        self, report: SubscriptionReport, href: str, dataset_id: str, panel_id: str, title: str
    ) -> None:
        # Installing again stores the options with the channel title.
        try:
            self.sources.record(dataset_id, href=href, title=title, panel_id=panel_id)
            self.panels.install(panel_id)
        except Exception as exc:
            report.add_error("update panel title", exc)
            report.finish(report.status, items=report.items)

    def _sync(self, report: SubscriptionReport, href: str, dataset_id: str) -> Optional[ParsedFeed]:
        try:
            feed = self.fetcher(href)
            if feed is None:
                report.finish(STATUS_EMPTY, message=f"No feed available at {href}")
                return None
            items = extract_items(feed)
            replace_dataset(self.datasets, dataset_id, items)
        except Exception as exc:
            report.add_error("update dataset", exc)
            report.finish(STATUS_ERROR, message=f"Could not update dataset {dataset_id} from {href}")
            return None
        report.finish(STATUS_OK, items=len(items))
        return feed

    def choose_feed(
        self, candidates: Sequence[FeedDescriptor], prompt: Optional[Prompt] = None
    ) -> Optional[SubscriptionReport]:
        """Let the user pick one of ``candidates`` and subscribe to it.

        The prompt receives the labels (title, or URL when untitled) and
        returns the selected index, or ``None``/a negative number when the
        choice was dismissed.
        """

        candidates = list(candidates)
        chooser = prompt or self.prompt
        if not candidates:
            return None
        if chooser is None:
            log.warning("No prompt available to choose between %d feeds", len(candidates))
            return None

        index = chooser([feed.label for feed in candidates])
        if index is None or index < 0 or index >= len(candidates):
            log.debug("Feed choice dismissed")
            return None
        return self.subscribe(candidates[index])

    def on_subscribe_requested(
        self, candidates: Sequence[FeedDescriptor], prompt: Optional[Prompt] = None
    ) -> Optional[SubscriptionReport]:
        candidates = list(candidates)
        if not candidates:
            return None
        if len(candidates) == 1:
            return self.subscribe(candidates[0])
        return self.choose_feed(candidates, prompt)

    def refresh(self, dataset_id: str) -> Optional[SubscriptionReport]:
        """Re-fetch the feed behind ``dataset_id`` and replace its items."""

        source = self.sources.get(dataset_id)
        if source is None:
            log.warning("No feed recorded for dataset %s", dataset_id)
            return None
        href = str(source["href"])
        report = SubscriptionReport(
            panel_id=str(source.get("panel_id") or ""),
            dataset_id=dataset_id,
            feed_url=href,
        )
        report.start()
        self._sync(report, href, dataset_id)
        report_errors(report, log)
        return report

    def refresh_all(self) -> List[SubscriptionReport]:
        reports: List[SubscriptionReport] = []
        known = self.sources.read_all()
        for dataset_id in self.registry.dataset_ids():
            if dataset_id not in known:
                continue
            report = self.refresh(dataset_id)
            if report is not None:
                reports.append(report)
        return reports

    def on_teardown(self, **kwargs: Any):
        return uninstall_all(self.prefs, self.panels, self.datasets, **kwargs)


__all__ = ["SubscriptionManager", "log_open_panel", "new_id"]
