"""Aggregated result of one fetch → extract → sync chain.

A chain never raises to its caller. Instead every failure is collected into a
:class:`SubscriptionReport` (one message plus a list of sub-errors) and the
report is written to the diagnostic channel once at the end of the chain.

An ``ok`` report can still carry sub-errors from steps that do not stop the
chain (recording the feed source, for instance); its message then says so.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from time import perf_counter
from typing import List, Optional

log = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_OK = "ok"
STATUS_EMPTY = "empty"
STATUS_ERROR = "error"


def clean_message(message: Optional[str]) -> str:
    """Normalize log and status messages for human consumption."""

    if not message:
        return ""
    return re.sub(r"\s+", " ", message).strip()


@dataclass
class SubscriptionReport:
    panel_id: str
    dataset_id: str
    feed_url: str
    status: str = STATUS_PENDING
    message: Optional[str] = None
    errors: List[str] = field(default_factory=list)
    items: Optional[int] = None
    opened: bool = False
    duration: Optional[float] = None
    _started_at: Optional[float] = None

    def start(self) -> None:
        self._started_at = perf_counter()

    def add_error(self, stage: str, exc: BaseException) -> None:
        detail = clean_message(f"{stage}: {exc.__class__.__name__}: {exc}")
        if detail not in self.errors:
            self.errors.append(detail)

    def finish(
        self,
        status: str,
        *,
        items: Optional[int] = None,
        message: Optional[str] = None,
    ) -> None:
        if self._started_at is not None:
            self.duration = perf_counter() - self._started_at
        if items is not None:
            self.items = items
        self.message = clean_message(message) or None
        if self.message is None and status == STATUS_OK and self.errors:
            self.message = f"Completed with {len(self.errors)} error(s) in earlier steps"
        self.status = status

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def has_errors(self) -> bool:
        return self.status == STATUS_ERROR or bool(self.errors)

    def summary(self) -> str:
        details: List[str] = []
        if self.items is not None:
            details.append(f"{self.items} items")
        if self.duration is not None:
            details.append(f"{self.duration:.2f}s")
        if self.message:
            details.append(self.message)
        suffix = f"({', '.join(details)})" if details else ""
        return f"{self.dataset_id}:{self.status}{suffix}"


def report_errors(report: SubscriptionReport, logger: logging.Logger | None = None) -> None:
    """Write the aggregated errors of ``report`` to the diagnostic channel.

    Reports without sub-errors are ignored, mirroring how the chain only
    surfaces failures that actually carry an error list.
    """

    if not report.errors:
        return
    target = logger or log
    if report.message:
        target.error("%s", report.message)
    for error in report.errors:
        target.error("%s", error)


__all__ = [
    "STATUS_EMPTY",
    "STATUS_ERROR",
    "STATUS_OK",
    "STATUS_PENDING",
    "SubscriptionReport",
    "clean_message",
    "report_errors",
]
