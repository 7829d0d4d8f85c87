"""Command-line entry point for managing feed panels."""
from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from concurrent.futures import wait
from pathlib import Path
from typing import Callable, List, Optional

from . import config
from .errors import StorageError
from .feed.models import FeedDescriptor
from .logging import configure_logging
from .panels import LocalPanelRegistry, home_page_uri
from .reporting import SubscriptionReport
from .storage.datasets import FileDatasetStore
from .storage.prefs import JsonPreferenceStore
from .storage.registry import FeedSourceMap, IdRegistry
from .subscriptions import SubscriptionManager
from .uninstall import uninstall_all
from .utils.env import load_env_file
from .utils.http import validate_http_url


log = logging.getLogger(__name__)


class CLIError(RuntimeError):
    """Raised when the CLI cannot execute the requested command."""


def _stdin_prompt(labels: List[str]) -> Optional[int]:
    for index, label in enumerate(labels, start=1):
        print(f"  [{index}] {label}")
    try:
        answer = input("Choose a feed (empty to cancel): ").strip()
    except EOFError:
        return None
    if not answer.isdigit():
        return None
    return int(answer) - 1


def _print_open(panel_id: str) -> None:
    print(f"Open {home_page_uri(panel_id)}")


def _resolve_paths(args: argparse.Namespace) -> config.HomeRssPaths:
    paths = config.build_paths()
    data_dir: Optional[Path] = getattr(args, "data_dir", None)
    if data_dir is None:
        return paths
    return config.HomeRssPaths(
        data_dir=data_dir,
        prefs_path=data_dir / "prefs.json",
        dataset_dir=data_dir / "datasets",
        panels_path=data_dir / "panels.json",
        log_dir=paths.log_dir,
    )


def build_manager(
    args: argparse.Namespace,
    *,
    prompt: Optional[Callable[[List[str]], Optional[int]]] = _stdin_prompt,
) -> SubscriptionManager:
    paths = _resolve_paths(args)
    return SubscriptionManager(
        JsonPreferenceStore(paths.prefs_path),
        LocalPanelRegistry(paths.panels_path),
        FileDatasetStore(paths.dataset_dir),
        opener=_print_open,
        prompt=prompt,
    )


def _print_report(report: SubscriptionReport) -> None:
    print(report.summary())
    for error in report.errors:
        print(f"  error: {error}", file=sys.stderr)


def _handle_subscribe(args: argparse.Namespace) -> int:
    candidates: List[FeedDescriptor] = []
    for url in args.urls:
        if not validate_http_url(url):
            raise CLIError(f"Not an http(s) URL: {url}")
        candidates.append(FeedDescriptor(href=url.strip(), title=args.title))

    manager = build_manager(args)
    report = manager.on_subscribe_requested(candidates)
    if report is None:
        print("No feed selected.")
        return 0
    _print_report(report)
    return 1 if report.has_errors() else 0


def _handle_refresh(args: argparse.Namespace) -> int:
    manager = build_manager(args, prompt=None)
    if args.dataset_ids:
        reports = []
        for dataset_id in args.dataset_ids:
            report = manager.refresh(dataset_id)
            if report is None:
                raise CLIError(f"Unknown dataset: {dataset_id}")
            reports.append(report)
    else:
        reports = manager.refresh_all()

    exit_code = 0
    for report in reports:
        _print_report(report)
        if report.has_errors():
            exit_code = 1
    return exit_code


def _handle_list(args: argparse.Namespace) -> int:
    paths = _resolve_paths(args)
    prefs = JsonPreferenceStore(paths.prefs_path)
    registry = IdRegistry(prefs)
    sources = FeedSourceMap(prefs).read_all()
    installed = LocalPanelRegistry(paths.panels_path).installed()
    datasets = FileDatasetStore(paths.dataset_dir)

    for panel_id, dataset_id in zip(registry.panel_ids(), registry.dataset_ids()):
        source = sources.get(dataset_id, {})
        title = source.get("title") or source.get("href") or "?"
        state = "installed" if panel_id in installed else "not installed"
        try:
            rows = str(len(datasets.load(dataset_id)))
        except StorageError as exc:
            log.warning("Dataset %s unreadable: %s", dataset_id, exc)
            rows = "?"
        print(f"{panel_id}  {dataset_id}  {rows:>4} items  {state}  {title}")
    return 0


def _handle_uninstall(args: argparse.Namespace) -> int:
    paths = _resolve_paths(args)
    futures = uninstall_all(
        JsonPreferenceStore(paths.prefs_path),
        LocalPanelRegistry(paths.panels_path),
        FileDatasetStore(paths.dataset_dir),
        forget=args.forget,
    )
    wait(futures)
    failed = sum(1 for future in futures if future.exception() is not None)
    print(f"Deleted {len(futures) - failed} datasets ({failed} failed)")
    return 1 if failed else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="home-rss",
        description="Subscribe to feeds as home panels and clean them up again.",
    )
    parser.add_argument("--env-file", type=Path, help="Load environment variables from this file first.")
    parser.add_argument("--data-dir", type=Path, help="Directory for preferences, panels and datasets.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subscribe = subparsers.add_parser("subscribe", help="Create a panel for a feed")
    subscribe.add_argument("urls", nargs="+", help="Feed URL; several URLs prompt for a choice")
    subscribe.add_argument("--title", help="Panel title")
    subscribe.set_defaults(func=_handle_subscribe)

    refresh = subparsers.add_parser("refresh", help="Re-fetch feeds and replace their datasets")
    refresh.add_argument("dataset_ids", nargs="*", help="Datasets to refresh (default: all)")
    refresh.set_defaults(func=_handle_refresh)

    list_parser = subparsers.add_parser("list", help="Show recorded panels and datasets")
    list_parser.set_defaults(func=_handle_list)

    uninstall = subparsers.add_parser("uninstall", help="Remove all panels and datasets")
    uninstall.add_argument(
        "--forget",
        action="store_true",
        help="Also clear the id registries after cleaning up.",
    )
    uninstall.set_defaults(func=_handle_uninstall)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.env_file:
        load_env_file(args.env_file)
    config.refresh_from_env()
    configure_logging()
    handler = getattr(args, "func", None)
    if handler is None:
        parser.print_help()
        return 1
    try:
        return handler(args)
    except CLIError as exc:
        parser.error(str(exc))


if __name__ == "__main__":  # pragma: no cover - manual execution
    raise SystemExit(main())
