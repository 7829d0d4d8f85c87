"""Local implementation of the host's panel registration contract.

The host renders a panel from the options returned by a lazily evaluated
provider. ``register`` only stores the provider; ``install`` evaluates it and
makes the panel visible. Installed panels and their options are persisted so
that a restart still knows which panels are on the home surface.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from .errors import PanelError, StorageError
from .utils.files import atomic_write

log = logging.getLogger(__name__)

LAYOUT_FRAME = "frame"
VIEW_LIST = "list"

PanelOptions = Dict[str, Any]
OptionsProvider = Callable[[], PanelOptions]


def list_panel_options(title: Optional[str], dataset_id: str) -> PanelOptions:
    """Options for a single list view bound to ``dataset_id``."""

    return {
        "title": title,
        "layout": LAYOUT_FRAME,
        "views": [{"type": VIEW_LIST, "dataset": dataset_id}],
    }


def home_page_uri(panel_id: str) -> str:
    return f"about:home?page={panel_id}"


class LocalPanelRegistry:
    def __init__(self, path: Union[str, Path, None] = None) -> None:
        self.path = Path(path) if path is not None else None
        self._providers: Dict[str, OptionsProvider] = {}
        self._lock = threading.RLock()
        self._installed: Dict[str, PanelOptions] = self._load()

    def _load(self) -> Dict[str, PanelOptions]:
        if self.path is None:
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            log.warning("Panel file %s unreadable, starting empty: %s", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            return {}
        return {str(k): v for k, v in payload.items() if isinstance(v, dict)}

    def _persist(self) -> None:
        if self.path is None:
            return
        try:
            with atomic_write(self.path) as fh:
                json.dump(self._installed, fh, ensure_ascii=False, indent=2, sort_keys=True)
        except OSError as exc:
            raise StorageError(f"Could not write panel file {self.path}: {exc}") from exc

    def register(self, panel_id: str, options_provider: OptionsProvider) -> None:
        if not callable(options_provider):
            raise TypeError("options_provider must be callable")
        with self._lock:
            self._providers[panel_id] = options_provider
        log.debug("Registered panel %s", panel_id)

    def unregister(self, panel_id: str) -> None:
        with self._lock:
            self._providers.pop(panel_id, None)
        log.debug("Unregistered panel %s", panel_id)

    def install(self, panel_id: str) -> None:
        with self._lock:
            provider = self._providers.get(panel_id)
            if provider is None:
                raise PanelError(f"Panel {panel_id} is not registered")
            options = provider()
            if not isinstance(options, dict) or not options.get("views"):
                raise PanelError(f"Panel {panel_id} has no views")
            self._installed[panel_id] = options
            self._persist()
        log.info("Installed panel %s (%s)", panel_id, options.get("title"))

    def uninstall(self, panel_id: str) -> None:
        with self._lock:
            if self._installed.pop(panel_id, None) is None:
                return
            self._persist()
        log.info("Uninstalled panel %s", panel_id)

    def is_registered(self, panel_id: str) -> bool:
        with self._lock:
            return panel_id in self._providers

    def is_installed(self, panel_id: str) -> bool:
        with self._lock:
            return panel_id in self._installed

    def options(self, panel_id: str) -> Optional[PanelOptions]:
        with self._lock:
            provider = self._providers.get(panel_id)
            if provider is not None:
                return provider()
            return self._installed.get(panel_id)

    def installed(self) -> Dict[str, PanelOptions]:
        with self._lock:
            return dict(self._installed)


__all__ = [
    "LAYOUT_FRAME",
    "LocalPanelRegistry",
    "VIEW_LIST",
    "home_page_uri",
    "list_panel_options",
]
