"""Startup progress and what the engine came up with.

The lifespan walks the phases below and records the catalog it loaded and
which feeds it started. /health turns that into healthy / degraded /
starting: a server without a catalog or without any enabled feed runs, but
can never publish a match.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from livedex.core.catalog import CatalogStore


class StartupPhase(str, Enum):
    INITIALIZING = "initializing"
    LOADING_CATALOG = "loading_catalog"
    STARTING_FEEDS = "starting_feeds"
    READY = "ready"


PHASE_DESCRIPTIONS = {
    StartupPhase.INITIALIZING: "Initializing...",
    StartupPhase.LOADING_CATALOG: "Loading area catalog...",
    StartupPhase.STARTING_FEEDS: "Starting OCR feed clients...",
    StartupPhase.READY: "Ready",
}


@dataclass(frozen=True)
class CatalogReport:
    """Catalog snapshot the server resolves against."""

    areas: int
    regions: list[str]
    generation: int
    path: str | None = None
    error: str | None = None

    @classmethod
    def from_store(cls, store: CatalogStore, error: str | None = None) -> "CatalogReport":
        catalog = store.catalog
        return cls(
            areas=len(catalog),
            regions=list(catalog.regions),
            generation=store.generation,
            path=str(store.path) if store.path is not None else None,
            error=error,
        )


@dataclass
class StartupState:
    phase: StartupPhase = StartupPhase.INITIALIZING
    started_at: datetime = field(default_factory=datetime.now)
    ready_at: datetime | None = None
    catalog: CatalogReport | None = None
    # feed name -> enabled
    feeds: dict[str, bool] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def set_phase(self, phase: StartupPhase) -> None:
        with self._lock:
            self.phase = phase
            if phase == StartupPhase.READY:
                self.ready_at = datetime.now()

    def record_catalog(self, report: CatalogReport) -> None:
        with self._lock:
            self.catalog = report

    def record_feeds(self, feeds: dict[str, bool]) -> None:
        with self._lock:
            self.feeds = dict(feeds)

    @property
    def is_ready(self) -> bool:
        return self.phase == StartupPhase.READY

    @property
    def problems(self) -> list[str]:
        """Reasons the server cannot resolve anything live."""
        found = []
        if self.catalog is not None:
            if self.catalog.error:
                found.append(f"catalog not loaded: {self.catalog.error}")
            elif self.catalog.areas == 0:
                found.append("catalog is empty")
        if self.feeds and not any(self.feeds.values()):
            found.append("no feed enabled")
        return found

    @property
    def elapsed_seconds(self) -> float:
        end = self.ready_at or datetime.now()
        return (end - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            catalog = None
            if self.catalog is not None:
                catalog = {
                    "areas": self.catalog.areas,
                    "regions": list(self.catalog.regions),
                    "generation": self.catalog.generation,
                    "path": self.catalog.path,
                    "error": self.catalog.error,
                }
            return {
                "phase": self.phase.value,
                "message": PHASE_DESCRIPTIONS[self.phase],
                "is_ready": self.is_ready,
                "elapsed_seconds": round(self.elapsed_seconds, 1),
                "catalog": catalog,
                "feeds": dict(self.feeds),
                "problems": self.problems,
            }


_startup_state = StartupState()


def get_startup_state() -> StartupState:
    return _startup_state


def reset_startup_state() -> None:
    """Fresh state for a new app instance (tests build several)."""
    global _startup_state
    _startup_state = StartupState()
