# ============================================================================
# LAZY VISIBILITY LOADER
# ============================================================================
# EPOCH: 2 - HISTORY SYNC
# STATUS: Service - Per-card one-shot image loading
# PURPOSE: Fetch a card's image the first time it scrolls into view
# CREATED: 14 OCT 2026
# ============================================================================
"""
Lazy Visibility Loader

Each rendered card owns one LazyImageLoader and one visibility watcher.

    mount()  -> watcher.observe(on_visible)
    visible  -> IDLE -> LOADING (once), watcher disconnected
             -> cache hit:  LOADED
             -> cache miss: store.fetch_full_logo -> cache.put -> LOADED
             -> failure or no image: ERROR (no retry)
    unmount() -> watcher disconnected

Repeated visibility events, and load() calls made while a fetch is in
flight, never start a second fetch; they wait on the first one. An
in-flight fetch is not cancelled when the card scrolls away or unmounts.

ViewportWatcher is the geometry half: it decides "visible" the way an
intersection observer does, with a visibility threshold and a root
margin that widens the viewport so loading starts just before a card
arrives.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional

from core.config import get_defaults
from core.contracts import LoaderState
from core.logging import get_logger, log_context
from repositories.base import LogoStore
from services.image_cache import ImageObjectCache

logger = get_logger(__name__)


# ============================================================================
# GEOMETRY
# ============================================================================

@dataclass(frozen=True)
class Rect:
    """Axis-aligned box in logical pixels."""
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)

    def expanded(self, margin: float) -> "Rect":
        return Rect(
            self.left - margin,
            self.top - margin,
            self.width + 2 * margin,
            self.height + 2 * margin,
        )

    def intersection_area(self, other: "Rect") -> float:
        width = min(self.right, other.right) - max(self.left, other.left)
        height = min(self.bottom, other.bottom) - max(self.top, other.top)
        if width <= 0 or height <= 0:
            return 0.0
        return width * height


@dataclass(frozen=True)
class IntersectionEntry:
    """One visibility observation."""
    is_intersecting: bool
    ratio: float


VisibilityCallback = Callable[[IntersectionEntry], None]


class VisibilityWatcher(ABC):
    """Reports when an element becomes visible."""

    @abstractmethod
    def observe(self, callback: VisibilityCallback) -> None:
        """Start reporting to callback."""

    @abstractmethod
    def disconnect(self) -> None:
        """Stop reporting. Safe to call repeatedly."""

    @property
    @abstractmethod
    def connected(self) -> bool:
        """True while observing."""


class ViewportWatcher(VisibilityWatcher):
    """
    Intersection check of one element against a scrolling viewport.

    The element counts as intersecting when at least `threshold` of its
    area falls inside the viewport grown by `root_margin_px` on every side.
    """

    def __init__(
        self,
        element: Rect,
        threshold: Optional[float] = None,
        root_margin_px: Optional[float] = None,
    ):
        defaults = get_defaults().visibility
        self.element = element
        self.threshold = defaults.threshold if threshold is None else threshold
        self.root_margin_px = defaults.root_margin_px if root_margin_px is None else root_margin_px
        self._callback: Optional[VisibilityCallback] = None

    @property
    def connected(self) -> bool:
        return self._callback is not None

    def observe(self, callback: VisibilityCallback) -> None:
        self._callback = callback

    def disconnect(self) -> None:
        self._callback = None

    def measure(self, viewport: Rect) -> IntersectionEntry:
        if self.element.area == 0:
            return IntersectionEntry(is_intersecting=False, ratio=0.0)
        root = viewport.expanded(self.root_margin_px)
        ratio = root.intersection_area(self.element) / self.element.area
        return IntersectionEntry(
            is_intersecting=ratio > 0 and ratio >= self.threshold,
            ratio=ratio,
        )

    def check(self, viewport: Rect) -> IntersectionEntry:
        """Measure against the viewport and report if intersecting."""
        entry = self.measure(viewport)
        if entry.is_intersecting and self._callback is not None:
            self._callback(entry)
        return entry


# ============================================================================
# IMAGE LOOKUP
# ============================================================================

async def fetch_image_through_cache(
    cache: ImageObjectCache,
    store: LogoStore,
    logo_id: str,
    owner_id: str,
) -> Optional[str]:
    """
    Image data URI for a logo, from the cache when fresh, else the store.

    Returns None when the store has no image for the id. Store errors
    propagate.
    """
    cached = cache.get(logo_id)
    if cached is not None:
        return cached

    logo = await store.fetch_full_logo(logo_id, owner_id)
    if logo is None or not logo.image_data_uri:
        return None

    cache.put(logo_id, logo.image_data_uri)
    return logo.image_data_uri


# ============================================================================
# LOADER
# ============================================================================

class LazyImageLoader:
    """One card's image loader."""

    def __init__(
        self,
        logo_id: str,
        owner_id: str,
        store: LogoStore,
        cache: ImageObjectCache,
        watcher: Optional[VisibilityWatcher] = None,
    ):
        self.logo_id = logo_id
        self.owner_id = owner_id
        self.store = store
        self.cache = cache
        self.watcher = watcher
        self.state = LoaderState.IDLE
        self.image_data_uri: Optional[str] = None
        self.error: Optional[str] = None
        self._task: Optional[asyncio.Task] = None
        self.history: List[LoaderState] = [LoaderState.IDLE]

    # ------------------------------------------------------------------
    # LIFECYCLE
    # ------------------------------------------------------------------

    def mount(self) -> None:
        if self.watcher is not None and self.state == LoaderState.IDLE:
            self.watcher.observe(self._on_visible)

    def unmount(self) -> None:
        if self.watcher is not None:
            self.watcher.disconnect()

    # ------------------------------------------------------------------
    # TRIGGERS
    # ------------------------------------------------------------------

    def _on_visible(self, entry: IntersectionEntry) -> None:
        """Watcher callback; schedules the one load on the running loop."""
        if not entry.is_intersecting:
            return
        loop = asyncio.get_running_loop()
        if not self._begin():
            return
        self._task = loop.create_task(self._fetch())

    async def load(self) -> Optional[str]:
        """Start the load if nobody has; otherwise wait for the existing one."""
        loop = asyncio.get_running_loop()
        if self._begin():
            self._task = loop.create_task(self._fetch())
        return await self.wait()

    async def wait(self) -> Optional[str]:
        """Wait for an in-flight load, if any, and return the image."""
        if self._task is not None and not self._task.done():
            await asyncio.shield(self._task)
        return self.image_data_uri

    # ------------------------------------------------------------------
    # STATE MACHINE
    # ------------------------------------------------------------------

    def _transition(self, target: LoaderState) -> None:
        if not self.state.can_transition_to(target):
            raise RuntimeError(
                f"Loader for {self.logo_id}: illegal transition {self.state.value} -> {target.value}"
            )
        self.state = target
        self.history.append(target)

    def _begin(self) -> bool:
        """IDLE -> LOADING exactly once; disconnects the watcher."""
        if self.state != LoaderState.IDLE:
            return False
        self._transition(LoaderState.LOADING)
        if self.watcher is not None:
            self.watcher.disconnect()
        return True

    async def _fetch(self) -> None:
        with log_context(owner_id=self.owner_id, logo_id=self.logo_id, operation="load_image"):
            try:
                image = await fetch_image_through_cache(
                    self.cache, self.store, self.logo_id, self.owner_id,
                )
            except Exception as e:
                logger.error(f"Error loading image for logo {self.logo_id}: {e}")
                self.error = str(e)
                self._transition(LoaderState.ERROR)
                return

            if image is None:
                self.error = "Logo not found or no image data"
                logger.warning(self.error)
                self._transition(LoaderState.ERROR)
                return

            self.image_data_uri = image
            self._transition(LoaderState.LOADED)
