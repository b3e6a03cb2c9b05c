"""Debounced refetch of occurrences when the region or filters change.

The controller receives typed messages from the UI layer and decides when
to start a chunked fetch:

  - ``RegionSelected`` and ``FiltersChanged`` restart the debounce timer.
  - ``CameraMoved`` only restarts it while the "current view" region is
    selected; otherwise the view bounds are just remembered.
  - Without a taxonomic filter nothing is fetched and results are cleared.

Only the most recently started fetch may update the state. Each fetch takes
a number from ``RequestGeneration``; a result whose number is no longer
current is dropped.

The blocking fetch runs in a worker thread via ``asyncio.to_thread``, so
every method here must be called from the event loop thread.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace

from gbif_explorer.datasources.gbif.client import GbifApiError
from gbif_explorer.datasources.gbif.occurrences import OccurrencePage
from gbif_explorer.geometry import Bounds, bounds_to_polygon
from gbif_explorer.reference.geography import REGION_ID_CURRENT_VIEW
from gbif_explorer.schemas import Occurrence, OccurrenceFilters

logger = logging.getLogger(__name__)

FETCH_DEBOUNCE = 0.8  # seconds
DEFAULT_LIMIT = 1000
FALLBACK_ERROR = "Failed to load occurrences"

FetchFn = Callable[[OccurrenceFilters], OccurrencePage]


# =============================================================================
# Scheduling primitives
# =============================================================================


class DebouncedTask:
    """A single pending delayed call; scheduling again replaces it.

    Cancelling only affects a call whose timer has not fired yet. Once fired,
    the coroutine runs to completion as a task tracked in ``running``.
    """

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self._handle: asyncio.TimerHandle | None = None
        self.running: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, fn: Callable[[], Awaitable[None]], delay: float | None = None) -> None:
        loop = asyncio.get_running_loop()
        self.cancel()
        wait = self.delay if delay is None else delay
        self._handle = loop.call_later(wait, self._fire, loop, fn)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    async def wait(self) -> None:
        """Wait for every call that has already fired."""
        while self.running:
            await asyncio.gather(*list(self.running), return_exceptions=True)

    def _fire(self, loop: asyncio.AbstractEventLoop, fn: Callable[[], Awaitable[None]]) -> None:
        self._handle = None
        task = loop.create_task(fn())
        self.running.add(task)
        task.add_done_callback(self.running.discard)


class RequestGeneration:
    """Monotonic counter used to recognise the latest request."""

    def __init__(self) -> None:
        self.current = 0

    def next(self) -> int:
        self.current += 1
        return self.current

    def is_current(self, generation: int) -> bool:
        return generation == self.current


# =============================================================================
# Messages and state
# =============================================================================


@dataclass(frozen=True)
class RegionSelected:
    """A region was chosen: predefined, favorite, drawn, place or current view."""

    region_id: str | None
    bounds: Bounds | None = None


@dataclass(frozen=True)
class CameraMoved:
    bounds: Bounds


@dataclass(frozen=True)
class FiltersChanged:
    filters: OccurrenceFilters


RefetchMessage = RegionSelected | CameraMoved | FiltersChanged


@dataclass
class RefetchState:
    occurrences: list[Occurrence] = field(default_factory=list)
    total_count: int = 0
    loading: bool = False
    error: str | None = None


# =============================================================================
# Controller
# =============================================================================


class RefetchController:
    """Turns region/filter messages into debounced, last-wins fetches."""

    def __init__(
        self,
        fetch: FetchFn,
        debounce: float = FETCH_DEBOUNCE,
        on_change: Callable[[RefetchState], None] | None = None,
        default_limit: int = DEFAULT_LIMIT,
    ) -> None:
        self._fetch = fetch
        self._on_change = on_change
        self.default_limit = default_limit
        self.debouncer = DebouncedTask(debounce)
        self.generation = RequestGeneration()
        self.state = RefetchState()
        self.region_id: str | None = None
        self.region_bounds: Bounds | None = None
        self.view_bounds: Bounds | None = None
        self.filters = OccurrenceFilters()

    @property
    def fetch_bounds(self) -> Bounds | None:
        """Bounds the next fetch will use: the selected region, else the view."""
        if self.region_id == REGION_ID_CURRENT_VIEW:
            return self.view_bounds
        return self.region_bounds or self.view_bounds

    def handle(self, message: RefetchMessage) -> None:
        if isinstance(message, RegionSelected):
            self.region_id = message.region_id
            self.region_bounds = message.bounds
            if message.region_id == REGION_ID_CURRENT_VIEW and message.bounds is not None:
                self.view_bounds = message.bounds
            self._request()
        elif isinstance(message, CameraMoved):
            self.view_bounds = message.bounds
            if self.region_id == REGION_ID_CURRENT_VIEW:
                self._request()
        elif isinstance(message, FiltersChanged):
            if message.filters == self.filters:
                return
            self.filters = message.filters
            self._request()
        else:
            msg = f"Unsupported message: {message!r}"
            raise TypeError(msg)

    async def wait(self) -> None:
        """Wait for in-flight fetches (used by the CLI and tests)."""
        await self.debouncer.wait()

    def _request(self) -> None:
        self.debouncer.cancel()
        if not self.filters.has_taxon_filter:
            self.generation.next()
            self._set_state(RefetchState())
            return
        self.debouncer.schedule(self._run)

    async def _run(self) -> None:
        bounds = self.fetch_bounds
        if bounds is None:
            logger.debug("No region bounds yet; skipping fetch")
            return
        generation = self.generation.next()
        filters = self.filters.model_copy(
            update={
                "geometry": bounds_to_polygon(bounds),
                "limit": self.filters.limit or self.default_limit,
            }
        )
        self._set_state(replace(self.state, loading=True, error=None))
        logger.info("Fetching occurrences for %s (request %d)", filters.geometry, generation)

        try:
            page = await asyncio.to_thread(self._fetch, filters)
        except GbifApiError as e:
            if self.generation.is_current(generation):
                logger.warning("Occurrence fetch failed: %s", e.message)
                self._set_state(RefetchState(error=e.message or FALLBACK_ERROR))
            return
        except Exception as e:
            if self.generation.is_current(generation):
                logger.exception("Occurrence fetch failed")
                self._set_state(RefetchState(error=str(e) or FALLBACK_ERROR))
            return

        if not self.generation.is_current(generation):
            logger.debug("Discarding stale result of request %d", generation)
            return
        self._set_state(RefetchState(occurrences=list(page.results), total_count=page.count))

    def _set_state(self, state: RefetchState) -> None:
        self.state = state
        if self._on_change is not None:
            self._on_change(state)
