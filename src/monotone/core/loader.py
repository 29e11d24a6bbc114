"""Route-bound content loading.

A RouteBoundLoader binds "current content" to the most recent load result
for the current route. Every route change starts a new load cycle; cycles
are never aborted, but each one carries a freshness token and a result is
published only if its token is still current when the load completes.

Publication contract per cycle: exactly one terminal state (loaded, not
found or failed) is published, or nothing at all if the cycle was
superseded by a newer route or by teardown.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TypedDict

from monotone.core.errors import ContentNotFoundError, ContentUnavailableError
from monotone.core.renderer import MarkdownRenderer, renderer as default_renderer
from monotone.core.resolver import ContentResolver, parse_tutorial_id
from monotone.core.types import RouteParam

logger = logging.getLogger(__name__)


class LoadStatus(StrEnum):
    """Lifecycle status of a loader."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class LoadStateDict(TypedDict):
    """Dictionary representation of a published state."""

    status: str
    route: str | None
    html: str
    error: str | None


@dataclass(frozen=True)
class LoadState:
    """State observed by the view.

    html is the rendered content for LOADED and empty otherwise, so a view
    never shows a previous tutorial after a failed load.
    """

    status: LoadStatus
    route: str | None
    html: str = ""
    error: str | None = None

    def to_dict(self) -> LoadStateDict:
        """Convert to dictionary for JSON serialization."""
        return {
            "status": self.status.value,
            "route": self.route,
            "html": self.html,
            "error": self.error,
        }


IDLE_STATE = LoadState(status=LoadStatus.IDLE, route=None)

Observer = Callable[[LoadState], None]


def normalize_route(route: RouteParam) -> str | None:
    """Normalize a route parameter; None and blank strings mean no identifier.

    Routes naming the same tutorial id (e.g., "01" and 1) normalize to the
    same canonical string. Malformed routes are kept as given.
    """
    if route is None:
        return None
    normalized = str(route).strip()
    if not normalized:
        return None
    try:
        return str(parse_tutorial_id(normalized))
    except ContentNotFoundError:
        return normalized


class RouteBoundLoader:
    """Loads and renders content for the current route of one viewer.

    Must be driven from a running event loop. One instance per mounted
    viewer; instances share nothing mutable with each other.
    """

    def __init__(
        self,
        resolver: ContentResolver,
        renderer: MarkdownRenderer = default_renderer,
    ) -> None:
        """Initialize loader in the idle state.

        Args:
            resolver: Content store lookup
            renderer: Markdown renderer (default: the shared module instance)
        """
        self._resolver = resolver
        self._renderer = renderer
        self._route: str | None = None
        self._token = 0
        self._status = LoadStatus.IDLE
        self._state = IDLE_STATE
        self._observers: list[Observer] = []
        self._tasks: set[asyncio.Task[None]] = set()
        self._torn_down = False

    @property
    def route(self) -> str | None:
        """Current route parameter."""
        return self._route

    @property
    def state(self) -> LoadState:
        """Last published state."""
        return self._state

    @property
    def status(self) -> LoadStatus:
        """Current status, including the unpublished loading phase."""
        return self._status

    @property
    def torn_down(self) -> bool:
        """Whether teardown() has been called."""
        return self._torn_down

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer for published states.

        Args:
            observer: Called with each published LoadState

        Returns:
            Function that removes the observer
        """
        self._ensure_mounted()
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def set_route(self, route: RouteParam) -> None:
        """Switch to a new route, starting a load cycle if it changed.

        Args:
            route: New route parameter (None or "" for no identifier)

        Raises:
            RuntimeError: If the loader has been torn down
        """
        self._ensure_mounted()
        normalized = normalize_route(route)
        if normalized == self._route:
            return
        self._route = normalized
        self._start_cycle()

    def reload(self) -> None:
        """Start a new load cycle for the current route.

        Raises:
            RuntimeError: If the loader has been torn down
        """
        self._ensure_mounted()
        self._start_cycle()

    def teardown(self) -> None:
        """Unmount the loader.

        In-flight cycles keep running but their results are discarded.
        """
        if self._torn_down:
            return
        self._torn_down = True
        self._observers.clear()
        logger.debug(f"Loader torn down with {len(self._tasks)} cycle(s) in flight")

    async def wait(self) -> None:
        """Wait until every in-flight cycle has completed."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def _ensure_mounted(self) -> None:
        if self._torn_down:
            raise RuntimeError("Loader has been torn down")

    def _start_cycle(self) -> None:
        self._token += 1
        token = self._token
        route = self._route

        if route is None:
            self._status = LoadStatus.IDLE
            self._publish(IDLE_STATE)
            return

        self._status = LoadStatus.LOADING
        task = asyncio.get_running_loop().create_task(self._run_cycle(token, route))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _is_current(self, token: int) -> bool:
        return not self._torn_down and token == self._token

    async def _run_cycle(self, token: int, route: str) -> None:
        outcome: LoadState | None = None
        markdown_text = ""
        try:
            tutorial_id = parse_tutorial_id(route)
            markdown_text = await self._resolver.resolve(tutorial_id)
        except ContentNotFoundError as exc:
            outcome = LoadState(status=LoadStatus.NOT_FOUND, route=route, error=str(exc))
        except ContentUnavailableError as exc:
            outcome = LoadState(status=LoadStatus.FAILED, route=route, error=str(exc))
        except Exception:
            logger.exception(f"Unexpected error resolving route {route!r}")
            outcome = LoadState(
                status=LoadStatus.FAILED,
                route=route,
                error=f"Failed to load tutorial: {route}",
            )

        if not self._is_current(token):
            logger.debug(f"Discarding superseded result for route {route!r}")
            return

        if outcome is None:
            try:
                html = self._renderer.render(markdown_text)
            except Exception:
                logger.exception(f"Unexpected error rendering route {route!r}")
                outcome = LoadState(
                    status=LoadStatus.FAILED,
                    route=route,
                    error=f"Failed to render tutorial: {route}",
                )
            else:
                outcome = LoadState(status=LoadStatus.LOADED, route=route, html=html)

        self._status = outcome.status
        self._publish(outcome)

    def _publish(self, state: LoadState) -> None:
        self._state = state
        for observer in list(self._observers):
            try:
                observer(state)
            except Exception:
                logger.exception("Loader observer failed")
