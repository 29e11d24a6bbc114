"""Registry of mounted viewers."""

import logging
from collections.abc import Iterator

from monotone.core.loader import RouteBoundLoader, normalize_route
from monotone.core.types import RouteParam

logger = logging.getLogger(__name__)


class ViewerRegistry:
    """Tracks the loaders of currently mounted viewers.

    Used to push reloads to viewers whose route matches changed content.
    """

    def __init__(self) -> None:
        self._loaders: set[RouteBoundLoader] = set()

    def add(self, loader: RouteBoundLoader) -> None:
        self._loaders.add(loader)

    def discard(self, loader: RouteBoundLoader) -> None:
        self._loaders.discard(loader)

    def __len__(self) -> int:
        return len(self._loaders)

    def __iter__(self) -> Iterator[RouteBoundLoader]:
        return iter(list(self._loaders))

    def reload_route(self, route: RouteParam) -> int:
        """Start a new load cycle on every viewer showing a route.

        Args:
            route: Route whose content changed

        Returns:
            Number of viewers reloaded
        """
        normalized = normalize_route(route)
        if normalized is None:
            return 0

        reloaded = 0
        for loader in self:
            if loader.torn_down or loader.route != normalized:
                continue
            loader.reload()
            reloaded += 1

        if reloaded:
            logger.info(f"Reloaded {reloaded} viewer(s) showing tutorial {normalized}")
        return reloaded
