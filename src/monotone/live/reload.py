"""File watching for development mode.

Monitors tutorial markdown files and reloads every viewer currently
showing a tutorial whose source changed.
"""

import asyncio
import logging
from pathlib import Path

from watchfiles import Change, awatch

from monotone.core.viewers import ViewerRegistry

logger = logging.getLogger(__name__)


class LiveReloadManager:
    """Watches the content directory and reloads affected viewers."""

    def __init__(self, source_dir: Path, viewers: ViewerRegistry) -> None:
        """Initialize the live reload manager.

        Args:
            source_dir: Directory containing `<id>.md` files
            viewers: Registry of mounted viewers
        """
        self._source_dir = source_dir
        self._viewers = viewers
        self._watch_task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._watch_task is not None

    async def start(self) -> None:
        """Start the file watcher."""
        if self._watch_task is not None:
            return
        logger.info(f"Watching {self._source_dir} for changes")
        self._watch_task = asyncio.create_task(self._watch_files())

    async def stop(self) -> None:
        """Stop the file watcher."""
        if self._watch_task is not None:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None

    async def _watch_files(self) -> None:
        async for changes in awatch(self._source_dir):
            self.handle_changes(changes)

    def handle_changes(self, changes: set[tuple[Change, str]]) -> int:
        """Reload viewers for a batch of file changes.

        Deleted files are reloaded too, so their viewers publish not-found.

        Args:
            changes: Changes as reported by watchfiles

        Returns:
            Number of viewer reloads triggered
        """
        routes = {
            route
            for _, path_str in changes
            if (route := self._to_route(Path(path_str))) is not None
        }
        return sum(self._viewers.reload_route(route) for route in sorted(routes))

    def _to_route(self, file_path: Path) -> str | None:
        """Convert a changed file path to a tutorial route.

        Args:
            file_path: Absolute file path

        Returns:
            Route (e.g., "3" for "<source_dir>/3.md"), or None if the file
            is not a tutorial source
        """
        try:
            relative = file_path.resolve().relative_to(self._source_dir.resolve())
        except ValueError:
            return None

        if len(relative.parts) != 1 or relative.suffix != ".md":
            return None
        if not (relative.stem.isascii() and relative.stem.isdigit()):
            return None
        return relative.stem
