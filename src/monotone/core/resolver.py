"""Content resolution.

Maps a tutorial identifier to its raw markdown text. Resolvers are keyed
store lookups: they never consult the tutorial index, so content may exist
for unindexed ids and indexed ids may have no content.
"""

import asyncio
import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

import httpx

from monotone.core.errors import ContentNotFoundError, ContentUnavailableError
from monotone.core.types import RouteParam, TutorialId

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

_ID_PATTERN = re.compile(r"^[0-9]+$")


class ContentResolver(Protocol):
    """Asynchronous keyed content store lookup."""

    async def resolve(self, tutorial_id: TutorialId) -> str:
        """Return raw markdown for an identifier.

        Raises:
            ContentNotFoundError: If no content exists for the identifier
            ContentUnavailableError: If content could not be retrieved
        """
        ...


def parse_tutorial_id(route: RouteParam) -> TutorialId:
    """Convert a route parameter to a tutorial identifier.

    Args:
        route: Raw route parameter (e.g., "3" or 3)

    Returns:
        Parsed TutorialId

    Raises:
        ContentNotFoundError: If the parameter is not a valid identifier
    """
    if isinstance(route, bool):
        raise ContentNotFoundError(route, f"Invalid tutorial id: {route!r}")
    if isinstance(route, int):
        if route < 0:
            raise ContentNotFoundError(route, f"Invalid tutorial id: {route!r}")
        return TutorialId(route)
    if isinstance(route, str) and _ID_PATTERN.match(route.strip()):
        try:
            return TutorialId(int(route.strip()))
        except ValueError:
            # Beyond the interpreter's int conversion limit
            raise ContentNotFoundError(route, f"Invalid tutorial id: {route!r}") from None
    raise ContentNotFoundError(route, f"Invalid tutorial id: {route!r}")


class FileContentResolver:
    """Resolves content from `{source_dir}/{id}.md` files.

    File reads run in a worker thread so a slow disk never blocks the
    event loop. Each call reads into its own buffer.
    """

    def __init__(self, source_dir: Path, *, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Initialize resolver.

        Args:
            source_dir: Directory containing `<id>.md` files
            timeout: Seconds before a read is reported as unavailable
        """
        self._source_dir = source_dir
        self._timeout = timeout

    @property
    def source_dir(self) -> Path:
        """Directory containing markdown sources."""
        return self._source_dir

    def source_path(self, tutorial_id: TutorialId) -> Path:
        """Return the file backing an identifier."""
        return self._source_dir / f"{tutorial_id}.md"

    async def resolve(self, tutorial_id: TutorialId) -> str:
        source_path = self.source_path(tutorial_id)
        logger.debug(f"Resolving tutorial {tutorial_id} from {source_path}")
        try:
            async with asyncio.timeout(self._timeout):
                return await asyncio.to_thread(source_path.read_text, encoding="utf-8")
        except FileNotFoundError as exc:
            raise ContentNotFoundError(tutorial_id) from exc
        except TimeoutError as exc:
            logger.warning(f"Timed out reading {source_path} after {self._timeout}s")
            raise ContentUnavailableError(
                tutorial_id, f"Timed out reading tutorial {tutorial_id}"
            ) from exc
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(f"Failed to read {source_path}: {exc}")
            raise ContentUnavailableError(tutorial_id) from exc


class MappingContentResolver:
    """Resolves content from an in-memory mapping.

    The optional delay simulates a slow store and gives every call a
    suspension point, as a real transport would.
    """

    def __init__(self, contents: Mapping[int, str], *, delay: float = 0.0) -> None:
        self._contents = dict(contents)
        self._delay = delay

    async def resolve(self, tutorial_id: TutorialId) -> str:
        await asyncio.sleep(self._delay)
        try:
            return self._contents[tutorial_id]
        except KeyError:
            raise ContentNotFoundError(tutorial_id) from None


class HttpContentResolver:
    """Resolves content from `{base_url}/{id}.md` over HTTP."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize resolver.

        Args:
            base_url: Base URL of the content host (e.g., "https://example.com/tutorials")
            timeout: Request timeout in seconds
            client: Shared client to use. If None, the resolver owns one.
        """
        self._base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def url_for(self, tutorial_id: TutorialId) -> str:
        """Return the URL backing an identifier."""
        return f"{self._base_url}/{tutorial_id}.md"

    async def resolve(self, tutorial_id: TutorialId) -> str:
        url = self.url_for(tutorial_id)
        logger.debug(f"Fetching tutorial {tutorial_id} from {url}")
        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as exc:
            logger.warning(f"Timed out fetching {url}")
            raise ContentUnavailableError(
                tutorial_id, f"Timed out fetching tutorial {tutorial_id}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning(f"Failed to fetch {url}: {exc}")
            raise ContentUnavailableError(tutorial_id) from exc

        if response.status_code == 404:
            raise ContentNotFoundError(tutorial_id)
        if not response.is_success:
            logger.warning(f"Unexpected status {response.status_code} fetching {url}")
            raise ContentUnavailableError(
                tutorial_id,
                f"Tutorial {tutorial_id} unavailable (HTTP {response.status_code})",
            )

        return response.text

    async def aclose(self) -> None:
        """Close the underlying client if owned."""
        if self._owns_client:
            await self._client.aclose()
