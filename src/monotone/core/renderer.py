"""Markdown rendering.

Converts raw tutorial markdown into HTML using mistune. The converter keeps
no per-document state, so a single instance is shared by every viewer.
"""

import logging
import re

import mistune

logger = logging.getLogger(__name__)

H1_PATTERN = re.compile(r"^#\s+(.+?)\s*#*\s*$", re.MULTILINE)

DEFAULT_PLUGINS = ["table", "strikethrough", "url"]


class MarkdownRenderer:
    """Render markdown text to HTML.

    Rendering is total: malformed markdown degrades to best-effort output
    rather than failing.

    Tutorials are bundled content, so raw HTML passes through by default.
    Set safe=True when rendering sources that are not trusted.
    """

    def __init__(self, *, safe: bool = False, plugins: list[str] | None = None) -> None:
        """Initialize renderer.

        Args:
            safe: Escape raw HTML found in the markdown source
            plugins: mistune plugin names (default: table, strikethrough, url)
        """
        self._safe = safe
        self._markdown = mistune.create_markdown(
            escape=safe,
            plugins=list(DEFAULT_PLUGINS if plugins is None else plugins),
        )

    @property
    def safe(self) -> bool:
        """Whether raw HTML is escaped."""
        return self._safe

    def render(self, markdown_text: str) -> str:
        """Convert markdown text to HTML.

        Args:
            markdown_text: Markdown source text

        Returns:
            HTML string
        """
        logger.debug(f"Rendering {len(markdown_text)} characters of markdown")
        html = self._markdown(markdown_text)
        return html if isinstance(html, str) else ""


def extract_title(markdown_text: str) -> str | None:
    """Return the text of the first H1 heading, if any."""
    match = H1_PATTERN.search(markdown_text)
    return match.group(1) if match else None


renderer = MarkdownRenderer()
