"""Shared test fixtures."""

import asyncio
from collections.abc import Mapping
from pathlib import Path

import pytest
from monotone.config import Config, ContentConfig, LiveReloadConfig, ServerConfig
from monotone.core.errors import ContentNotFoundError
from monotone.core.types import TutorialId

INDEX_TOML = """
[[tutorials]]
id = 1
title = "Using indexes in PostgreSQL"
description = "BTREE versus HASH."
created_at = 2022-05-08T00:00:00Z

[[tutorials]]
id = 2
title = "Second tutorial"
description = "Indexed, but has no content."
created_at = 2022-06-01
"""


class GatedResolver:
    """Resolver whose calls complete only when released by the test.

    Lets tests choose the completion order of concurrent load cycles.
    """

    def __init__(self, contents: Mapping[int, str]) -> None:
        self._contents = dict(contents)
        self._gates: dict[int, asyncio.Event] = {}
        self.calls: list[int] = []

    def gate(self, tutorial_id: int) -> asyncio.Event:
        return self._gates.setdefault(tutorial_id, asyncio.Event())

    def release(self, tutorial_id: int) -> None:
        self.gate(tutorial_id).set()

    async def resolve(self, tutorial_id: TutorialId) -> str:
        self.calls.append(tutorial_id)
        await self.gate(tutorial_id).wait()
        try:
            return self._contents[tutorial_id]
        except KeyError:
            raise ContentNotFoundError(tutorial_id) from None


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Create a content directory with an index and one tutorial body."""
    source_dir = tmp_path / "tutorials"
    source_dir.mkdir(exist_ok=True)
    (source_dir / "index.toml").write_text(INDEX_TOML)
    (source_dir / "1.md").write_text("# Using indexes\n\nSome text.")
    return source_dir


@pytest.fixture
def test_config(content_dir: Path) -> Config:
    """Create a test configuration backed by content_dir."""
    return Config(
        server=ServerConfig(),
        content=ContentConfig(source_dir=content_dir, index_file=content_dir / "index.toml"),
        live_reload=LiveReloadConfig(enabled=False),
    )


@pytest.fixture
def gated_resolver() -> GatedResolver:
    """Gated resolver with content for tutorials 1, 2 and 3."""
    return GatedResolver({1: "# One", 2: "# Two", 3: "# Three"})
