"""Tutorial index.

Immutable, ordered catalog of tutorial summaries loaded once at startup.
Catalog format (TOML):

    [[tutorials]]
    id = 1
    title = "Using indexes in PostgreSQL"
    description = "..."
    created_at = 2022-05-01T12:00:00Z
"""

import tomllib
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from pathlib import Path
from typing import TypedDict

from monotone.core.types import TutorialId


class TutorialSummaryDict(TypedDict):
    """Dictionary representation of a tutorial summary."""

    id: int
    title: str
    description: str
    createdAt: str


@dataclass(frozen=True)
class TutorialSummary:
    """Summary of a single tutorial as shown in the list."""

    id: TutorialId
    title: str
    description: str
    created_at: datetime

    def to_dict(self) -> TutorialSummaryDict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "createdAt": self.created_at.isoformat(),
        }


class TutorialIndex:
    """Ordered, read-only collection of tutorial summaries.

    Insertion order defines display order. The index is shared freely
    between viewers and never mutated after construction.
    """

    def __init__(self, entries: Iterable[TutorialSummary] = ()) -> None:
        self._entries = tuple(entries)
        self._by_id: dict[int, TutorialSummary] = {}
        for entry in self._entries:
            if entry.id in self._by_id:
                raise ValueError(f"Duplicate tutorial id: {entry.id}")
            self._by_id[entry.id] = entry

    @classmethod
    def load(cls, path: Path) -> "TutorialIndex":
        """Load index from a TOML catalog file.

        Args:
            path: Path to the catalog file

        Returns:
            TutorialIndex in catalog order (empty if the file doesn't exist)

        Raises:
            ValueError: If the catalog is malformed
        """
        if not path.exists():
            return cls()

        with path.open("rb") as f:
            data = tomllib.load(f)

        raw_entries = data.get("tutorials", [])
        if not isinstance(raw_entries, list):
            raise ValueError("tutorials must be an array of tables")

        return cls(_parse_entry(raw, position) for position, raw in enumerate(raw_entries))

    def list(self) -> tuple[TutorialSummary, ...]:
        """Return all summaries in display order."""
        return self._entries

    def get(self, tutorial_id: int) -> TutorialSummary | None:
        """Return summary for an id, or None if not indexed."""
        return self._by_id.get(tutorial_id)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TutorialSummary]:
        return iter(self._entries)

    def __contains__(self, tutorial_id: object) -> bool:
        return tutorial_id in self._by_id


def _parse_entry(raw: object, position: int) -> TutorialSummary:
    """Parse a single [[tutorials]] table."""
    if not isinstance(raw, dict):
        raise ValueError(f"tutorials[{position}] must be a table")

    tutorial_id = raw.get("id")
    if not isinstance(tutorial_id, int) or isinstance(tutorial_id, bool) or tutorial_id < 0:
        raise ValueError(f"tutorials[{position}].id must be a non-negative integer")

    title = raw.get("title")
    if not isinstance(title, str):
        raise ValueError(f"tutorials[{position}].title must be a string")

    description = raw.get("description", "")
    if not isinstance(description, str):
        raise ValueError(f"tutorials[{position}].description must be a string")

    created_at = raw.get("created_at")
    if isinstance(created_at, datetime):
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
    elif isinstance(created_at, date):
        created_at = datetime.combine(created_at, time(), tzinfo=UTC)
    else:
        raise ValueError(f"tutorials[{position}].created_at must be a date or datetime")

    return TutorialSummary(
        id=TutorialId(tutorial_id),
        title=title,
        description=description,
        created_at=created_at,
    )
