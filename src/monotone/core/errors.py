"""Content retrieval errors.

Absence and transient failure are distinct conditions: a stale or malformed
route parameter is an expected outcome, a broken store is not.
"""


class ContentError(Exception):
    """Base class for content retrieval failures."""

    def __init__(self, tutorial_id: object, message: str) -> None:
        super().__init__(message)
        self.tutorial_id = tutorial_id


class ContentNotFoundError(ContentError):
    """No content exists for the identifier."""

    def __init__(self, tutorial_id: object, message: str | None = None) -> None:
        super().__init__(tutorial_id, message or f"Tutorial not found: {tutorial_id}")


class ContentUnavailableError(ContentError):
    """Content could not be retrieved for a reason unrelated to existence."""

    def __init__(self, tutorial_id: object, message: str | None = None) -> None:
        super().__init__(tutorial_id, message or f"Tutorial unavailable: {tutorial_id}")
