"""Core type definitions."""

from typing import NewType

# Tutorial identifier parsed from a route parameter (e.g., "#/tutorial/3" -> 3)
# Distinct from plain int to keep route values and ids apart
TutorialId = NewType("TutorialId", int)

# Raw route parameter as supplied by the routing collaborator
RouteParam = str | int | None
