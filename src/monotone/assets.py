"""Asset discovery for the bundled viewer page."""

from importlib.resources import files
from pathlib import Path


def get_static_dir() -> Path:
    """Return path to bundled static assets.

    Raises:
        FileNotFoundError: If static assets are not bundled.
    """
    static = files("monotone").joinpath("static")
    if not static.is_dir():
        raise FileNotFoundError("Bundled static assets not found. Reinstall the monotone package.")
    return Path(str(static))
