"""Live reload support."""

from monotone.live.reload import LiveReloadManager

__all__ = ["LiveReloadManager"]
