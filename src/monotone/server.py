"""aiohttp server for Monotone.

Application factory and route registration.
"""

import logging
from pathlib import Path

from aiohttp import web

from monotone.api.tutorials import create_tutorials_routes
from monotone.api.viewer import create_viewer_routes
from monotone.app_keys import index_key, renderer_key, resolver_key, viewers_key
from monotone.assets import get_static_dir
from monotone.config import Config
from monotone.core.index import TutorialIndex
from monotone.core.renderer import renderer as default_renderer
from monotone.core.resolver import ContentResolver, FileContentResolver, HttpContentResolver
from monotone.core.viewers import ViewerRegistry
from monotone.live import LiveReloadManager

logger = logging.getLogger(__name__)

live_reload_key = web.AppKey("live_reload_manager", LiveReloadManager)
static_dir_key = web.AppKey("static_dir", Path)


def create_resolver(config: Config) -> ContentResolver:
    """Create the content resolver selected by configuration."""
    if config.content.base_url:
        return HttpContentResolver(config.content.base_url, timeout=config.content.timeout)
    return FileContentResolver(config.content.source_dir, timeout=config.content.timeout)


async def spa_index(request: web.Request) -> web.FileResponse:
    """Serve index.html; navigation is hash-routed on the client."""
    return web.FileResponse(request.app[static_dir_key] / "index.html")


def create_app(config: Config, *, resolver: ContentResolver | None = None) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        resolver: Content resolver to use instead of the configured one

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    index = TutorialIndex.load(config.content.index_file)
    logger.info(f"Loaded {len(index)} tutorial(s) from {config.content.index_file}")

    if resolver is None:
        resolver = create_resolver(config)
        if isinstance(resolver, HttpContentResolver):
            app.on_cleanup.append(_close_resolver)

    viewers = ViewerRegistry()

    app[index_key] = index
    app[resolver_key] = resolver
    app[renderer_key] = default_renderer
    app[viewers_key] = viewers

    # API routes (must be registered first to take precedence over SPA fallback)
    app.router.add_routes(create_tutorials_routes())
    app.router.add_routes(create_viewer_routes())

    # Live reload only makes sense for the local file store
    if config.live_reload.enabled and isinstance(resolver, FileContentResolver):
        app[live_reload_key] = LiveReloadManager(resolver.source_dir, viewers)
        app.on_startup.append(_start_live_reload)
        app.on_cleanup.append(_stop_live_reload)

    app[static_dir_key] = get_static_dir()

    # SPA fallback - must be last to catch all non-API routes
    app.router.add_get("/{path:.*}", spa_index)

    return app


async def _start_live_reload(app: web.Application) -> None:
    await app[live_reload_key].start()


async def _stop_live_reload(app: web.Application) -> None:
    await app[live_reload_key].stop()


async def _close_resolver(app: web.Application) -> None:
    resolver = app[resolver_key]
    if isinstance(resolver, HttpContentResolver):
        await resolver.aclose()


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    web.run_app(app, host=config.server.host, port=config.server.port)
