"""Application keys for type-safe app configuration access."""

from aiohttp import web

from monotone.core.index import TutorialIndex
from monotone.core.renderer import MarkdownRenderer
from monotone.core.resolver import ContentResolver
from monotone.core.viewers import ViewerRegistry

index_key = web.AppKey("index", TutorialIndex)
resolver_key = web.AppKey("resolver", ContentResolver)
renderer_key = web.AppKey("renderer", MarkdownRenderer)
viewers_key = web.AppKey("viewers", ViewerRegistry)
