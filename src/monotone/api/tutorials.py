"""Tutorials API endpoints.

Lists the tutorial index and renders single tutorials on demand.
"""

from hashlib import md5

from aiohttp import web

from monotone.app_keys import index_key, renderer_key, resolver_key
from monotone.core.errors import ContentNotFoundError, ContentUnavailableError
from monotone.core.renderer import extract_title
from monotone.core.resolver import parse_tutorial_id


def create_tutorials_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/tutorials", list_tutorials),
        web.get("/api/tutorials/{id}", get_tutorial),
    ]


async def list_tutorials(request: web.Request) -> web.Response:
    index = request.app[index_key]
    return web.json_response({"items": [entry.to_dict() for entry in index.list()]})


async def get_tutorial(request: web.Request) -> web.Response:
    route = request.match_info["id"]
    index = request.app[index_key]
    resolver = request.app[resolver_key]
    renderer = request.app[renderer_key]

    try:
        tutorial_id = parse_tutorial_id(route)
        markdown_text = await resolver.resolve(tutorial_id)
    except ContentNotFoundError:
        return web.json_response(
            {"error": "Tutorial not found", "id": route},
            status=404,
        )
    except ContentUnavailableError:
        return web.json_response(
            {"error": "Tutorial unavailable", "id": route},
            status=503,
        )

    html = renderer.render(markdown_text)
    etag = _compute_etag(html)

    if request.headers.get("If-None-Match") == etag:
        return web.Response(status=304)

    summary = index.get(tutorial_id)
    title = summary.title if summary is not None else extract_title(markdown_text)

    response_data = {
        "meta": {
            "id": tutorial_id,
            "title": title,
            "summary": summary.to_dict() if summary is not None else None,
        },
        "content": html,
    }

    return web.json_response(
        response_data,
        headers={
            "ETag": etag,
            "Cache-Control": "private, max-age=60",
        },
    )


def _compute_etag(content: str) -> str:
    # First 16 hex chars (64 bits) are enough for cache validation
    content_hash = md5(content.encode("utf-8"), usedforsecurity=False).hexdigest()[:16]
    return f'"{content_hash}"'
