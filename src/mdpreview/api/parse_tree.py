"""Parse tree API endpoint.

Renders markdown content posted by the preview frontend and returns the
parse tree message as is.
"""

import logging
from json import JSONDecodeError

from aiohttp import web

from mdpreview.app_keys import renderer_key
from mdpreview.core.search import InvalidQueryError

logger = logging.getLogger(__name__)


def create_parse_tree_routes() -> list[web.RouteDef]:
    return [
        web.post("/api/parse-tree", post_parse_tree),
    ]


async def post_parse_tree(request: web.Request) -> web.Response:
    try:
        body = await request.json()
    except JSONDecodeError:
        return _bad_request("Request body must be JSON")

    if not isinstance(body, dict):
        return _bad_request("Request body must be an object")

    content = body.get("content")
    if not isinstance(content, str):
        return _bad_request("content must be a string")

    modified = body.get("modified")
    if modified is not None and (not isinstance(modified, int) or isinstance(modified, bool)):
        return _bad_request("modified must be an integer")

    query = body.get("query")
    if query is not None and not isinstance(query, str):
        return _bad_request("query must be a string")

    current = body.get("current")
    if current is not None and (not isinstance(current, int) or isinstance(current, bool)):
        return _bad_request("current must be an integer")

    renderer = request.app[renderer_key]
    try:
        result = renderer.render(content, modified=modified, query=query, current=current)
    except InvalidQueryError as e:
        return _bad_request(str(e))

    logger.debug(f"Rendered {len(content)} characters into {len(result.message)} bytes of parse tree")

    return web.Response(
        text=result.message,
        content_type="application/json",
        headers={"X-Match-Count": str(len(result.matches))},
    )


def _bad_request(message: str) -> web.Response:
    return web.json_response({"error": message}, status=400)
