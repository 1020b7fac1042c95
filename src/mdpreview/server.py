"""aiohttp server for mdpreview.

Application factory and route registration for the preview backend.
"""

import logging

from aiohttp import web

from mdpreview.api.config import create_config_routes
from mdpreview.api.parse_tree import create_parse_tree_routes
from mdpreview.app_keys import config_key, renderer_key
from mdpreview.config import Config
from mdpreview.core.renderer import ParseTreeRenderer

logger = logging.getLogger(__name__)


def create_app(config: Config) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    app[config_key] = config
    app[renderer_key] = ParseTreeRenderer(config.search.matcher)

    app.router.add_routes(create_parse_tree_routes())
    app.router.add_routes(create_config_routes())

    return app


def run_server(config: Config) -> None:
    """Run the server.

    Args:
        config: Application configuration
    """
    app = create_app(config)
    logger.info(f"Serving parse trees on {config.server.host}:{config.server.port}")
    web.run_app(app, host=config.server.host, port=config.server.port)
