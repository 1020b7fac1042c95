"""Application keys for type-safe app configuration access."""

from aiohttp import web

from mdpreview.config import Config
from mdpreview.core.renderer import ParseTreeRenderer

renderer_key = web.AppKey("renderer", ParseTreeRenderer)
config_key = web.AppKey("config", Config)
