"""
aiohttp adapter.

Usage:
    from aiohttp import web
    from combine import some
    from combine.integrations.aiohttp import combined_middleware

    app = web.Application(middlewares=[combined_middleware(some(has_api_key, has_session))])
"""

import logging
from typing import Callable, Optional

from aiohttp import web

from combine.config import CombineConfig, get_config
from combine.context import RequestContext
from combine.chain import compose
from combine.units import Unit, as_unit

logger = logging.getLogger(__name__)


def combined_middleware(unit: Unit, config: Optional[CombineConfig] = None) -> Callable:
    """
    Wrap a unit as an aiohttp middleware.

    The unit receives a :class:`RequestContext`; its continuation calls the
    route handler once and stores the response on the context. Errors
    propagate to aiohttp, which answers with 500.

    Args:
        unit: The unit to run for every request
        config: Overrides the global configuration

    Returns:
        An aiohttp middleware
    """
    unit = as_unit(unit)
    config = config or get_config()

    @web.middleware
    async def combine_middleware(request: web.Request, handler: Callable) -> web.StreamResponse:
        ctx = RequestContext(request=request)

        async def proceed() -> web.StreamResponse:
            if ctx.response is None:
                ctx.response = await handler(request)
            return ctx.response

        await compose([unit])(ctx, proceed)

        if ctx.response is None:
            logger.debug(f"Unit finished without a response: {request.method} {request.path}")
            return web.Response(status=config.unhandled_status)
        return ctx.response

    return combine_middleware
