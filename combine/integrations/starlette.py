"""
Starlette / FastAPI adapter.

Usage:
    from fastapi import FastAPI
    from combine import except_
    from combine.integrations.starlette import CombineMiddleware

    app = FastAPI()
    app.add_middleware(CombineMiddleware, unit=except_(is_health_check, require_auth))
"""

import logging
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from combine.config import CombineConfig, get_config
from combine.context import RequestContext
from combine.chain import compose
from combine.units import Unit, as_unit

logger = logging.getLogger(__name__)


class CombineMiddleware(BaseHTTPMiddleware):
    """
    Run a unit in front of the rest of the application.

    The unit receives a :class:`RequestContext`; its continuation calls the
    downstream app once and stores the response on the context. Errors
    propagate to Starlette's error handling.
    """

    def __init__(
        self,
        app,
        unit: Unit,
        enabled: bool = True,
        config: Optional[CombineConfig] = None,
    ):
        super().__init__(app)
        self.unit = as_unit(unit)
        self.enabled = enabled
        self.config = config or get_config()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Handle request through the unit."""
        if not self.enabled:
            return await call_next(request)

        ctx = RequestContext(request=request)

        async def proceed() -> Response:
            if ctx.response is None:
                ctx.response = await call_next(request)
            return ctx.response

        await compose([self.unit])(ctx, proceed)

        if ctx.response is None:
            logger.debug(
                f"Unit finished without a response: {request.method} {request.url.path}"
            )
            return Response(status_code=self.config.unhandled_status)
        return ctx.response
