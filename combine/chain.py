"""
Sequential composition - the host pipeline units are installed into.

This module provides:
- compose() for chaining units into a single unit
- MiddlewareChain for running units in front of a final handler
"""

import asyncio
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from combine.units import Continuation, Unit, as_unit, call_unit, resolve

logger = logging.getLogger(__name__)


def compose(units: Iterable[Unit]) -> Unit:
    """
    Chain units so each one's continuation dispatches the next.

    The continuation handed to the last unit invokes the outer ``next``.
    Errors propagate outward and stop dispatch. Each continuation runs its
    downstream chain at most once per pass; repeat calls, including ones
    made while the first is still running, wait for it and return its
    result or raise its error.

    Args:
        units: Units to run in order

    Returns:
        A single unit taking (ctx, next)
    """
    units = [as_unit(unit) for unit in units]

    async def composed(ctx: Any, next: Optional[Continuation] = None) -> Any:
        results: Dict[int, asyncio.Future] = {}

        async def dispatch(index: int) -> Any:
            if index in results:
                logger.debug(f"Continuation {index} called more than once, not re-running")
                return await asyncio.shield(results[index])

            # First call runs inline so downstream context changes stay visible
            outcome = asyncio.get_running_loop().create_future()
            results[index] = outcome
            try:
                if index >= len(units):
                    result = await resolve(next()) if next is not None else None
                else:
                    result = await call_unit(units[index], ctx, lambda: dispatch(index + 1))
            except asyncio.CancelledError:
                outcome.cancel()
                raise
            except Exception as e:
                outcome.set_exception(e)
                # Mark retrieved; repeat callers re-raise it from the future
                outcome.exception()
                raise

            outcome.set_result(result)
            return result

        return await dispatch(0)

    return composed


class MiddlewareChain:
    """
    Chain of units that processes requests in order.

    Units execute in order, with the first unit able to wrap all
    subsequent processing. The handler runs after the last unit advances.
    """

    def __init__(self):
        self.middlewares: List[Unit] = []

    def add(self, unit: Unit) -> "MiddlewareChain":
        """
        Add a unit to the chain.

        Args:
            unit: The unit to add

        Returns:
            Self for chaining
        """
        self.middlewares.append(as_unit(unit))
        return self

    async def execute(self, ctx: Any, handler: Optional[Callable] = None) -> Any:
        """
        Execute the chain.

        Args:
            ctx: Request context
            handler: The final handler, called with ctx (sync or async)

        Returns:
            Result from the handler, if it was reached
        """
        if handler is None:
            await compose(self.middlewares)(ctx)
            return None

        outcome: Dict[str, Any] = {}

        async def run_handler() -> Any:
            outcome["result"] = await resolve(handler(ctx))
            return outcome["result"]

        await compose(self.middlewares)(ctx, run_handler)
        return outcome.get("result")
