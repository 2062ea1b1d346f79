"""
Control-flow combinators for middleware.

- some(): first unit to succeed wins
- every(): all units must pass
- except_(): run units unless a condition matches

Each combinator returns a unit taking (ctx, next), so the result can be
installed anywhere a unit is expected, including inside another combinator.
"""

import logging
from typing import Any, Callable, Iterable, Optional, Union

from combine.chain import compose
from combine.config import CombineConfig, get_config
from combine.errors import ConditionFailedError, UnitTypeError
from combine.units import (
    ConditionUnit,
    Continuation,
    Unit,
    as_unit,
    call_unit,
    resolve,
    unit_name,
)

logger = logging.getLogger(__name__)


def some(*units: Unit, config: Optional[CombineConfig] = None) -> Unit:
    """
    Create a unit that runs the first of ``units`` to succeed.

    A unit succeeds by returning ``True`` (the continuation is then called
    for it) or by completing without raising and without returning
    ``False``. Later units are not run once one succeeds.

    A unit returning ``False`` or raising before it called the continuation
    lets the next unit try. A unit raising after the continuation was called
    stops the search, since downstream work has already run.

    If no unit succeeds, the last failure is raised. With no units at all
    the produced unit does nothing and never calls the continuation.

    Args:
        units: Middleware or condition units, tried in order
        config: Overrides the global configuration

    Returns:
        A composed unit
    """
    units = [as_unit(unit) for unit in units]
    config = config or get_config()

    def discard(error: Optional[Exception], unit: Unit) -> None:
        if error is not None and config.log_discarded_failures:
            logger.log(
                config.discarded_level,
                f"some() discarded failure from {unit_name(unit)}: "
                f"{type(error).__name__}: {error}",
            )

    async def some(ctx: Any, next: Continuation) -> None:
        next_called = False
        last_error: Optional[Exception] = None
        failed_unit: Optional[Unit] = None

        def tracked_next() -> Any:
            nonlocal next_called
            next_called = True
            return next()

        for unit in units:
            try:
                result = await call_unit(unit, ctx, tracked_next)
                if result is True:
                    await resolve(tracked_next())
                elif result is False:
                    discard(last_error, failed_unit)
                    last_error = ConditionFailedError("some", unit_name(unit))
                    failed_unit = unit
                    continue
                discard(last_error, failed_unit)
                last_error = None
                break
            except Exception as e:
                discard(last_error, failed_unit)
                last_error = e
                failed_unit = unit
                if next_called:
                    logger.debug(
                        f"some() not retrying after {unit_name(unit)} failed "
                        f"past the continuation"
                    )
                    break

        if last_error is not None:
            raise last_error

    return some


def every(*units: Unit) -> Unit:
    """
    Create a unit that runs all ``units`` in order.

    A unit returning ``False`` raises :class:`ConditionFailedError`; that or
    any raised error stops the chain and propagates. Otherwise each unit's
    continuation advances to the next one, and the last one reaches whatever
    follows the produced unit.

    Args:
        units: Middleware or condition units, run in order

    Returns:
        A composed unit
    """
    units = [as_unit(unit) for unit in units]

    def guard(unit: Unit) -> Unit:
        async def every(ctx: Any, next: Continuation) -> None:
            result = await call_unit(unit, ctx, next)
            if result is False:
                logger.debug(f"every() stopped: {unit_name(unit)} returned false")
                raise ConditionFailedError("every", unit_name(unit))
            await resolve(next())

        return every

    return compose([guard(unit) for unit in units])


def except_(
    condition: Union[Callable, Iterable[Callable]],
    *units: Unit,
    config: Optional[CombineConfig] = None,
) -> Unit:
    """
    Create a unit that runs ``units`` unless a condition matches.

    Args:
        condition: A condition, or an iterable of conditions matched with OR.
            Every condition is evaluated against the context.
        units: Units to guard, run with :func:`every` semantics
        config: Overrides the global configuration

    Returns:
        A composed unit. When any condition is true the guarded units are
        skipped and the pipeline continues past this unit.
    """
    if callable(condition):
        conditions = [condition]
    else:
        try:
            conditions = [as_unit(cond) for cond in iter(condition)]
        except UnitTypeError:
            raise
        except TypeError:
            raise UnitTypeError(condition) from None

    async def any_condition(ctx: Any) -> bool:
        matched = False
        for cond in conditions:
            if isinstance(cond, ConditionUnit):
                result = await cond(ctx)
            else:
                result = await resolve(cond(ctx))
            matched = matched or bool(result)
        return matched

    return some(ConditionUnit(any_condition), every(*units), config=config)
