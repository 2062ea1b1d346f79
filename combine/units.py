"""
Units - the shapes a pipeline stage can take.

A unit is any callable invoked as ``unit(ctx, next)``, or ``unit(ctx)`` when
its signature only takes the context. Its result may be a plain value or an
awaitable.

Untagged units are classified by their result: a literal ``True`` or
``False`` is a condition outcome, anything else means the unit drove the
continuation itself. Wrapping with :func:`condition` or :func:`middleware`
makes the kind explicit instead.
"""

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from combine.errors import UnitTypeError

Continuation = Callable[[], Any]
Unit = Callable[..., Union[Any, Awaitable[Any]]]


async def resolve(value: Any) -> Any:
    """Await ``value`` until a non-awaitable result remains."""
    while inspect.isawaitable(value):
        value = await value
    return value


def _accepts_continuation(fn: Callable) -> bool:
    """Check whether ``fn`` can be called with (ctx, next)."""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return True

    positional = 0
    for param in signature.parameters.values():
        if param.kind == param.VAR_POSITIONAL:
            return True
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            positional += 1
    return positional >= 2


class UnitKind(str, Enum):
    CONDITION = "condition"
    MIDDLEWARE = "middleware"


@dataclass(frozen=True)
class ConditionUnit:
    """A predicate over the context. Always yields a literal bool."""
    fn: Callable
    kind: UnitKind = UnitKind.CONDITION

    @property
    def name(self) -> str:
        return getattr(self.fn, "__name__", None) or "condition"

    async def __call__(self, ctx: Any, next: Optional[Continuation] = None) -> bool:
        return bool(await resolve(self.fn(ctx)))


@dataclass(frozen=True)
class MiddlewareUnit:
    """A stage that manages the continuation itself. Its result is ignored."""
    fn: Callable
    kind: UnitKind = UnitKind.MIDDLEWARE

    @property
    def name(self) -> str:
        return getattr(self.fn, "__name__", None) or "middleware"

    async def __call__(self, ctx: Any, next: Continuation) -> None:
        await resolve(self.fn(ctx, next))


def condition(fn: Callable) -> ConditionUnit:
    """Tag ``fn`` as a condition: called with ``(ctx)``, result coerced to bool."""
    if not callable(fn):
        raise UnitTypeError(fn)
    return ConditionUnit(fn)


def middleware(fn: Callable) -> MiddlewareUnit:
    """Tag ``fn`` as a middleware: called with ``(ctx, next)``, result ignored."""
    if not callable(fn):
        raise UnitTypeError(fn)
    return MiddlewareUnit(fn)


class Middleware(ABC):
    """
    Base class for class-based units.

    Subclasses implement :meth:`process`, which may:
    - Modify the context before calling ``next``
    - Short-circuit by not calling ``next``
    - Act on the context after ``next`` completes
    """

    @abstractmethod
    async def process(self, ctx: Any, next: Continuation) -> Any:
        """Process the request."""
        pass

    async def __call__(self, ctx: Any, next: Continuation) -> Any:
        return await self.process(ctx, next)


def as_unit(obj: Any) -> Unit:
    """Validate that ``obj`` can be used as a unit."""
    if not callable(obj):
        raise UnitTypeError(obj)
    return obj


def unit_name(unit: Any) -> str:
    """Human-readable name used in failure messages."""
    if isinstance(unit, (ConditionUnit, MiddlewareUnit)):
        return unit.name
    if isinstance(unit, Middleware):
        return type(unit).__name__
    return getattr(unit, "__name__", None) or "condition"


async def call_unit(unit: Unit, ctx: Any, next: Continuation) -> Any:
    """Invoke ``unit`` with the arguments its signature takes and await the result."""
    if isinstance(unit, (ConditionUnit, MiddlewareUnit, Middleware)):
        return await unit(ctx, next)
    if _accepts_continuation(unit):
        return await resolve(unit(ctx, next))
    return await resolve(unit(ctx))
