"""
Middleware combinators - compose units with altered control flow.

Usage:
    from combine import every, except_, some

    chain.add(some(has_api_key, has_session_cookie))
    chain.add(every(load_user, is_admin))
    chain.add(except_([is_health_check, is_metrics], require_auth))
"""

from combine.chain import MiddlewareChain, compose
from combine.combinators import every, except_, some
from combine.config import CombineConfig, get_config, reset_config
from combine.context import RequestContext
from combine.errors import CombineError, ConditionFailedError, UnitTypeError
from combine.units import (
    ConditionUnit,
    Middleware,
    MiddlewareUnit,
    UnitKind,
    as_unit,
    call_unit,
    condition,
    middleware,
    resolve,
    unit_name,
)

__all__ = [
    "some",
    "every",
    "except_",
    "compose",
    "MiddlewareChain",
    "Middleware",
    "ConditionUnit",
    "MiddlewareUnit",
    "UnitKind",
    "condition",
    "middleware",
    "as_unit",
    "call_unit",
    "resolve",
    "unit_name",
    "RequestContext",
    "CombineError",
    "ConditionFailedError",
    "UnitTypeError",
    "CombineConfig",
    "get_config",
    "reset_config",
]
