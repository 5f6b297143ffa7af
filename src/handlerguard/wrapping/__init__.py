"""
Handler wrapping: funnel every handler failure into ``next``, exactly once.

Modules:
    inspection - classify wrapping targets, count declared arguments
    handler    - wrap a single handler (``wrap_handler``)
    bundle     - wrap every handler method of a class hierarchy (``wrap_bundle``)
    catch      - ``catch_async``, the dual-mode entry point
"""

from handlerguard.wrapping.bundle import Level, collect_levels, wrap_bundle, wrap_level
from handlerguard.wrapping.catch import catch_async
from handlerguard.wrapping.handler import (
    WRAPPED_PREFIX,
    DuplicateHook,
    GuardedNext,
    InvocationState,
    is_wrapped,
    wrap_handler,
)
from handlerguard.wrapping.inspection import (
    Constructible,
    Plain,
    declared_arity,
    inspect_target,
    is_callable,
    looks_constructible,
)

__all__ = [
    "catch_async",
    "wrap_handler",
    "wrap_bundle",
    "wrap_level",
    "collect_levels",
    "Level",
    "WRAPPED_PREFIX",
    "DuplicateHook",
    "GuardedNext",
    "InvocationState",
    "is_wrapped",
    "Plain",
    "Constructible",
    "inspect_target",
    "is_callable",
    "looks_constructible",
    "declared_arity",
]
