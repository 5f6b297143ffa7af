"""Callable inspection: is it a handler, is it a controller class, how many args.

Everything here is pure and total: any value may be passed in, nothing raises.
The wrap-time decision between a plain handler and a controller class is made
once by :func:`inspect_target` and returned as a tagged value.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable

_POSITIONAL_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


@dataclass(frozen=True)
class Plain:
    """A callable to be wrapped as a single handler."""

    target: Callable[..., Any]


@dataclass(frozen=True)
class Constructible:
    """A class whose members are wrapped as a bundle."""

    target: type


def is_callable(value: Any) -> bool:
    """True if ``value`` can be invoked."""
    return callable(value)


def looks_constructible(value: Any) -> bool:
    """True if ``value`` is a class rather than a plain callable."""
    return isinstance(value, type)


def inspect_target(value: Any) -> Plain | Constructible | None:
    """Classify a wrapping target.

    Returns:
        ``Constructible`` for classes, ``Plain`` for any other callable,
        ``None`` for everything else (including ``None`` itself).
    """
    if looks_constructible(value):
        return Constructible(value)
    if is_callable(value):
        return Plain(value)
    return None


def declared_arity(fn: Any) -> int:
    """Number of positional parameters without a default.

    ``*args``, keyword-only parameters and defaulted parameters are not
    counted. Callables without an introspectable signature report 0.

    Examples:
        >>> declared_arity(lambda req, res, next: None)
        3
        >>> declared_arity(lambda err, req, res, next=None, *rest: None)
        3
    """
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return 0
    return sum(
        1
        for param in signature.parameters.values()
        if param.kind in _POSITIONAL_KINDS and param.default is inspect.Parameter.empty
    )


def callable_name(fn: Any) -> str:
    """Best-effort diagnostic name, ``"handler"`` when there is none."""
    name = getattr(fn, "__name__", None)
    if not name or name == "<lambda>":
        return "handler"
    return name
