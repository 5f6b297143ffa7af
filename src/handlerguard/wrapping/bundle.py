"""Controller-class wrapping: every handler method, at every ancestor level.

A controller bundle is a class whose methods are registered as route
handlers (``router.get("/users", UserController().list)``). Wrapping the class
wraps each plain, static and class method defined on it and on its ancestors
in place, so every instance of every subclass sees the wrapped members.

Levels are found by walking ``__bases__`` with a visited set: a class reached
twice (diamond inheritance, the same mixin through two parents) is processed
once, and ``object`` is never processed. Dunder members (``__init__``,
``__new__``, ``__repr__``...) are protocol methods, not handlers, and are
left alone, as are properties, plain attributes and nested classes.

Every other function is treated as a handler, private helpers included. A
call to a wrapped helper whose last argument is not a continuation, such as
``self._load(user_id)``, is aborted with a ``handler.continuation_missing``
error log and returns None without running the helper. Define such helpers
at module level instead.
"""

from __future__ import annotations

import types
from dataclasses import dataclass
from typing import Any, TypeVar

from handlerguard.framework.logging import get_logger
from handlerguard.wrapping.handler import DuplicateHook, is_wrapped, wrap_handler

logger = get_logger(__name__)

C = TypeVar("C", bound=type)


@dataclass(frozen=True)
class Level:
    """One class in a bundle's inheritance graph, in visiting order."""

    index: int
    owner: type

    @property
    def name(self) -> str:
        return self.owner.__qualname__

    def own_members(self) -> list[tuple[str, Any]]:
        """Members defined directly on this level, in definition order."""
        return list(vars(self.owner).items())


def collect_levels(cls: type) -> list[Level]:
    """List ``cls`` and its ancestors, each once, excluding ``object``.

    Traversal is depth-first through ``__bases__`` starting at ``cls``.

    Examples:
        >>> class A: ...
        >>> class B(A): ...
        >>> class C(A): ...
        >>> class D(B, C): ...
        >>> [level.name for level in collect_levels(D)]
        ['D', 'B', 'A', 'C']
    """
    levels: list[Level] = []
    visited: set[type] = set()
    pending: list[type] = [cls]

    while pending:
        current = pending.pop()
        if current is object or current in visited:
            continue
        visited.add(current)
        levels.append(Level(index=len(levels), owner=current))
        pending.extend(reversed(current.__bases__))

    return levels


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__") and len(name) > 4


def _wrapped_member(value: Any, on_duplicate: DuplicateHook | None) -> Any | None:
    """Wrapped replacement for a class member, or None to leave it as is."""
    if isinstance(value, staticmethod | classmethod):
        inner = value.__func__
        if not isinstance(inner, types.FunctionType) or is_wrapped(inner):
            return None
        return type(value)(wrap_handler(inner, on_duplicate=on_duplicate))

    if isinstance(value, types.FunctionType) and not is_wrapped(value):
        return wrap_handler(value, on_duplicate=on_duplicate)

    return None


def wrap_level(level: Level, *, on_duplicate: DuplicateHook | None = None, controller: str | None = None) -> int:
    """Wrap the handler members defined on one level.

    A member that cannot be wrapped or reassigned is logged and skipped.

    Returns:
        Number of members replaced
    """
    log = logger.bind(controller=controller or level.name, level=level.name)
    wrapped = 0

    for name, value in level.own_members():
        if _is_dunder(name):
            continue
        try:
            replacement = _wrapped_member(value, on_duplicate)
            if replacement is None:
                continue
            setattr(level.owner, name, replacement)
        except Exception as exc:
            log.error(
                "bundle.member_wrap_failed",
                member=name,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            continue
        wrapped += 1

    return wrapped


def wrap_bundle(cls: C, *, on_duplicate: DuplicateHook | None = None) -> C:
    """Wrap every handler method of ``cls`` and its ancestors, in place.

    Args:
        cls: Controller class
        on_duplicate: Forwarded to :func:`wrap_handler` for every member

    Returns:
        ``cls`` itself
    """
    levels = collect_levels(cls)
    total = sum(
        wrap_level(level, on_duplicate=on_duplicate, controller=cls.__qualname__)
        for level in levels
    )
    logger.debug("bundle.wrapped", controller=cls.__qualname__, levels=len(levels), members=total)
    return cls


__all__ = ["Level", "collect_levels", "wrap_level", "wrap_bundle"]
