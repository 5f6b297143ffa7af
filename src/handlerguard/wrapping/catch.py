"""
``catch_async``: one decorator for handlers and controller classes.

Usage as a handler wrapper::

    @router.get("/posts/{id}")
    @catch_async
    async def get_post(req, res, next):
        post = await Post.get(req.params["id"])
        if post is None:
            return next(HTTPError("Post not found", 404))
        res.json(post)

Usage as a class decorator::

    @catch_async
    class UserController:
        async def list(self, req, res, next):
            res.json(await User.all())

        def show(self, req, res, next):
            res.json(User.find(req.params["id"]))

The target kind is decided once, at decoration time.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar, overload

from handlerguard.core.errors import TargetTypeError
from handlerguard.wrapping.bundle import wrap_bundle
from handlerguard.wrapping.handler import DuplicateHook, wrap_handler
from handlerguard.wrapping.inspection import Constructible, Plain, inspect_target

C = TypeVar("C", bound=type)
F = TypeVar("F", bound=Callable[..., Any])


@overload
def catch_async(target: None, *, on_duplicate: DuplicateHook | None = None) -> None: ...


@overload
def catch_async(target: C, *, on_duplicate: DuplicateHook | None = None) -> C: ...


@overload
def catch_async(target: F, *, on_duplicate: DuplicateHook | None = None) -> F: ...


def catch_async(target: Any, *, on_duplicate: DuplicateHook | None = None) -> Any:
    """Wrap a handler, or every handler method of a controller class.

    Args:
        target: Handler callable, controller class, or None
        on_duplicate: Hook for continuation calls dropped after the first

    Returns:
        ``None`` for ``None``, the same class (members wrapped in place) for a
        class, a wrapped callable for any other callable.

    Raises:
        TargetTypeError: If ``target`` is neither callable nor a class
    """
    if target is None:
        return target

    kind = inspect_target(target)
    if isinstance(kind, Constructible):
        return wrap_bundle(kind.target, on_duplicate=on_duplicate)
    if isinstance(kind, Plain):
        return wrap_handler(kind.target, on_duplicate=on_duplicate)

    raise TargetTypeError(target)
