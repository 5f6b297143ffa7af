"""Single-handler wrapping with at-most-once continuation delivery.

Wraps one continuation-style handler, ``(req, res, next)`` or
``(err, req, res, next)``, sync or ``async``, so that anything it raises, and
any failure of the awaitable it returns, is handed to ``next`` instead of
escaping into the host framework.

Manifesto:
    A continuation may signal completion once. Handlers break that contract
    in ordinary ways: they call ``next(err)`` and then raise, they start two
    operations that both fail, or they raise after having already responded.
    The wrapper enforces the contract for them:

    - **First signal wins:** the first ``next(...)`` call, explicit or
      synthesized from a failure, is forwarded verbatim
    - **Later signals are dropped:** logged as ``handler.next_called_twice``
      and passed to an optional ``on_duplicate`` hook
    - **Per-call state:** every invocation gets its own
      :class:`InvocationState`; concurrent calls never share a flag
    - **Transparent shape:** same signature, ``async``-ness, docstring and
      attributes as the original; only the name gains ``wrapped_``

Architecture:
    ::

        caller ── wrapper(*args) ──┬── last arg callable? ── no ──> log, return None
                                   │
                                   └── yes: next -> GuardedNext(next)
                                            │
                                   original(*args[:-1], guarded)
                                            │
                     ┌──────────────────────┼─────────────────────────┐
                  returns               raises                 returns awaitable
                     │                     │                          │
               result to caller   guarded.fail(exc)     future: done callback
                                  (if not yet fired)    coroutine: await it
                                                        on failure guarded.fail(exc)

    The continuation may be a plain function or an ``async def``. On the
    async paths an awaitable returned by ``next(err)`` is awaited; from a
    synchronous raise it is returned to the caller in place of ``None``.

Examples:
    >>> calls = []
    >>> def get_user(req, res, next):
    ...     raise LookupError("no such user")
    >>> handler = wrap_handler(get_user)
    >>> handler.__name__
    'wrapped_get_user'
    >>> handler({}, {}, calls.append)
    >>> [str(err) for err in calls]
    ['no such user']

Guardrails:
    ❌ DON'T: Keep the "next already called" flag on the wrapper
    ✅ DO: Create it per invocation

    ❌ DON'T: Swallow ``asyncio.CancelledError`` along with handler failures
    ✅ DO: Re-raise control-flow exceptions untouched

Tags:
    error-handling, continuation, middleware, async, decorator, handlerguard
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import uuid
import weakref
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from handlerguard.core.errors import (
    PASSTHROUGH_EXCEPTIONS,
    ContinuationError,
    HandlerGuardError,
    TargetTypeError,
    normalize_error,
)
from handlerguard.core.settings import get_settings
from handlerguard.framework.logging import get_logger
from handlerguard.wrapping.inspection import callable_name, declared_arity, is_callable

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

WRAPPED_PREFIX = "wrapped_"

# Identity registry; an attribute would be copied by functools.wraps onto
# any decorator stacked over a wrapper.
_WRAPPERS: weakref.WeakSet[Callable[..., Any]] = weakref.WeakSet()


def _generate_invocation_id() -> str:
    """Generate a short invocation ID (8 hex chars)."""
    return uuid.uuid4().hex[:8]


@dataclass
class InvocationState:
    """Continuation bookkeeping for one call of a wrapped handler.

    Attributes:
        handler: Name of the original handler
        invocation_id: Short id, bound into every log line of this call
        fired: True once ``next`` has been forwarded
        dropped: Number of ``next`` calls discarded after the first
    """

    handler: str
    invocation_id: str = field(default_factory=_generate_invocation_id)
    fired: bool = False
    dropped: int = 0


DuplicateHook = Callable[[InvocationState, tuple[Any, ...], dict[str, Any]], None]


class GuardedNext:
    """Continuation proxy that forwards only its first call."""

    def __init__(
        self,
        next_fn: Callable[..., Any],
        state: InvocationState,
        log: Any,
        on_duplicate: DuplicateHook | None = None,
    ):
        self._next = next_fn
        self._log = log
        self._on_duplicate = on_duplicate
        self.state = state

    @property
    def fired(self) -> bool:
        return self.state.fired

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        if self.state.fired:
            self.state.dropped += 1
            self._log.warning("handler.next_called_twice", dropped=self.state.dropped)
            if self._on_duplicate is not None:
                self._on_duplicate(self.state, args, kwargs)
            return None

        self.state.fired = True
        return self._next(*args, **kwargs)

    def fail(self, raised: BaseException, *, phase: str) -> Any:
        """Deliver a handler failure through ``next`` unless it already fired.

        Returns:
            Whatever the continuation returned, or None when suppressed
        """
        error = normalize_error(raised, phase=phase)
        if isinstance(error, HandlerGuardError):
            error.with_context(handler=self.state.handler, invocation_id=self.state.invocation_id)

        if self.state.fired:
            self._log.debug(
                "handler.error_suppressed",
                phase=phase,
                error_type=type(error).__name__,
                error=str(error),
            )
            return None

        self._log.debug("handler.error_forwarded", phase=phase, error_type=type(error).__name__)
        # A raise from the continuation itself is the host's failure; let it propagate.
        return self(error)

    async def fail_async(self, raised: BaseException, *, phase: str) -> None:
        """:meth:`fail`, awaiting an ``async def`` continuation."""
        delivered = self.fail(raised, phase=phase)
        if inspect.isawaitable(delivered):
            await delivered


def is_wrapped(fn: Any) -> bool:
    """True if ``fn`` is a wrapper produced by :func:`wrap_handler`."""
    try:
        return fn in _WRAPPERS
    except TypeError:
        # unhashable callable
        return False


async def _drain(awaitable: Awaitable[Any], guarded: GuardedNext) -> Any:
    """Await a handler's coroutine, routing its failure to the continuation."""
    try:
        return await awaitable
    except PASSTHROUGH_EXCEPTIONS:
        raise
    except BaseException as exc:
        await guarded.fail_async(exc, phase="rejected")
        return None


def _settle(future: asyncio.Future[Any], guarded: GuardedNext) -> asyncio.Future[Any]:
    """Route a scheduled future's failure to the continuation as soon as it fails.

    Delivery does not depend on anyone awaiting the return value. The returned
    future resolves to the original's result, or None once a failure was
    handled; cancelling it cancels the original.
    """
    loop = future.get_loop()
    settled: asyncio.Future[Any] = loop.create_future()

    def resolve(value: Any) -> None:
        if not settled.done():
            settled.set_result(value)

    def on_delivered(task: asyncio.Future[Any]) -> None:
        if settled.done():
            return
        if task.cancelled():
            settled.cancel()
        elif task.exception() is not None:
            settled.set_exception(task.exception())
        else:
            settled.set_result(None)

    def on_done(source: asyncio.Future[Any]) -> None:
        if source.cancelled():
            settled.cancel()
            return
        exc = source.exception()
        if exc is None:
            resolve(source.result())
            return
        if isinstance(exc, PASSTHROUGH_EXCEPTIONS):
            if not settled.done():
                settled.set_exception(exc)
            return

        try:
            delivered = guarded.fail(exc, phase="rejected")
        except Exception as delivery_exc:
            if not settled.done():
                settled.set_exception(delivery_exc)
            return
        if inspect.isawaitable(delivered):
            asyncio.ensure_future(delivered, loop=loop).add_done_callback(on_delivered)
        else:
            resolve(None)

    def on_settled(target: asyncio.Future[Any]) -> None:
        if target.cancelled():
            future.cancel()

    future.add_done_callback(on_done)
    settled.add_done_callback(on_settled)
    return settled


def wrap_handler(fn: F, *, on_duplicate: DuplicateHook | None = None) -> F:
    """Wrap a continuation-style handler so its failures reach ``next`` once.

    Args:
        fn: The handler; its last positional argument at call time must be
            the continuation
        on_duplicate: Called with ``(state, args, kwargs)`` for every
            continuation call dropped after the first

    Returns:
        The wrapper, or ``fn`` itself when it is already wrapped.

    Raises:
        TargetTypeError: If ``fn`` is not callable
    """
    if not is_callable(fn):
        raise TargetTypeError(fn)
    if is_wrapped(fn):
        return fn

    name = callable_name(fn)
    arity = declared_arity(fn)
    warn_on_short_call = get_settings().warn_on_short_call

    def begin(args: tuple[Any, ...]) -> tuple[tuple[Any, ...], GuardedNext] | None:
        state = InvocationState(handler=name)
        log = logger.bind(handler=name, invocation_id=state.invocation_id)

        if warn_on_short_call and len(args) < arity:
            log.warning("handler.short_call", expected=arity, received=len(args))

        last = args[-1] if args else None
        if not is_callable(last):
            log.error(
                "handler.continuation_missing",
                error=ContinuationError(name, last).message,
                last_arg_type=type(last).__name__,
            )
            return None

        guarded = GuardedNext(last, state, log, on_duplicate)
        return (*args[:-1], guarded), guarded

    if inspect.iscoroutinefunction(fn):

        @functools.wraps(fn)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            begun = begin(args)
            if begun is None:
                return None
            call_args, guarded = begun
            try:
                return await fn(*call_args, **kwargs)
            except PASSTHROUGH_EXCEPTIONS:
                raise
            except BaseException as exc:
                await guarded.fail_async(exc, phase="rejected")
                return None

        wrapper: Callable[..., Any] = async_wrapper
    else:

        @functools.wraps(fn)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            begun = begin(args)
            if begun is None:
                return None
            call_args, guarded = begun
            try:
                result = fn(*call_args, **kwargs)
            except PASSTHROUGH_EXCEPTIONS:
                raise
            except BaseException as exc:
                delivered = guarded.fail(exc, phase="thrown")
                return delivered if inspect.isawaitable(delivered) else None

            if asyncio.isfuture(result):
                return _settle(result, guarded)
            if inspect.isawaitable(result):
                return _drain(result, guarded)
            return result

        wrapper = sync_wrapper

    wrapper.__name__ = f"{WRAPPED_PREFIX}{name}"
    owner, _, _ = getattr(fn, "__qualname__", name).rpartition(".")
    wrapper.__qualname__ = f"{owner}.{wrapper.__name__}" if owner else wrapper.__name__
    _WRAPPERS.add(wrapper)
    return wrapper  # type: ignore[return-value]


__all__ = [
    "WRAPPED_PREFIX",
    "InvocationState",
    "DuplicateHook",
    "GuardedNext",
    "is_wrapped",
    "wrap_handler",
]
