"""End-to-end: wrapped handlers in a continuation chain feeding error_middleware.

``Chain`` is a minimal stand-in for a host framework: it runs normal handlers
in order until one calls ``next(err)``, then runs error handlers, dispatching
purely on declared arity like continuation-style frameworks do.
"""

import asyncio
import inspect

import pytest

from handlerguard import HTTPError, catch_async, declared_arity, error_middleware


class Response:
    def __init__(self):
        self.status_code = 200
        self.body = None

    def status(self, code):
        self.status_code = code
        return self

    def json(self, body):
        self.body = body


class Chain:
    def __init__(self, *handlers):
        self.handlers = handlers

    async def run(self, req):
        res = Response()
        await self._dispatch(0, None, req, res)
        return res

    async def _dispatch(self, index, err, req, res):
        for position in range(index, len(self.handlers)):
            handler = self.handlers[position]
            is_error_handler = declared_arity(handler) == 4
            if is_error_handler != (err is not None):
                continue

            signals = []

            def next(error=None):
                signals.append(error)

            args = (err, req, res, next) if is_error_handler else (req, res, next)
            result = handler(*args)
            if inspect.isawaitable(result):
                await result
            if not signals:
                return
            err = signals[0]
        return


@catch_async
class PostController:
    posts = {"1": {"id": "1", "title": "hello"}}

    async def show(self, req, res, next):
        await asyncio.sleep(0)
        post = self.posts.get(req["id"])
        if post is None:
            raise HTTPError("Post not found", 404)
        res.json(post)

    def create(self, req, res, next):
        if "title" not in req:
            next(HTTPError("title is required", 400))
        raise RuntimeError("never reported")


@catch_async
def authenticate(req, res, next):
    if req.get("token") != "secret":
        raise PermissionError("bad token")
    next()


@pytest.mark.asyncio
class TestRequestChain:
    async def test_success_path(self):
        chain = Chain(authenticate, PostController().show, error_middleware)

        res = await chain.run({"token": "secret", "id": "1"})

        assert res.status_code == 200
        assert res.body == {"id": "1", "title": "hello"}

    async def test_async_failure_reaches_error_middleware(self):
        chain = Chain(authenticate, PostController().show, error_middleware)

        res = await chain.run({"token": "secret", "id": "missing"})

        assert res.status_code == 404
        assert res.body["message"] == "Post not found"

    async def test_sync_failure_in_first_handler(self):
        chain = Chain(authenticate, PostController().show, error_middleware)

        res = await chain.run({"token": "wrong", "id": "1"})

        assert res.status_code == 500
        assert res.body["message"] == "bad token"

    async def test_first_error_wins(self):
        chain = Chain(authenticate, PostController().create, error_middleware)

        res = await chain.run({"token": "secret"})

        assert res.status_code == 400
        assert res.body["message"] == "title is required"

    async def test_failing_error_handler_is_wrapped_too(self):
        @catch_async
        def broken_reporter(err, req, res, next):
            raise ValueError(f"reporter failed on: {err.message}")

        chain = Chain(PostController().show, broken_reporter, error_middleware)

        res = await chain.run({"id": "missing"})

        assert res.status_code == 500
        assert res.body["message"] == "reporter failed on: Post not found"
