"""Tests for the Starlette / FastAPI adapter."""
import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

# Skip entire module if fastapi not installed
pytest.importorskip("fastapi")

from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.responses import PlainTextResponse

from combine import CombineConfig, every, except_, some
from combine.integrations.starlette import CombineMiddleware


async def pass_through(ctx, next):
    await next()


@pytest.fixture
def reached():
    return []


@pytest.fixture
def make_client(reached):
    """Build an app with one combined unit in front of GET /test."""

    def make(unit, **options):
        app = FastAPI()

        @app.get("/test")
        async def test_route():
            reached.append("/test")
            return PlainTextResponse("success")

        app.add_middleware(CombineMiddleware, unit=unit, **options)
        return TestClient(app, raise_server_exceptions=False)

    return make


class TestSome:
    """some() in front of a route."""

    def test_first_passing_unit_wins(self, make_client):
        condition1 = MagicMock(return_value=False)

        async def advance_and_pass(ctx, next):
            await next()
            return True

        middleware2 = AsyncMock(side_effect=advance_and_pass)
        middleware3 = AsyncMock(side_effect=pass_through)

        response = make_client(some(condition1, middleware2, middleware3)).get("/test")

        assert response.status_code == 200
        assert response.text == "success"
        condition1.assert_called_once()
        middleware2.assert_called_once()
        middleware3.assert_not_called()

    def test_error_before_next_falls_through(self, make_client):
        middleware1 = AsyncMock(side_effect=RuntimeError("Test error"))
        middleware2 = AsyncMock(return_value=True)

        response = make_client(some(middleware1, middleware2)).get("/test")

        assert response.status_code == 200
        assert response.text == "success"
        middleware1.assert_called_once()
        middleware2.assert_called_once()

    def test_error_after_next_is_server_error(self, make_client, reached):
        async def advance_then_fail(ctx, next):
            await next()
            raise RuntimeError("after")

        middleware3 = AsyncMock(side_effect=pass_through)

        response = make_client(some(lambda ctx: False, advance_then_fail, middleware3)).get("/test")

        assert response.status_code == 500
        assert reached == ["/test"]
        middleware3.assert_not_called()

    def test_all_failing_is_server_error(self, make_client, reached):
        unit = some(AsyncMock(side_effect=RuntimeError("1")), AsyncMock(side_effect=RuntimeError("2")))

        response = make_client(unit).get("/test")

        assert response.status_code == 500
        assert reached == []


class TestEvery:
    """every() in front of a route."""

    def test_all_passing_reaches_route(self, make_client, reached):
        response = make_client(every(AsyncMock(return_value=True), AsyncMock(return_value=True))).get("/test")

        assert response.status_code == 200
        assert response.text == "success"
        assert reached == ["/test"]

    def test_false_is_server_error(self, make_client, reached):
        middleware1 = AsyncMock(return_value=True)
        middleware2 = AsyncMock(return_value=False)

        response = make_client(every(middleware1, middleware2)).get("/test")

        assert response.status_code == 500
        middleware1.assert_called_once()
        middleware2.assert_called_once()
        assert reached == []


class TestExcept:
    """except_() in front of a route."""

    def test_matching_condition_skips_middleware(self, make_client):
        condition = MagicMock(return_value=True)
        middleware = AsyncMock(side_effect=pass_through)

        response = make_client(except_(condition, middleware)).get("/test")

        assert response.status_code == 200
        assert response.text == "success"
        condition.assert_called_once()
        middleware.assert_not_called()

    def test_condition_list(self, make_client):
        condition1 = MagicMock(return_value=False)
        condition2 = MagicMock(return_value=True)
        middleware = MagicMock()

        response = make_client(except_([condition1, condition2], middleware)).get("/test")

        assert response.status_code == 200
        assert response.text == "success"
        condition1.assert_called_once()
        condition2.assert_called_once()
        middleware.assert_not_called()

    def test_non_matching_condition_runs_middlewares(self, make_client):
        middleware1 = MagicMock(side_effect=lambda ctx, next: next())
        middleware2 = MagicMock(side_effect=lambda ctx, next: next())

        response = make_client(except_(lambda ctx: False, middleware1, middleware2)).get("/test")

        assert response.status_code == 200
        assert response.text == "success"
        middleware1.assert_called_once()
        middleware2.assert_called_once()


class TestAdapter:
    """Adapter behaviour independent of the combinator."""

    def test_unit_can_answer_directly(self, make_client, reached):
        async def block(ctx, next):
            ctx.response = PlainTextResponse("blocked", status_code=403)

        response = make_client(block).get("/test")

        assert response.status_code == 403
        assert response.text == "blocked"
        assert reached == []

    def test_no_response_uses_unhandled_status(self, make_client):
        response = make_client(some()).get("/test")
        assert response.status_code == 404

    def test_unhandled_status_configurable(self, make_client):
        response = make_client(some(), config=CombineConfig(unhandled_status=403)).get("/test")
        assert response.status_code == 403

    def test_concurrent_next_calls_reach_route_once(self, make_client, reached):
        async def fan_out(ctx, next):
            await asyncio.gather(next(), next())

        response = make_client(fan_out).get("/test")

        assert response.status_code == 200
        assert response.text == "success"
        assert reached == ["/test"]

    def test_request_exposed_on_context(self, make_client):
        paths = []

        async def record_path(ctx, next):
            paths.append(ctx.request.url.path)
            await next()

        make_client(record_path).get("/test")
        assert paths == ["/test"]

    def test_disabled_bypasses_unit(self, make_client):
        unit = AsyncMock()

        response = make_client(unit, enabled=False).get("/test")

        assert response.status_code == 200
        unit.assert_not_called()
