"""
LinkUp Backend: Configuration, App Factory & Middleware Tests
===============================================================

What:  Settings validation, the app factory, the access log and the rate
       limiting middleware.
"""

import logging
import time

import pytest
from httpx import ASGITransport, AsyncClient
from pydantic import ValidationError as SettingsValidationError
from starlette.applications import Starlette
from starlette.responses import PlainTextResponse
from starlette.routing import Route

import linkup.main as main_module
from linkup.config import Settings, get_settings
from linkup.main import create_app
from linkup.middleware.rate_limit import RateLimitMiddleware


class TestSettings:

    def test_missing_secret_fails_validation(self):
        with pytest.raises(ValueError, match="JWT_SECRET"):
            Settings(jwt_secret="").validate_required()

    def test_paths_are_normalized(self):
        settings = Settings(jwt_secret="x", api_prefix="api/auth/", static_url_path="public/uploads/")
        assert settings.api_prefix == "/api/auth"
        assert settings.static_url_path == "/public/uploads"

    def test_log_level_is_upper_cased(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(SettingsValidationError):
            Settings(log_level="chatty")

    def test_cors_origins_list(self):
        settings = Settings(cors_origins="http://a.com, http://b.com")
        assert settings.cors_origins_list == ["http://a.com", "http://b.com"]

    def test_sqlite_detection(self):
        assert Settings(database_url="sqlite+aiosqlite:///x.db").is_sqlite
        assert not Settings(database_url="postgresql+asyncpg://u:p@localhost/db").is_sqlite


class TestAppFactory:

    def test_import_builds_no_app(self):
        """Importing linkup.main creates no app, engine or settings."""
        assert not hasattr(main_module, "app")

    @pytest.mark.asyncio
    async def test_factory_defaults_to_environment_settings(self):
        app = create_app()
        try:
            assert app.state.context.settings is get_settings()
        finally:
            await app.state.context.dispose()

    @pytest.mark.asyncio
    async def test_each_app_gets_its_own_context(self, settings):
        first = create_app(settings)
        second = create_app(settings)
        try:
            assert first.state.context is not second.state.context
            assert first.state.context.engine is not second.state.context.engine
        finally:
            await first.state.context.dispose()
            await second.state.context.dispose()


class TestAccessLog:

    @pytest.mark.asyncio
    async def test_logs_route_template_not_raw_path(self, test_client, caplog):
        with caplog.at_level(logging.INFO, logger="linkup.access"):
            response = await test_client.get("/public/uploads/private-avatar-name.png")

        assert response.status_code == 404
        records = [r for r in caplog.records if r.name == "linkup.access"]
        assert len(records) == 1
        assert records[0].route == "/public/uploads/{filename}"
        assert records[0].levelno == logging.WARNING
        assert "private-avatar-name" not in records[0].getMessage()

    @pytest.mark.asyncio
    async def test_query_string_not_logged(self, test_client, caplog):
        with caplog.at_level(logging.INFO, logger="linkup.access"):
            await test_client.get("/api/auth/search", params={"q": "someone-specific"})

        messages = [r.getMessage() for r in caplog.records if r.name == "linkup.access"]
        assert messages
        assert all("someone-specific" not in m for m in messages)
        assert "/api/auth/search" in messages[0]

    @pytest.mark.asyncio
    async def test_unmatched_route(self, test_client, caplog):
        with caplog.at_level(logging.INFO, logger="linkup.access"):
            await test_client.get("/no/such/path/abc123")

        records = [r for r in caplog.records if r.name == "linkup.access"]
        assert records[0].route == "<unmatched>"
        assert "abc123" not in records[0].getMessage()

    @pytest.mark.asyncio
    async def test_health_not_logged(self, test_client, caplog):
        with caplog.at_level(logging.INFO, logger="linkup.access"):
            await test_client.get("/health")

        assert not [r for r in caplog.records if r.name == "linkup.access"]


def ping_app() -> Starlette:
    async def ping(request):
        return PlainTextResponse("pong")

    return Starlette(routes=[Route("/ping", ping)])


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_requests_over_limit_are_rejected(self, settings):
        app = create_app(
            settings.model_copy(update={"rate_limit_enabled": True, "rate_limit_requests": 10})
        )
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            # Missing q: answered by the service without touching the database
            statuses = [
                (await client.get("/api/auth/search")).status_code for _ in range(11)
            ]
            health = await client.get("/health")
        await app.state.context.dispose()

        assert statuses[:10] == [400] * 10
        assert statuses[10] == 429
        assert health.status_code != 429

    @pytest.mark.asyncio
    async def test_idle_ips_dropped_once_interval_elapses(self):
        limiter = RateLimitMiddleware(ping_app(), max_requests=10, window_seconds=60, cleanup_interval=30)
        limiter._requests["203.0.113.9"] = [time.time() - 600]
        limiter._last_cleanup = time.time() - 31

        async with AsyncClient(transport=ASGITransport(app=limiter), base_url="http://test") as client:
            response = await client.get("/ping")

        assert response.status_code == 200
        assert "203.0.113.9" not in limiter._requests
        assert len(limiter._requests["127.0.0.1"]) == 1

    @pytest.mark.asyncio
    async def test_cleanup_waits_for_interval(self):
        limiter = RateLimitMiddleware(ping_app(), max_requests=10, window_seconds=60, cleanup_interval=30)
        limiter._requests["203.0.113.9"] = [time.time() - 600]

        async with AsyncClient(transport=ASGITransport(app=limiter), base_url="http://test") as client:
            await client.get("/ping")

        assert "203.0.113.9" in limiter._requests
