"""Tests for Sentry SDK configuration."""

import os
from typing import Any
from unittest.mock import patch

import pytest

from core.sentry_config import _before_send, _traces_sampler, init_sentry


class TestBeforeSend:
    """Tests for PII scrubbing in _before_send."""

    def test_scrubs_user_identity_but_keeps_id(self) -> None:
        event: dict[str, Any] = {
            "user": {
                "id": "123",
                "email": "user@example.com",
                "username": "alice",
                "ip_address": "192.168.1.100",
            }
        }
        result = _before_send(event, {})  # type: ignore[arg-type]
        assert result is not None
        user = result["user"]  # type: ignore[typeddict-item]
        assert "email" not in user
        assert "username" not in user
        assert user["ip_address"] == "{{auto}}"
        assert user["id"] == "123"

    def test_filters_cookies_and_authorization(self) -> None:
        event: dict[str, Any] = {
            "request": {
                "url": "/api/topics",
                "cookies": {"session": "secret"},
                "headers": {
                    "Authorization": "Bearer secret_token",
                    "Content-Type": "application/json",
                },
            }
        }
        result = _before_send(event, {})  # type: ignore[arg-type]
        assert result is not None
        request = result["request"]  # type: ignore[typeddict-item]
        assert "cookies" not in request
        assert request["headers"]["Authorization"] == "[Filtered]"
        assert request["headers"]["Content-Type"] == "application/json"

    def test_handles_bare_event(self) -> None:
        event: dict[str, Any] = {"message": "Test error"}
        assert _before_send(event, {}) == {"message": "Test error"}  # type: ignore[arg-type]


class TestTracesSampler:
    @pytest.mark.parametrize("path", ["/health", "/api/health"])
    def test_never_samples_health_checks(self, path: str) -> None:
        assert _traces_sampler({"asgi_scope": {"path": path}}) == 0.0

    @pytest.mark.parametrize(
        "path", ["/api/admin/blocked", "/api/reports", "/api/auth/login"]
    )
    def test_higher_sampling_for_moderation_and_auth(self, path: str) -> None:
        assert _traces_sampler({"asgi_scope": {"path": path}}) == 0.5

    def test_default_sampling_rate(self) -> None:
        assert _traces_sampler({"asgi_scope": {"path": "/api/topics"}}) == 0.2
        assert _traces_sampler({}) == 0.2

    def test_respects_parent_sampling(self) -> None:
        context = {"parent_sampled": True, "asgi_scope": {"path": "/api/topics"}}
        assert _traces_sampler(context) == 1.0


class TestInitSentry:
    def test_without_dsn_does_nothing(self) -> None:
        with patch("sentry_sdk.init") as mock_init:
            with patch.dict(os.environ, {}, clear=False):
                os.environ.pop("SENTRY_DSN", None)
                init_sentry()
        mock_init.assert_not_called()

    def test_with_dsn_uses_environment(self) -> None:
        env_vars = {
            "SENTRY_DSN": "https://test@o0.ingest.sentry.io/0",
            "ENVIRONMENT": "production",
            "SENTRY_RELEASE": "1.2.3",
        }
        with patch("sentry_sdk.init") as mock_init:
            with patch.dict(os.environ, env_vars):
                init_sentry()
        call_kwargs = mock_init.call_args.kwargs
        assert call_kwargs["dsn"] == env_vars["SENTRY_DSN"]
        assert call_kwargs["environment"] == "production"
        assert call_kwargs["release"] == "1.2.3"
        assert call_kwargs["send_default_pii"] is False
