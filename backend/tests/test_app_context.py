"""Tests for application wiring: context construction, Firebase provider, expiry loop, lifespan."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from smartrent.app.config import Settings
from smartrent.app.context import AppContext
from smartrent.app.main import lease_expiry_loop, lifespan
from smartrent.infra.firebase import FirebaseIdentityProvider


def _settings(**overrides) -> Settings:
    values = {"database_url": "sqlite+aiosqlite://", "jwt_secret_key": "k", "firebase_project_id": ""}
    values.update(overrides)
    return Settings(**values)


class TestAppContext:

    def test_local_only_without_firebase_project(self):
        ctx = AppContext.create(_settings())
        assert ctx.gateway.federated.enabled is False
        assert ctx.tokens.expiration_minutes == 1440

    def test_explicit_provider_wins(self):
        provider = AsyncMock()
        ctx = AppContext.create(_settings(firebase_project_id="demo"), identity_provider=provider)
        assert ctx.gateway.federated.provider is provider

    def test_firebase_init_failure_disables_federation(self):
        with patch(
            "smartrent.infra.firebase.FirebaseIdentityProvider",
            side_effect=ValueError("no credentials"),
        ):
            ctx = AppContext.create(_settings(firebase_project_id="demo"))
        assert ctx.gateway.federated.enabled is False

    def test_cors_origins(self):
        assert _settings(debug=True).cors_origins_list == ["*"]
        assert _settings(debug=False, cors_origins="http://a, http://b").cors_origins_list == [
            "http://a",
            "http://b",
        ]


class TestFirebaseIdentityProvider:

    @patch("smartrent.infra.firebase.auth")
    @patch("smartrent.infra.firebase.credentials")
    @patch("smartrent.infra.firebase.firebase_admin")
    async def test_initializes_named_app_and_verifies(self, mock_admin, mock_credentials, mock_auth):
        mock_admin.get_app.side_effect = ValueError("no app")
        mock_auth.verify_id_token.return_value = {"uid": "u1", "email": "a@test.com"}

        provider = FirebaseIdentityProvider("demo", "/secrets/sa.json")
        claims = await provider.verify("id-token")

        mock_credentials.Certificate.assert_called_once_with("/secrets/sa.json")
        mock_admin.initialize_app.assert_called_once()
        assert mock_admin.initialize_app.call_args.kwargs["name"] == "smartrent"
        mock_auth.verify_id_token.assert_called_once_with(
            "id-token", app=mock_admin.initialize_app.return_value
        )
        assert claims["uid"] == "u1"

    @patch("smartrent.infra.firebase.firebase_admin")
    def test_reuses_existing_app(self, mock_admin):
        FirebaseIdentityProvider("demo")
        mock_admin.initialize_app.assert_not_called()


class TestLeaseExpiryLoop:

    async def test_errors_are_logged_and_loop_continues(self, caplog):
        failing_session = MagicMock()
        failing_session.__aenter__ = AsyncMock(side_effect=RuntimeError("db offline"))
        failing_session.__aexit__ = AsyncMock(return_value=False)
        session_factory = MagicMock(return_value=failing_session)

        with patch("smartrent.app.main.asyncio.sleep", AsyncMock(side_effect=asyncio.CancelledError)) as sleep:
            with pytest.raises(asyncio.CancelledError):
                await lease_expiry_loop(session_factory, interval_hours=24)

        sleep.assert_awaited_once_with(24 * 3600)
        assert "db offline" in caplog.text

    async def test_runs_sweep(self):
        session = MagicMock()
        session.__aenter__ = AsyncMock(return_value="db")
        session.__aexit__ = AsyncMock(return_value=False)

        with patch("smartrent.app.main.expire_leases", AsyncMock(return_value=["l1"])) as sweep, \
                patch("smartrent.app.main.asyncio.sleep", AsyncMock(side_effect=asyncio.CancelledError)):
            with pytest.raises(asyncio.CancelledError):
                await lease_expiry_loop(MagicMock(return_value=session), interval_hours=1)

        sweep.assert_awaited_once_with("db")


class TestLifespan:

    async def test_sweep_stops_before_engine_dispose(self):
        events = []

        async def _sweep_forever(session_factory, interval_hours):
            try:
                await asyncio.Event().wait()
            finally:
                events.append("sweep stopped")

        engine = MagicMock()
        engine.dispose = AsyncMock(side_effect=lambda: events.append("engine disposed"))
        context = SimpleNamespace(engine=engine, session_factory=MagicMock(), settings=_settings())
        app = SimpleNamespace(state=SimpleNamespace(context=context))

        with patch("smartrent.app.main.init_db", AsyncMock()) as init, \
                patch("smartrent.app.main.lease_expiry_loop", _sweep_forever):
            async with lifespan(app):
                # let the sweep task start
                await asyncio.sleep(0)

        init.assert_awaited_once_with(engine)
        assert events == ["sweep stopped", "engine disposed"]
