"""Tests for the FastAPI callback/refresh routes."""
import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from kinde_session.keys import StorageKeys
from kinde_session.registry import StorageRegistry
from kinde_session.routes import create_auth_router
from kinde_session.session_store import MemoryStorage


@pytest.fixture
def app_registry() -> StorageRegistry:
    registry = StorageRegistry()
    registry.set_active(MemoryStorage())
    return registry


@pytest.fixture
def client(app_registry) -> TestClient:
    app = FastAPI()
    app.include_router(
        create_auth_router(
            domain="https://example.kinde.com",
            client_id="test-client",
            redirect_url="http://127.0.0.1:8000/callback",
            success_url="/home",
            auto_refresh=False,
            registry=app_registry,
        )
    )
    return TestClient(app)


def _store_pending(registry, state="valid-state-123", verifier="v"):
    asyncio.run(
        registry.get_active().set_items({StorageKeys.STATE: state, StorageKeys.CODE_VERIFIER: verifier})
    )


def test_callback_valid_state_and_code(client, app_registry):
    _store_pending(app_registry)
    with patch(
        "httpx.AsyncClient.post",
        new_callable=AsyncMock,
        return_value=httpx.Response(200, json={"access_token": "at", "refresh_token": "rt", "id_token": "it"}),
    ):
        r = client.get(
            "/callback",
            params={"state": "valid-state-123", "code": "auth-code-xyz"},
            follow_redirects=False,
        )
    assert r.status_code == 302
    assert r.headers["location"] == "/home"
    store = app_registry.get_active()
    assert asyncio.run(store.get_session_item(StorageKeys.ACCESS_TOKEN)) == "at"
    assert asyncio.run(store.get_session_item(StorageKeys.STATE)) is None


def test_callback_unknown_state(client, app_registry):
    _store_pending(app_registry)
    r = client.get("/callback", params={"state": "unknown-state", "code": "somecode"})
    assert r.status_code == 400
    assert "Invalid state" in r.text


def test_callback_missing_params(client):
    r = client.get("/callback")
    assert r.status_code == 400
    assert "Invalid state or code" in r.text


def test_callback_error_from_issuer(client):
    r = client.get(
        "/callback",
        params={"state": "s", "error": "access_denied", "error_description": "User <b>denied</b>"},
    )
    assert r.status_code == 400
    assert "User &lt;b&gt;denied&lt;/b&gt;" in r.text


def test_refresh_without_refresh_token(client):
    r = client.post("/refresh")
    assert r.status_code == 401
    assert r.json() == {"success": False, "error": "No refresh token found"}


def test_refresh_success(client, app_registry):
    asyncio.run(app_registry.get_active().set_session_item(StorageKeys.REFRESH_TOKEN, "rt"))
    with patch(
        "httpx.AsyncClient.post",
        new_callable=AsyncMock,
        return_value=httpx.Response(200, json={"access_token": "new-at"}),
    ):
        r = client.post("/refresh")
    assert r.status_code == 200
    assert r.json() == {"success": True, "error": None}
