# Unit Tests for the identity lookups (HTTP identity service and users collection)
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from pymongo.errors import PyMongoError

from court_case_service.app.service.exceptions import IdentityServiceError
from court_case_service.infrastructure.database.user_directory import MongoUserDirectory
from court_case_service.infrastructure.identity_service_client import IdentityServiceClient

BASE_URL = "http://identity.test/api/v1/"


def client_for(handler) -> IdentityServiceClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return IdentityServiceClient(http_client=http_client, base_url=BASE_URL)


# --- IdentityServiceClient ---

@pytest.mark.asyncio
async def test_resolve_returns_principal():
    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == "http://identity.test/api/v1/users/judge-1"
        return httpx.Response(200, json={"id": "judge-1", "role": "judge", "first_name": "Asha", "last_name": "Rao"})

    resolved = await client_for(handler).resolve("judge-1")

    assert resolved.id == "judge-1"
    assert resolved.role == "judge"
    assert resolved.display_name == "Asha Rao"


@pytest.mark.asyncio
async def test_resolve_prefers_display_name():
    def handler(request):
        return httpx.Response(200, json={"id": "judge-1", "role": "judge", "display_name": "Hon. Justice Rao"})

    assert (await client_for(handler).resolve("judge-1")).display_name == "Hon. Justice Rao"


@pytest.mark.asyncio
async def test_resolve_unknown_principal_returns_none():
    assert await client_for(lambda request: httpx.Response(404)).resolve("ghost") is None


@pytest.mark.asyncio
async def test_resolve_inactive_principal_returns_none():
    def handler(request):
        return httpx.Response(200, json={"id": "user-1", "role": "user", "is_active": False})

    assert await client_for(handler).resolve("user-1") is None


@pytest.mark.asyncio
async def test_resolve_server_error_raises():
    with pytest.raises(IdentityServiceError):
        await client_for(lambda request: httpx.Response(503, text="maintenance")).resolve("user-1")


@pytest.mark.asyncio
async def test_resolve_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(IdentityServiceError):
        await client_for(handler).resolve("user-1")


@pytest.mark.asyncio
async def test_resolve_malformed_payload_raises():
    with pytest.raises(IdentityServiceError):
        await client_for(lambda request: httpx.Response(200, json={"id": "user-1"})).resolve("user-1")
    with pytest.raises(IdentityServiceError):
        await client_for(lambda request: httpx.Response(200, text="<html>")).resolve("user-1")


# --- MongoUserDirectory ---

@pytest.mark.asyncio
async def test_user_directory_resolves_active_users(mongo_db):
    await mongo_db["users"].insert_many([
        {"id": "lawyer-1", "role": "lawyer", "first_name": "Priya", "last_name": "Nair", "is_active": True},
        {"id": "user-9", "role": "user", "first_name": "Left", "is_active": False},
    ])
    directory = MongoUserDirectory(mongo_db)

    lawyer = await directory.resolve("lawyer-1")
    assert (lawyer.id, lawyer.role, lawyer.display_name) == ("lawyer-1", "lawyer", "Priya Nair")
    assert await directory.resolve("user-9") is None
    assert await directory.resolve("nobody") is None


@pytest.mark.asyncio
async def test_user_directory_wraps_driver_errors():
    users = MagicMock()
    users.find_one = AsyncMock(side_effect=PyMongoError("timeout"))
    db = MagicMock()
    db.__getitem__.return_value = users

    with pytest.raises(IdentityServiceError):
        await MongoUserDirectory(db).resolve("user-1")
