# Unit Tests for the MongoDB connection lifecycle
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from court_case_service.app import config
from court_case_service.infrastructure.database import connection as db_connection


def reset_db_connection_module_state():
    db_connection.client = None
    db_connection.db = None


@pytest.fixture(autouse=True)
def auto_reset_db_module_state():
    reset_db_connection_module_state()
    yield
    reset_db_connection_module_state()


@pytest.mark.asyncio
@patch('court_case_service.infrastructure.database.connection.AsyncIOMotorClient')
async def test_connect_to_mongo_success(mock_motor_client_cls):
    mock_client = MagicMock()
    mock_client.admin.command = AsyncMock(return_value={"ok": 1})
    mock_motor_client_cls.return_value = mock_client

    await db_connection.connect_to_mongo()

    mock_motor_client_cls.assert_called_once_with(config.settings.MONGO_DETAILS, tz_aware=True)
    mock_client.admin.command.assert_awaited_once_with('ping')
    assert db_connection.db is mock_client.__getitem__.return_value
    mock_client.__getitem__.assert_called_once_with(config.settings.DB_NAME)


@pytest.mark.asyncio
@patch('court_case_service.infrastructure.database.connection.AsyncIOMotorClient')
async def test_connect_to_mongo_failure_resets_state(mock_motor_client_cls):
    mock_client = MagicMock()
    mock_client.admin.command = AsyncMock(side_effect=Exception("no route to host"))
    mock_motor_client_cls.return_value = mock_client

    with pytest.raises(ConnectionError):
        await db_connection.connect_to_mongo()

    assert db_connection.client is None
    assert db_connection.db is None


def test_close_mongo_connection():
    mock_client = MagicMock()
    db_connection.client = mock_client
    db_connection.db = MagicMock()

    db_connection.close_mongo_connection()

    mock_client.close.assert_called_once()
    assert db_connection.client is None
    assert db_connection.db is None


@pytest.mark.asyncio
async def test_get_db_yields_connected_database():
    db_connection.client = MagicMock()
    db_connection.db = MagicMock()

    async for db in db_connection.get_db():
        assert db is db_connection.db
