from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from court_case_service.app.config import settings
from court_case_service.app.dependencies.http_client import get_http_client
from court_case_service.app.service.interfaces.identity_client import AbstractIdentityClient
from court_case_service.infrastructure.database.connection import get_db
from court_case_service.infrastructure.database.user_directory import MongoUserDirectory
from court_case_service.infrastructure.identity_service_client import IdentityServiceClient


async def get_identity_client(request: Request, db: AsyncIOMotorDatabase = Depends(get_db)) -> AbstractIdentityClient:
    """
    FastAPI dependency provider for principal lookups.

    Uses the identity service when IDENTITY_SERVICE_URL is set, otherwise the
    users collection in the case database.
    """
    if settings.IDENTITY_SERVICE_URL:
        http_client = await get_http_client(request)
        return IdentityServiceClient(http_client=http_client, base_url=settings.IDENTITY_SERVICE_URL)
    return MongoUserDirectory(db)
