# Identity lookups against the users collection
import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from court_case_service.app.config import settings
from court_case_service.app.service.exceptions import IdentityServiceError
from court_case_service.app.service.interfaces.identity_client import AbstractIdentityClient
from court_case_service.app.service.models import ResolvedPrincipal

logger = logging.getLogger(__name__)
USERS_COLLECTION = settings.USERS_COLLECTION


class MongoUserDirectory(AbstractIdentityClient):
    """Resolves principals from the ``users`` collection maintained by user management."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def resolve(self, principal_id: str) -> Optional[ResolvedPrincipal]:
        try:
            user_doc = await self.db[USERS_COLLECTION].find_one({"id": principal_id})
        except PyMongoError as e:
            logger.error(f"Failed to look up user {principal_id}: {e}", exc_info=True)
            raise IdentityServiceError(f"Failed to look up user {principal_id}.") from e

        if not user_doc or not user_doc.get("is_active", True):
            logger.info(f"No active user found for ID: {principal_id}")
            return None

        name_parts = [user_doc.get("first_name"), user_doc.get("last_name")]
        display_name = " ".join(part for part in name_parts if part) or None
        return ResolvedPrincipal(id=user_doc["id"], role=user_doc["role"], display_name=display_name)
