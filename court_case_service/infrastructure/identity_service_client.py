# Client for interacting with an external Identity Microservice
import logging
from typing import Optional

import httpx

from court_case_service.app.service.exceptions import IdentityServiceError
from court_case_service.app.service.interfaces.identity_client import AbstractIdentityClient
from court_case_service.app.service.models import ResolvedPrincipal

logger = logging.getLogger(__name__)


class IdentityServiceClient(AbstractIdentityClient):
    def __init__(self, http_client: httpx.AsyncClient, base_url: str):
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")

    async def resolve(self, principal_id: str) -> Optional[ResolvedPrincipal]:
        request_url = f"{self.base_url}/users/{principal_id}"
        logger.debug(f"Querying identity service for principal: {request_url}")

        try:
            response = await self.http_client.get(request_url)
            if response.status_code == 404:
                logger.info(f"Identity service has no principal with ID: {principal_id}")
                return None
            response.raise_for_status()
            user_data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error calling identity service: {e.response.status_code} - {e.response.text}", exc_info=True)
            raise IdentityServiceError(f"Identity service returned {e.response.status_code} for {principal_id}.") from e
        except httpx.RequestError as e:
            logger.error(f"Request error calling identity service: {e}", exc_info=True)
            raise IdentityServiceError(f"Identity service unreachable while resolving {principal_id}.") from e
        except ValueError as e:
            logger.error(f"Identity service returned a non-JSON body for {principal_id}: {e}", exc_info=True)
            raise IdentityServiceError(f"Identity service returned an unreadable response for {principal_id}.") from e

        if not user_data.get("is_active", True):
            logger.info(f"Identity service reports principal {principal_id} as inactive.")
            return None

        display_name = user_data.get("display_name")
        if not display_name:
            name_parts = [user_data.get("first_name"), user_data.get("last_name")]
            display_name = " ".join(part for part in name_parts if part) or None
        try:
            return ResolvedPrincipal(id=user_data["id"], role=user_data["role"], display_name=display_name)
        except (KeyError, ValueError) as e:
            logger.error(f"Malformed principal payload from identity service for {principal_id}: {user_data}", exc_info=True)
            raise IdentityServiceError(f"Identity service returned a malformed principal for {principal_id}.") from e
