from abc import ABC, abstractmethod
from typing import Optional

from court_case_service.app.service.models import ResolvedPrincipal


class AbstractIdentityClient(ABC):
    @abstractmethod
    async def resolve(self, principal_id: str) -> Optional[ResolvedPrincipal]:
        """
        Looks up a principal (litigant, lawyer, judge or registrar) by id.

        Args:
            principal_id: The id the principal is referenced by on cases.

        Returns:
            The principal with its role, or None if no active principal has that id.

        Raises:
            IdentityServiceError: If the identity source cannot be queried.
        """
        pass
