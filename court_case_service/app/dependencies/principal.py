from typing import Optional

from fastapi import Depends, Header, HTTPException

from court_case_service.app.service.access_control import denial_message, role_may_attempt
from court_case_service.app.service.models import CaseOperation, Principal, Role


async def get_current_principal(
    x_principal_id: Optional[str] = Header(default=None),
    x_principal_role: Optional[str] = Header(default=None),
) -> Principal:
    """
    FastAPI dependency provider for the acting principal.

    The authentication gateway in front of this service verifies credentials
    and forwards the principal's id and role as request headers.
    """
    if not x_principal_id or not x_principal_role:
        raise HTTPException(
            status_code=401,
            detail={"kind": "UNAUTHENTICATED", "message": "X-Principal-Id and X-Principal-Role headers are required"},
        )
    try:
        role = Role(x_principal_role.lower())
    except ValueError:
        raise HTTPException(
            status_code=403,
            detail={"kind": "FORBIDDEN", "message": f"Unrecognized role '{x_principal_role}'"},
        )
    return Principal(id=x_principal_id, role=role)


def principal_allowed_to(operation: CaseOperation):
    """
    Builds a dependency that rejects principals whose role can never perform
    ``operation``. Dependencies resolve before the request body is validated,
    so such callers get 403 whatever they send.
    """
    async def _dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not role_may_attempt(principal, operation):
            raise HTTPException(status_code=403, detail={"kind": "FORBIDDEN", "message": denial_message(operation)})
        return principal

    return _dependency
