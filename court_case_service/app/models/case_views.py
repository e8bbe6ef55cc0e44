# Case representations with referenced principals resolved to display names
from typing import Dict, List, Optional

from pydantic import Field

from court_case_service.app.models.case_db import CaseDB, PartyDB
from court_case_service.app.service.models import ResolvedPrincipal


class ResolvedPartyView(PartyDB):
    user_name: Optional[str] = None
    assigned_lawyer_name: Optional[str] = None


class ResolvedCaseView(CaseDB):
    """A case as returned from registration: ids kept, names alongside."""
    registered_by_name: Optional[str] = None
    assigned_judge_name: Optional[str] = None
    parties: List[ResolvedPartyView] = Field(default_factory=list)


def _name(principals: Dict[str, ResolvedPrincipal], principal_id: Optional[str]) -> Optional[str]:
    if principal_id is None:
        return None
    resolved = principals.get(principal_id)
    if resolved is None:
        return None
    return resolved.display_name or resolved.id


def resolve_case_view(case: CaseDB, principals: Dict[str, ResolvedPrincipal]) -> ResolvedCaseView:
    return ResolvedCaseView(
        **case.model_dump(exclude={"parties"}),
        parties=[
            ResolvedPartyView(
                **party.model_dump(),
                user_name=_name(principals, party.user_id),
                assigned_lawyer_name=_name(principals, party.assigned_lawyer_id),
            )
            for party in case.parties
        ],
        registered_by_name=_name(principals, case.registered_by),
        assigned_judge_name=_name(principals, case.assigned_judge),
    )
