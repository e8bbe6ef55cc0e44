# Role-scoped MongoDB filters for case queries
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from court_case_service.app.service.exceptions import ForbiddenError, ValidationError
from court_case_service.app.service.models import CasePriority, CaseStatus, CaseType, Principal, Role

SORTABLE_FIELDS = {
    "registration_date", "updated_at", "case_number", "title", "status", "priority", "case_type", "court_type",
}
DEFAULT_SORT_FIELD = "registration_date"


class CaseListOptions(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1)
    status: Optional[CaseStatus] = None
    case_type: Optional[CaseType] = None
    priority: Optional[CasePriority] = None
    search: Optional[str] = None
    sort_by: str = DEFAULT_SORT_FIELD
    sort_order: str = "desc" # "asc" or "desc"


def role_predicate(principal: Principal) -> Dict[str, Any]:
    """
    The visibility predicate for a principal's role.

    An empty dict means no restriction. Roles without a rule are refused.
    """
    if principal.role == Role.REGISTRAR:
        return {}
    if principal.role == Role.JUDGE:
        # A null match also covers documents where the field is absent.
        return {"$or": [{"assigned_judge": principal.id}, {"assigned_judge": None}]}
    if principal.role == Role.LAWYER:
        return {"parties.assigned_lawyer_id": principal.id}
    if principal.role == Role.USER:
        return {"parties.user_id": principal.id}
    raise ForbiddenError("Access forbidden")


def search_predicate(search: str) -> Dict[str, Any]:
    pattern = re.escape(search.strip())
    return {"$or": [
        {"title": {"$regex": pattern, "$options": "i"}},
        {"case_number": {"$regex": pattern, "$options": "i"}},
        {"description": {"$regex": pattern, "$options": "i"}},
    ]}


def build_case_filter(principal: Principal, options: Optional[CaseListOptions] = None) -> Dict[str, Any]:
    """
    Conjoins the active-case base filter, the role predicate and any explicit filters.

    The role predicate and the search term can each be an ``$or`` group, so
    every group goes into one ``$and`` list instead of sharing a single
    ``$or`` key.
    """
    query_filter: Dict[str, Any] = {"is_active": True}
    clauses: List[Dict[str, Any]] = []

    scope = role_predicate(principal)
    if scope:
        clauses.append(scope)

    if options is not None:
        if options.status:
            query_filter["status"] = options.status.value
        if options.case_type:
            query_filter["case_type"] = options.case_type.value
        if options.priority:
            query_filter["priority"] = options.priority.value
        if options.search and options.search.strip():
            clauses.append(search_predicate(options.search))

    if clauses:
        query_filter["$and"] = clauses
    return query_filter


def build_sort(options: CaseListOptions) -> tuple[str, int]:
    if options.sort_by not in SORTABLE_FIELDS:
        raise ValidationError(f"Cannot sort by '{options.sort_by}'. Sortable fields: {', '.join(sorted(SORTABLE_FIELDS))}")
    sort_order = options.sort_order.lower()
    if sort_order not in ("asc", "desc"):
        raise ValidationError(f"Sort order must be 'asc' or 'desc', got '{options.sort_order}'")
    return options.sort_by, -1 if sort_order == "desc" else 1
