# Access Control Evaluator
import logging
from typing import Optional

from court_case_service.app.models.case_db import CaseDB
from court_case_service.app.service.models import CaseOperation, Principal, Role

logger = logging.getLogger(__name__)

# Roles permitted to attempt each operation, before any per-case check.
OPERATION_ROLES = {
    CaseOperation.VIEW: {Role.REGISTRAR, Role.JUDGE, Role.LAWYER, Role.USER},
    CaseOperation.REGISTER: {Role.REGISTRAR},
    CaseOperation.ASSIGN_JUDGE: {Role.REGISTRAR},
    CaseOperation.SCHEDULE_HEARING: {Role.JUDGE, Role.REGISTRAR},
    CaseOperation.ADD_ORDER: {Role.JUDGE},
    CaseOperation.UPDATE_STATUS: {Role.JUDGE, Role.REGISTRAR},
}

DENIAL_MESSAGES = {
    CaseOperation.VIEW: "Access forbidden",
    CaseOperation.REGISTER: "Only court registrars can register new cases",
    CaseOperation.ASSIGN_JUDGE: "Only registrars can assign judges",
    CaseOperation.SCHEDULE_HEARING: "Only judges or registrars can schedule hearings",
    CaseOperation.ADD_ORDER: "Only judges can pass orders",
    CaseOperation.UPDATE_STATUS: "Only judges or registrars can update case status",
}


def role_may_attempt(principal: Principal, operation: CaseOperation) -> bool:
    return principal.role in OPERATION_ROLES.get(operation, set())


def can_view(principal: Principal, case: CaseDB) -> bool:
    if principal.role == Role.REGISTRAR:
        return True
    if principal.role == Role.JUDGE:
        return case.assigned_judge is None or case.assigned_judge == principal.id
    if principal.role == Role.LAWYER:
        return case.is_represented_by(principal.id)
    if principal.role == Role.USER:
        return case.is_party(principal.id)
    return False


def can_mutate(principal: Principal, case: Optional[CaseDB], operation: CaseOperation) -> bool:
    """
    Decides whether ``principal`` may perform ``operation`` on ``case``.

    ``case`` is None only for registration, which has no target yet. Hearing
    scheduling and status updates are open to any judge or registrar; passing
    an order additionally requires the judge to be the one assigned to the case.
    """
    if not role_may_attempt(principal, operation):
        return False
    if operation == CaseOperation.REGISTER:
        return True
    if case is None:
        return False
    if operation == CaseOperation.VIEW:
        return can_view(principal, case)
    if operation == CaseOperation.ADD_ORDER:
        return case.assigned_judge is not None and case.assigned_judge == principal.id
    if operation in (CaseOperation.ASSIGN_JUDGE, CaseOperation.SCHEDULE_HEARING, CaseOperation.UPDATE_STATUS):
        return True
    return False


def denial_message(operation: CaseOperation) -> str:
    return DENIAL_MESSAGES.get(operation, "Access forbidden")
