# Command Handler Implementation (Case Lifecycle Engine)
import datetime
import logging
import time
from typing import Callable, Dict, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from opentelemetry import trace
from pydantic import ValidationError as SchemaValidationError
from pymongo.errors import DuplicateKeyError

from .models import (
    AddCaseOrderCommand, AssignJudgeCommand, RegisterCaseCommand, ScheduleHearingCommand,
    UpdateCaseStatusCommand,
)
from court_case_service.app.config import settings
from court_case_service.app.models.case_db import (
    CaseDB, CaseHistoryEntryDB, CaseOrderDB, HearingDB, PartyDB, utc_now,
)
from court_case_service.app.models.case_views import ResolvedCaseView, resolve_case_view
from court_case_service.app.observability import case_operations_counter, case_registration_latency_histogram
from court_case_service.app.service.access_control import can_mutate, denial_message, role_may_attempt
from court_case_service.app.service.case_numbers import CaseNumberGenerator
from court_case_service.app.service.exceptions import (
    CaseNotFoundError, CaseNumberConflictError, ForbiddenError, PrincipalNotFoundError,
    RoleMismatchError, ValidationError,
)
from court_case_service.app.service.interfaces.identity_client import AbstractIdentityClient
from court_case_service.app.service.models import (
    CaseOperation, CaseStatus, HistoryAction, PartyRole, Principal, ResolvedPrincipal, Role,
)
from court_case_service.infrastructure.database import case_store
from court_case_service.infrastructure.kafka.case_events import CaseEventPublisher

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime.datetime]

REQUIRED_CASE_FIELDS = ("title", "description", "case_type", "court_type")


# --- Shared steps ---

def _authorize_role(principal: Principal, operation: CaseOperation):
    # Runs before the case is loaded, so only the role can be checked here.
    if not role_may_attempt(principal, operation):
        logger.warning(f"Principal {principal.id} ({principal.role.value}) may not attempt {operation.value}.")
        raise ForbiddenError(denial_message(operation))


def _authorize(principal: Principal, operation: CaseOperation, case: Optional[CaseDB] = None, message: Optional[str] = None):
    if not can_mutate(principal, case, operation):
        target = f"case {case.id}" if case else "new case"
        logger.warning(f"Principal {principal.id} ({principal.role.value}) denied {operation.value} on {target}.")
        raise ForbiddenError(message or denial_message(operation))


async def _load_active_case(db: AsyncIOMotorDatabase, case_id: str) -> CaseDB:
    case = await case_store.get_active_case(db, case_id)
    if case is None:
        logger.warning(f"Case {case_id} not found or inactive.")
        raise CaseNotFoundError(case_id)
    return case


async def _resolve_with_role(
    identity_client: AbstractIdentityClient, principal_id: str, expected_role: Role
) -> ResolvedPrincipal:
    resolved = await identity_client.resolve(principal_id)
    if resolved is None:
        raise PrincipalNotFoundError(principal_id, expected_role.value)
    if resolved.role != expected_role.value:
        raise RoleMismatchError(principal_id, expected_role.value, resolved.role)
    return resolved


def _after_commit(case: CaseDB, entry: CaseHistoryEntryDB, event_publisher: Optional[CaseEventPublisher]):
    case_operations_counter.add(1, {"action": entry.action})
    trace.get_current_span().add_event(entry.action, {"case.id": case.id, "case.version": case.version})
    if event_publisher is not None:
        event_publisher.publish(case, entry)


# --- Register ---

def _validate_registration(command: RegisterCaseCommand):
    missing = [name for name in REQUIRED_CASE_FIELDS if not getattr(command, name)]
    if isinstance(command.title, str) and not command.title.strip() and "title" not in missing:
        missing.append("title")
    if not command.parties:
        missing.append("parties")
    if missing:
        raise ValidationError(
            f"Title, description, case type, court type, and parties are required (missing: {', '.join(missing)})"
        )

    has_petitioner = any(party.role == PartyRole.PETITIONER for party in command.parties)
    has_respondent = any(party.role == PartyRole.RESPONDENT for party in command.parties)
    if not has_petitioner or not has_respondent:
        raise ValidationError("Case must have at least one petitioner and one respondent")


async def handle_register_case(
    db: AsyncIOMotorDatabase,
    principal: Principal,
    command: RegisterCaseCommand,
    identity_client: AbstractIdentityClient,
    case_number_generator: Optional[CaseNumberGenerator] = None,
    event_publisher: Optional[CaseEventPublisher] = None,
    clock: Clock = utc_now,
) -> ResolvedCaseView:
    started = time.perf_counter()
    current_span = trace.get_current_span()
    current_span.set_attribute("command.name", "RegisterCaseCommand")
    current_span.set_attribute("command.id", command.command_id)
    logger.info(f"Handling RegisterCaseCommand: {command.command_id} by {principal.role.value} {principal.id}")

    _authorize(principal, CaseOperation.REGISTER)
    _validate_registration(command)

    resolved: Dict[str, ResolvedPrincipal] = {}
    for party in command.parties:
        resolved[party.user_id] = await _resolve_with_role(identity_client, party.user_id, Role.USER)
        if party.assigned_lawyer_id:
            resolved[party.assigned_lawyer_id] = await _resolve_with_role(
                identity_client, party.assigned_lawyer_id, Role.LAWYER
            )
    if command.assigned_judge:
        resolved[command.assigned_judge] = await _resolve_with_role(identity_client, command.assigned_judge, Role.JUDGE)
    # The acting registrar is already authenticated; a failed lookup only costs the name.
    registrar = await identity_client.resolve(principal.id)
    if registrar is not None:
        resolved[principal.id] = registrar
    registrar_name = registrar.display_name if registrar and registrar.display_name else principal.id

    now = clock()
    try:
        case = CaseDB(
            registration_date=now,
            registered_by=principal.id,
            title=command.title.strip(),
            description=command.description,
            case_type=command.case_type,
            court_type=command.court_type,
            priority=command.priority,
            status=CaseStatus.REGISTERED,
            parties=[PartyDB(**party.model_dump()) for party in command.parties],
            assigned_judge=command.assigned_judge,
            court_number=command.court_number,
            cause_of_action=command.cause_of_action,
            relief_sought=command.relief_sought,
            court_fees=command.court_fees,
            dispute_amount=command.dispute_amount,
            tags=[tag.strip() for tag in command.tags if tag.strip()],
            created_at=now,
            updated_at=now,
        )
    except SchemaValidationError as e:
        raise ValidationError(f"Invalid case data: {e.errors()[0]['loc'][0]} - {e.errors()[0]['msg']}") from e

    entry = case.add_history_entry(
        HistoryAction.CASE_REGISTERED, principal.id, f"Case registered by {registrar_name}", now
    )

    generator = case_number_generator or CaseNumberGenerator(clock=clock)
    max_attempts = settings.CASE_NUMBER_MAX_ATTEMPTS
    for attempt in range(1, max_attempts + 1):
        case.case_number = await generator.next_case_number(db, case.court_type)
        try:
            await case_store.insert_case(db, case)
            break
        except DuplicateKeyError:
            logger.warning(f"Case number {case.case_number} already taken (attempt {attempt}/{max_attempts}).")
            current_span.add_event("CaseNumberCollision", {"case.number": case.case_number, "attempt": attempt})
    else:
        raise CaseNumberConflictError(attempts=max_attempts)

    current_span.set_attribute("case.id", case.id)
    current_span.set_attribute("case.number", case.case_number)
    case_registration_latency_histogram.record(time.perf_counter() - started, {"court.type": case.court_type})
    _after_commit(case, entry, event_publisher)

    logger.info(f"Registered case {case.case_number} (ID: {case.id}) with {len(case.parties)} parties.")
    return resolve_case_view(case, resolved)


# --- Assign judge ---

async def handle_assign_judge(
    db: AsyncIOMotorDatabase,
    principal: Principal,
    command: AssignJudgeCommand,
    identity_client: AbstractIdentityClient,
    event_publisher: Optional[CaseEventPublisher] = None,
    clock: Clock = utc_now,
) -> CaseDB:
    current_span = trace.get_current_span()
    current_span.set_attribute("command.name", "AssignJudgeCommand")
    current_span.set_attribute("case.id", command.case_id)
    logger.info(f"Handling AssignJudgeCommand for case {command.case_id}: judge {command.judge_id}")

    _authorize_role(principal, CaseOperation.ASSIGN_JUDGE)
    case = await _load_active_case(db, command.case_id)
    _authorize(principal, CaseOperation.ASSIGN_JUDGE, case)
    judge = await _resolve_with_role(identity_client, command.judge_id, Role.JUDGE)

    entry = case.assign_judge(
        judge_id=judge.id,
        court_number=command.court_number,
        actor_id=principal.id,
        judge_name=judge.display_name or judge.id,
        now=clock(),
    )
    await case_store.save_case(db, case)
    _after_commit(case, entry, event_publisher)
    return case


# --- Schedule hearing ---

async def handle_schedule_hearing(
    db: AsyncIOMotorDatabase,
    principal: Principal,
    command: ScheduleHearingCommand,
    event_publisher: Optional[CaseEventPublisher] = None,
    clock: Clock = utc_now,
) -> HearingDB:
    current_span = trace.get_current_span()
    current_span.set_attribute("command.name", "ScheduleHearingCommand")
    current_span.set_attribute("case.id", command.case_id)
    logger.info(f"Handling ScheduleHearingCommand for case {command.case_id} on {command.hearing_date}")

    _authorize_role(principal, CaseOperation.SCHEDULE_HEARING)
    case = await _load_active_case(db, command.case_id)
    _authorize(principal, CaseOperation.SCHEDULE_HEARING, case)

    now = clock()
    hearing = HearingDB(
        hearing_date=datetime.datetime.combine(command.hearing_date, datetime.time.min, tzinfo=datetime.UTC),
        hearing_time=command.hearing_time,
        hearing_type=command.hearing_type,
        court_room=command.court_room,
        judge_id=case.assigned_judge or principal.id,
        remarks=command.remarks,
        created_at=now,
    )
    entry = case.schedule_hearing(hearing, actor_id=principal.id, now=now)
    await case_store.save_case(db, case)
    _after_commit(case, entry, event_publisher)
    return hearing


# --- Add order ---

async def handle_add_case_order(
    db: AsyncIOMotorDatabase,
    principal: Principal,
    command: AddCaseOrderCommand,
    event_publisher: Optional[CaseEventPublisher] = None,
    clock: Clock = utc_now,
) -> CaseOrderDB:
    current_span = trace.get_current_span()
    current_span.set_attribute("command.name", "AddCaseOrderCommand")
    current_span.set_attribute("case.id", command.case_id)
    logger.info(f"Handling AddCaseOrderCommand for case {command.case_id}: {command.order_type.value} order")

    _authorize_role(principal, CaseOperation.ADD_ORDER)
    case = await _load_active_case(db, command.case_id)
    _authorize(principal, CaseOperation.ADD_ORDER, case, message="You can only pass orders for cases assigned to you")

    now = clock()
    order = CaseOrderDB(order_date=now, order_type=command.order_type, order_text=command.order_text, passed_by=principal.id)
    entry = case.add_order(order, now=now)
    await case_store.save_case(db, case)
    _after_commit(case, entry, event_publisher)
    return order


# --- Update status ---

async def handle_update_case_status(
    db: AsyncIOMotorDatabase,
    principal: Principal,
    command: UpdateCaseStatusCommand,
    event_publisher: Optional[CaseEventPublisher] = None,
    clock: Clock = utc_now,
) -> CaseDB:
    current_span = trace.get_current_span()
    current_span.set_attribute("command.name", "UpdateCaseStatusCommand")
    current_span.set_attribute("case.id", command.case_id)
    logger.info(f"Handling UpdateCaseStatusCommand for case {command.case_id} to {command.status.value}")

    _authorize_role(principal, CaseOperation.UPDATE_STATUS)
    case = await _load_active_case(db, command.case_id)
    _authorize(principal, CaseOperation.UPDATE_STATUS, case)

    # Any status may follow any other; there is no transition table.
    entry = case.change_status(command.status, actor_id=principal.id, remarks=command.remarks, now=clock())
    await case_store.save_case(db, case)
    _after_commit(case, entry, event_publisher)
    return case
