# API Router for Cases
from fastapi import APIRouter, Depends, HTTPException, Body, Query
import datetime
import logging
from typing import Optional
from pydantic import BaseModel, Field
from motor.motor_asyncio import AsyncIOMotorDatabase

from court_case_service.app.config import settings
from court_case_service.app.dependencies.identity import get_identity_client
from court_case_service.app.dependencies.principal import get_current_principal, principal_allowed_to
from court_case_service.app.models.case_db import CaseDB, CaseOrderDB, HearingDB
from court_case_service.app.models.case_views import ResolvedCaseView
from court_case_service.app.observability import case_operations_rejected_counter
from court_case_service.app.service.commands import handlers as command_handlers
from court_case_service.app.service.commands.models import (
    AddCaseOrderCommand, AssignJudgeCommand, CaseRegistrationData, RegisterCaseCommand, ScheduleHearingCommand,
    UpdateCaseStatusCommand,
)
from court_case_service.app.service.exceptions import (
    ConcurrencyConflictError, CourtCaseServiceError, ForbiddenError, NotFoundError,
    RoleMismatchError, ValidationError,
)
from court_case_service.app.service.interfaces.identity_client import AbstractIdentityClient
from court_case_service.app.service.models import (
    CaseOperation, CasePriority, CaseStatus, CaseType, HearingType, OrderType, Principal,
)
from court_case_service.app.service.queries import handlers as query_handlers
from court_case_service.app.service.queries.filters import CaseListOptions
from court_case_service.infrastructure.database.connection import get_db
from court_case_service.infrastructure.kafka.case_events import CaseEventPublisher, get_case_event_publisher

logger = logging.getLogger(__name__)
router = APIRouter()

# --- Request bodies whose identifiers come from the path ---

class AssignJudgeRequest(BaseModel):
    judge_id: str
    court_number: Optional[str] = None

class ScheduleHearingRequest(BaseModel):
    hearing_date: datetime.date
    hearing_time: str
    hearing_type: HearingType
    court_room: str
    remarks: Optional[str] = None

class AddOrderRequest(BaseModel):
    order_type: OrderType
    order_text: str = Field(min_length=1)

class UpdateStatusRequest(BaseModel):
    status: CaseStatus
    remarks: Optional[str] = None


# --- Error mapping ---

ERROR_STATUS_CODES = (
    (ValidationError, 400),
    (RoleMismatchError, 400),
    (NotFoundError, 404),
    (ForbiddenError, 403),
    (ConcurrencyConflictError, 409),
)

def _http_error(error: CourtCaseServiceError, operation: str) -> HTTPException:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            logger.warning(f"{operation} rejected ({error.kind}): {error}")
            case_operations_rejected_counter.add(1, {"operation": operation, "kind": error.kind})
            return HTTPException(status_code=status_code, detail={"kind": error.kind, "message": error.message})
    logger.error(f"{operation} failed ({error.kind}): {error}", exc_info=True)
    return HTTPException(status_code=500, detail={"kind": error.kind, "message": error.message})

def _unexpected_error(operation: str, error: Exception) -> HTTPException:
    logger.error(f"Unexpected error during {operation}: {error}", exc_info=True)
    return HTTPException(
        status_code=500,
        detail={"kind": "SERVER_ERROR", "message": f"An unexpected error occurred during {operation}."},
    )


# --- Endpoints ---

@router.post("/cases", response_model=ResolvedCaseView, status_code=201, summary="Register a new case", tags=["Cases"])
async def register_case_api(
    request_data: CaseRegistrationData = Body(...),
    principal: Principal = Depends(principal_allowed_to(CaseOperation.REGISTER)),
    db: AsyncIOMotorDatabase = Depends(get_db),
    identity_client: AbstractIdentityClient = Depends(get_identity_client),
    event_publisher: Optional[CaseEventPublisher] = Depends(get_case_event_publisher),
):
    cmd = RegisterCaseCommand(**request_data.model_dump())
    try:
        return await command_handlers.handle_register_case(
            db, principal, cmd, identity_client=identity_client, event_publisher=event_publisher
        )
    except CourtCaseServiceError as e:
        raise _http_error(e, "register_case")
    except Exception as e:
        raise _unexpected_error("register_case", e)


@router.get("/cases", response_model=query_handlers.CaseListResult, tags=["Cases"])
async def list_cases_api(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    status: Optional[CaseStatus] = None,
    case_type: Optional[CaseType] = None,
    priority: Optional[CasePriority] = None,
    search: Optional[str] = None,
    sort_by: str = "registration_date",
    sort_order: str = "desc",
    principal: Principal = Depends(get_current_principal),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    options = CaseListOptions(
        page=page, limit=limit, status=status, case_type=case_type, priority=priority,
        search=search, sort_by=sort_by, sort_order=sort_order,
    )
    try:
        return await query_handlers.list_cases(db, principal, options)
    except CourtCaseServiceError as e:
        raise _http_error(e, "list_cases")
    except Exception as e:
        raise _unexpected_error("list_cases", e)


@router.get("/cases/dashboard-stats", response_model=query_handlers.DashboardStats, tags=["Cases"])
async def dashboard_stats_api(
    principal: Principal = Depends(get_current_principal),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    try:
        return await query_handlers.get_dashboard_stats(db, principal)
    except CourtCaseServiceError as e:
        raise _http_error(e, "dashboard_stats")
    except Exception as e:
        raise _unexpected_error("dashboard_stats", e)


@router.get("/cases/{case_id}", response_model=CaseDB, tags=["Cases"])
async def get_case_by_id(
    case_id: str,
    principal: Principal = Depends(get_current_principal),
    db: AsyncIOMotorDatabase = Depends(get_db),
):
    try:
        return await query_handlers.get_case(db, principal, case_id)
    except CourtCaseServiceError as e:
        raise _http_error(e, "get_case")
    except Exception as e:
        raise _unexpected_error("get_case", e)


@router.put("/cases/{case_id}/assign-judge", response_model=CaseDB, tags=["Cases"])
async def assign_judge_api(
    case_id: str,
    request_data: AssignJudgeRequest = Body(...),
    principal: Principal = Depends(get_current_principal),
    db: AsyncIOMotorDatabase = Depends(get_db),
    identity_client: AbstractIdentityClient = Depends(get_identity_client),
    event_publisher: Optional[CaseEventPublisher] = Depends(get_case_event_publisher),
):
    cmd = AssignJudgeCommand(case_id=case_id, judge_id=request_data.judge_id, court_number=request_data.court_number)
    try:
        return await command_handlers.handle_assign_judge(
            db, principal, cmd, identity_client=identity_client, event_publisher=event_publisher
        )
    except CourtCaseServiceError as e:
        raise _http_error(e, "assign_judge")
    except Exception as e:
        raise _unexpected_error("assign_judge", e)


@router.post("/cases/{case_id}/hearings", response_model=HearingDB, status_code=201, tags=["Hearings"])
async def schedule_hearing_api(
    case_id: str,
    request_data: ScheduleHearingRequest = Body(...),
    principal: Principal = Depends(get_current_principal),
    db: AsyncIOMotorDatabase = Depends(get_db),
    event_publisher: Optional[CaseEventPublisher] = Depends(get_case_event_publisher),
):
    cmd = ScheduleHearingCommand(case_id=case_id, **request_data.model_dump())
    try:
        return await command_handlers.handle_schedule_hearing(db, principal, cmd, event_publisher=event_publisher)
    except CourtCaseServiceError as e:
        raise _http_error(e, "schedule_hearing")
    except Exception as e:
        raise _unexpected_error("schedule_hearing", e)


@router.post("/cases/{case_id}/orders", response_model=CaseOrderDB, status_code=201, tags=["Orders"])
async def add_case_order_api(
    case_id: str,
    request_data: AddOrderRequest = Body(...),
    principal: Principal = Depends(get_current_principal),
    db: AsyncIOMotorDatabase = Depends(get_db),
    event_publisher: Optional[CaseEventPublisher] = Depends(get_case_event_publisher),
):
    cmd = AddCaseOrderCommand(case_id=case_id, order_type=request_data.order_type, order_text=request_data.order_text)
    try:
        return await command_handlers.handle_add_case_order(db, principal, cmd, event_publisher=event_publisher)
    except CourtCaseServiceError as e:
        raise _http_error(e, "add_case_order")
    except Exception as e:
        raise _unexpected_error("add_case_order", e)


@router.put("/cases/{case_id}/status", response_model=CaseDB, tags=["Cases"])
async def update_case_status_api(
    case_id: str,
    request_data: UpdateStatusRequest = Body(...),
    principal: Principal = Depends(get_current_principal),
    db: AsyncIOMotorDatabase = Depends(get_db),
    event_publisher: Optional[CaseEventPublisher] = Depends(get_case_event_publisher),
):
    cmd = UpdateCaseStatusCommand(case_id=case_id, status=request_data.status, remarks=request_data.remarks)
    try:
        return await command_handlers.handle_update_case_status(db, principal, cmd, event_publisher=event_publisher)
    except CourtCaseServiceError as e:
        raise _http_error(e, "update_case_status")
    except Exception as e:
        raise _unexpected_error("update_case_status", e)
