# Query Handlers for role-scoped case reads
import asyncio
import logging
import math
from typing import List

from motor.motor_asyncio import AsyncIOMotorDatabase
from opentelemetry import trace
from pydantic import BaseModel

from court_case_service.app.models.case_db import CaseDB
from court_case_service.app.service.access_control import can_view
from court_case_service.app.service.exceptions import CaseNotFoundError, ForbiddenError
from court_case_service.app.service.models import CaseStatus, Principal
from court_case_service.app.service.queries.filters import CaseListOptions, build_case_filter, build_sort
from court_case_service.infrastructure.database import case_store

logger = logging.getLogger(__name__)


class PaginationMeta(BaseModel):
    current_page: int
    total_pages: int
    total_count: int
    has_next_page: bool
    has_prev_page: bool


class CaseListResult(BaseModel):
    cases: List[CaseDB]
    pagination: PaginationMeta


class DashboardStats(BaseModel):
    registered: int
    pending: int
    in_progress: int
    disposed: int
    total: int


async def list_cases(db: AsyncIOMotorDatabase, principal: Principal, options: CaseListOptions) -> CaseListResult:
    query_filter = build_case_filter(principal, options)
    sort_field, sort_direction = build_sort(options)
    skip = (options.page - 1) * options.limit

    cases, total = await asyncio.gather(
        case_store.find_cases(
            db, query_filter, sort_field=sort_field, sort_direction=sort_direction, skip=skip, limit=options.limit
        ),
        case_store.count_cases(db, query_filter),
    )
    trace.get_current_span().set_attribute("cases.total_count", total)
    logger.info(f"Listed {len(cases)} of {total} cases for {principal.role.value} {principal.id} (page {options.page}).")

    return CaseListResult(
        cases=cases,
        pagination=PaginationMeta(
            current_page=options.page,
            total_pages=math.ceil(total / options.limit),
            total_count=total,
            has_next_page=options.page * options.limit < total,
            has_prev_page=options.page > 1,
        ),
    )


async def get_case(db: AsyncIOMotorDatabase, principal: Principal, case_id: str) -> CaseDB:
    case = await case_store.get_active_case(db, case_id)
    if case is None:
        raise CaseNotFoundError(case_id)
    if not can_view(principal, case):
        logger.warning(f"Principal {principal.id} ({principal.role.value}) denied view of case {case_id}.")
        raise ForbiddenError("Access forbidden")
    return case


async def get_dashboard_stats(db: AsyncIOMotorDatabase, principal: Principal) -> DashboardStats:
    base_filter = build_case_filter(principal)
    buckets = (CaseStatus.REGISTERED, CaseStatus.PENDING, CaseStatus.IN_PROGRESS, CaseStatus.DISPOSED)

    counts = await asyncio.gather(
        *[case_store.count_cases(db, {**base_filter, "status": status.value}) for status in buckets],
        case_store.count_cases(db, base_filter),
    )
    return DashboardStats(
        registered=counts[0],
        pending=counts[1],
        in_progress=counts[2],
        disposed=counts[3],
        total=counts[4],
    )
