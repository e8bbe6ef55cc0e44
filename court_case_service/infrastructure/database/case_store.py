# Operations for the Cases Collection
import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from court_case_service.app.config import settings
from court_case_service.app.models.case_db import CaseDB
from court_case_service.app.service.exceptions import ConcurrencyConflictError, PersistenceError

logger = logging.getLogger(__name__)
CASES_COLLECTION = settings.CASES_COLLECTION

async def ensure_case_indexes(db: AsyncIOMotorDatabase) -> None:
    """Creates the indexes the lifecycle engine and the role-scoped queries rely on."""
    cases = db[CASES_COLLECTION]
    await cases.create_index([("id", ASCENDING)], unique=True)
    await cases.create_index([("case_number", ASCENDING)], unique=True)
    await cases.create_index([("status", ASCENDING)])
    await cases.create_index([("assigned_judge", ASCENDING)])
    await cases.create_index([("parties.user_id", ASCENDING)])
    await cases.create_index([("parties.assigned_lawyer_id", ASCENDING)])
    await cases.create_index([("registration_date", DESCENDING)])
    logger.info(f"Indexes ensured on collection '{CASES_COLLECTION}'.")

async def insert_case(db: AsyncIOMotorDatabase, case: CaseDB) -> CaseDB:
    """
    Inserts a newly registered case.

    DuplicateKeyError is propagated untouched so the caller can allocate a new
    case number and retry.
    """
    try:
        await db[CASES_COLLECTION].insert_one(case.model_dump())
    except DuplicateKeyError:
        logger.warning(f"Duplicate key inserting case {case.id} with case number {case.case_number}.")
        raise
    except PyMongoError as e:
        logger.error(f"Failed to insert case {case.id}: {e}", exc_info=True)
        raise PersistenceError(f"Failed to store case {case.id}.") from e
    logger.info(f"Inserted case ID: {case.id} with case number {case.case_number}")
    return case

async def get_active_case(db: AsyncIOMotorDatabase, case_id: str) -> Optional[CaseDB]:
    try:
        case_doc = await db[CASES_COLLECTION].find_one({"id": case_id, "is_active": True})
    except PyMongoError as e:
        logger.error(f"Failed to load case {case_id}: {e}", exc_info=True)
        raise PersistenceError(f"Failed to load case {case_id}.") from e
    return CaseDB(**case_doc) if case_doc else None

async def save_case(db: AsyncIOMotorDatabase, case: CaseDB) -> CaseDB:
    """
    Writes the whole aggregate back, conditional on the version it was loaded at.

    The stored version is bumped by one. If another writer got there first the
    filter matches nothing and ConcurrencyConflictError is raised; the stored
    document is left as the other writer committed it.
    """
    expected_version = case.version
    case_dict = case.model_dump()
    case_dict["version"] = expected_version + 1

    try:
        result = await db[CASES_COLLECTION].replace_one(
            {"id": case.id, "version": expected_version},
            case_dict,
        )
    except PyMongoError as e:
        logger.error(f"Failed to save case {case.id}: {e}", exc_info=True)
        raise PersistenceError(f"Failed to store case {case.id}.") from e

    if result.matched_count == 0:
        logger.warning(f"Version conflict saving case {case.id} at version {expected_version}.")
        raise ConcurrencyConflictError(aggregate_id=case.id, expected_version=expected_version)

    case.version = expected_version + 1
    logger.info(f"Saved case ID: {case.id} at version {case.version}")
    return case

async def find_cases(
    db: AsyncIOMotorDatabase,
    query_filter: Dict[str, Any],
    sort_field: str = "registration_date",
    sort_direction: int = DESCENDING,
    skip: int = 0,
    limit: int = 10,
) -> List[CaseDB]:
    try:
        cases_cursor = db[CASES_COLLECTION].find(query_filter).sort(sort_field, sort_direction).skip(skip).limit(limit)
        cases_docs = await cases_cursor.to_list(length=limit)
    except PyMongoError as e:
        logger.error(f"Failed to list cases: {e}", exc_info=True)
        raise PersistenceError("Failed to list cases.") from e
    return [CaseDB(**doc) for doc in cases_docs]

async def count_cases(db: AsyncIOMotorDatabase, query_filter: Dict[str, Any]) -> int:
    try:
        return await db[CASES_COLLECTION].count_documents(query_filter)
    except PyMongoError as e:
        logger.error(f"Failed to count cases: {e}", exc_info=True)
        raise PersistenceError("Failed to count cases.") from e

async def count_cases_numbered_in_year(db: AsyncIOMotorDatabase, year: int) -> int:
    """Counts cases (active or not) whose case number carries ``year``."""
    return await count_cases(db, {"case_number": {"$regex": f"^[A-Z]+/{year}/"}})
