# Case Number Generation
import datetime
import logging
from typing import Callable, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from court_case_service.app.models.case_db import utc_now
from court_case_service.app.service.models import CourtType
from court_case_service.infrastructure.database import case_store

logger = logging.getLogger(__name__)

COURT_PREFIXES = {
    CourtType.DISTRICT_COURT: "DC",
    CourtType.HIGH_COURT: "HC",
    CourtType.SUPREME_COURT: "SC",
    CourtType.FAMILY_COURT: "FC",
    CourtType.COMMERCIAL_COURT: "CC",
}
DEFAULT_COURT_PREFIX = "CT"


def court_prefix(court_type: CourtType | str) -> str:
    return COURT_PREFIXES.get(CourtType(court_type), DEFAULT_COURT_PREFIX)


def format_case_number(court_type: CourtType | str, year: int, sequence: int) -> str:
    """Formats a case number as ``<prefix>/<year>/<4-digit sequence>``, e.g. ``DC/2025/0001``."""
    return f"{court_prefix(court_type)}/{year}/{sequence:04d}"


class CaseNumberGenerator:
    """
    Allocates year-scoped sequential case numbers.

    The sequence is the number of cases already numbered in the current year,
    plus one, so it is shared by every court type. Counting and inserting are
    not atomic; the unique index on ``case_number`` rejects a duplicate and
    the caller asks for a fresh number.
    """

    def __init__(self, clock: Optional[Callable[[], datetime.datetime]] = None):
        self.clock = clock or utc_now

    async def next_case_number(self, db: AsyncIOMotorDatabase, court_type: CourtType | str) -> str:
        year = self.clock().year
        existing = await case_store.count_cases_numbered_in_year(db, year)
        case_number = format_case_number(court_type, year, existing + 1)
        logger.debug(f"Generated case number {case_number} ({existing} cases already numbered in {year}).")
        return case_number
