# Domain enums and the acting Principal
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class Role(str, Enum):
    REGISTRAR = "registrar" # Court staff who register cases and assign judges
    JUDGE = "judge"         # Presides over cases, passes orders
    LAWYER = "lawyer"       # Represents parties
    USER = "user"           # Litigant; sees the cases they are a party to


class CaseStatus(str, Enum):
    REGISTERED = "registered"
    ADMITTED = "admitted"
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    NOTICE_ISSUED = "notice_issued"
    APPEARANCE = "appearance"
    EVIDENCE_STAGE = "evidence_stage"
    ARGUMENTS = "arguments"
    RESERVED = "reserved"
    DISPOSED = "disposed"
    DISMISSED = "dismissed"
    WITHDRAWN = "withdrawn"


class CasePriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class CaseType(str, Enum):
    CIVIL = "civil"
    CRIMINAL = "criminal"
    FAMILY = "family"
    COMMERCIAL = "commercial"
    PROPERTY = "property"
    LABOR = "labor"
    CONSTITUTIONAL = "constitutional"
    ADMINISTRATIVE = "administrative"
    OTHER = "other"


class CourtType(str, Enum):
    DISTRICT_COURT = "district_court"
    HIGH_COURT = "high_court"
    SUPREME_COURT = "supreme_court"
    FAMILY_COURT = "family_court"
    COMMERCIAL_COURT = "commercial_court"
    CONSUMER_COURT = "consumer_court"
    LABOR_COURT = "labor_court"
    REVENUE_COURT = "revenue_court"
    OTHER = "other"


class PartyRole(str, Enum):
    PETITIONER = "petitioner"
    RESPONDENT = "respondent"


class HearingType(str, Enum):
    FIRST_HEARING = "first_hearing"
    REGULAR_HEARING = "regular_hearing"
    EVIDENCE_HEARING = "evidence_hearing"
    ARGUMENT_HEARING = "argument_hearing"
    JUDGMENT = "judgment"
    INTERIM_APPLICATION = "interim_application"


class HearingStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    ADJOURNED = "adjourned"
    CANCELLED = "cancelled"


class OrderType(str, Enum):
    INTERIM = "interim"
    FINAL = "final"
    DIRECTION = "direction"
    NOTICE = "notice"
    SUMMONS = "summons"


class HistoryAction(str, Enum):
    CASE_REGISTERED = "CASE_REGISTERED"
    JUDGE_ASSIGNED = "JUDGE_ASSIGNED"
    HEARING_SCHEDULED = "HEARING_SCHEDULED"
    ORDER_PASSED = "ORDER_PASSED"
    STATUS_UPDATED = "STATUS_UPDATED"


class CaseOperation(str, Enum):
    VIEW = "view"
    REGISTER = "register"
    ASSIGN_JUDGE = "assign_judge"
    SCHEDULE_HEARING = "schedule_hearing"
    ADD_ORDER = "add_order"
    UPDATE_STATUS = "update_status"


class Principal(BaseModel):
    """An authenticated actor, as forwarded by the authentication gateway."""
    id: str
    role: Role


class ResolvedPrincipal(BaseModel):
    """A principal looked up through the identity collaborator."""
    id: str
    role: str # As reported by the identity collaborator; may fall outside Role
    display_name: Optional[str] = None
