# Pydantic models for Commands
import datetime
import uuid
from typing import List, Optional

from pydantic import BaseModel, Field

from court_case_service.app.service.models import (
    CasePriority, CaseStatus, CaseType, CourtType, HearingType, OrderType, PartyRole,
)


class BaseCommand(BaseModel):
    command_id: str = Field(default_factory=lambda: str(uuid.uuid4()))


class PartyData(BaseModel):
    user_id: str
    role: PartyRole
    assigned_lawyer_id: Optional[str] = None
    is_main_party: bool = False


class CaseRegistrationData(BaseModel):
    # Required fields are checked by the handler so a missing one surfaces as a
    # domain ValidationError rather than a request schema error.
    title: Optional[str] = None
    description: Optional[str] = None
    case_type: Optional[CaseType] = None
    court_type: Optional[CourtType] = None
    priority: CasePriority = CasePriority.NORMAL
    parties: List[PartyData] = Field(default_factory=list)
    assigned_judge: Optional[str] = None
    court_number: Optional[str] = None
    cause_of_action: Optional[str] = Field(default=None, max_length=2000)
    relief_sought: Optional[str] = Field(default=None, max_length=2000)
    court_fees: float = Field(default=0, ge=0)
    dispute_amount: Optional[float] = Field(default=None, ge=0)
    tags: List[str] = Field(default_factory=list)


class RegisterCaseCommand(BaseCommand, CaseRegistrationData):
    pass


class AssignJudgeCommand(BaseCommand):
    case_id: str
    judge_id: str
    court_number: Optional[str] = None


class ScheduleHearingCommand(BaseCommand):
    case_id: str
    hearing_date: datetime.date
    hearing_time: str
    hearing_type: HearingType
    court_room: str
    remarks: Optional[str] = None


class AddCaseOrderCommand(BaseCommand):
    case_id: str
    order_type: OrderType
    order_text: str = Field(min_length=1)


class UpdateCaseStatusCommand(BaseCommand):
    case_id: str
    status: CaseStatus
    remarks: Optional[str] = None
