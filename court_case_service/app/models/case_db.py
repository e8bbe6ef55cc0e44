import datetime
import uuid
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from court_case_service.app.service.models import (
    CasePriority, CaseStatus, CaseType, CourtType, HearingStatus, HearingType,
    HistoryAction, OrderType, PartyRole,
)


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.UTC)


def _new_id() -> str:
    return str(uuid.uuid4().hex)


class PartyDB(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    user_id: str # Litigant, role 'user'
    role: PartyRole
    assigned_lawyer_id: Optional[str] = None # Role 'lawyer'
    is_main_party: bool = False


class HearingAttendeeDB(BaseModel):
    user_id: str
    attended: bool = False
    role: Optional[str] = None # petitioner, respondent, lawyer, witness


class HearingDB(BaseModel):
    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    id: str = Field(default_factory=_new_id)
    hearing_date: datetime.datetime
    hearing_time: str
    hearing_type: HearingType
    court_room: str
    judge_id: str
    status: HearingStatus = HearingStatus.SCHEDULED
    remarks: Optional[str] = None
    adjournment_reason: Optional[str] = None
    attendees: List[HearingAttendeeDB] = Field(default_factory=list)
    created_at: datetime.datetime = Field(default_factory=utc_now)


class NextHearingDB(BaseModel):
    date: datetime.datetime
    time: str
    court_room: str
    purpose: str


class CaseOrderDB(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    id: str = Field(default_factory=_new_id)
    order_date: datetime.datetime = Field(default_factory=utc_now)
    order_type: OrderType
    order_text: str
    passed_by: str


class CaseHistoryEntryDB(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    action: HistoryAction
    action_by: str
    action_date: datetime.datetime
    description: str


class CaseDB(BaseModel):
    """
    The case aggregate. Parties, hearings, orders and history are embedded and
    owned by the case; users, lawyers and judges are referenced by id only.

    Mutation methods change the in-memory aggregate and append exactly one
    history entry each; persisting the result is the caller's job.
    """
    model_config = ConfigDict(use_enum_values=True, validate_assignment=True, validate_default=True)

    id: str = Field(default_factory=_new_id)
    case_number: Optional[str] = None # Allocated once at registration
    registration_date: datetime.datetime = Field(default_factory=utc_now)
    registered_by: str

    title: str = Field(max_length=500)
    description: str = Field(max_length=5000)
    case_type: CaseType
    court_type: CourtType
    priority: CasePriority = CasePriority.NORMAL
    status: CaseStatus = CaseStatus.REGISTERED

    parties: List[PartyDB] = Field(default_factory=list)
    assigned_judge: Optional[str] = None
    court_number: Optional[str] = None

    cause_of_action: Optional[str] = Field(default=None, max_length=2000)
    relief_sought: Optional[str] = Field(default=None, max_length=2000)
    court_fees: float = 0
    dispute_amount: Optional[float] = None
    tags: List[str] = Field(default_factory=list)

    hearings: List[HearingDB] = Field(default_factory=list)
    next_hearing: Optional[NextHearingDB] = None
    orders: List[CaseOrderDB] = Field(default_factory=list)
    case_history: List[CaseHistoryEntryDB] = Field(default_factory=list)

    is_disposed: bool = False
    disposal_date: Optional[datetime.datetime] = None
    is_active: bool = True

    version: int = 1 # Optimistic concurrency control
    created_at: datetime.datetime = Field(default_factory=utc_now)
    updated_at: datetime.datetime = Field(default_factory=utc_now)

    # --- Queries ---

    def petitioners(self) -> List[PartyDB]:
        return [p for p in self.parties if p.role == PartyRole.PETITIONER]

    def respondents(self) -> List[PartyDB]:
        return [p for p in self.parties if p.role == PartyRole.RESPONDENT]

    def lawyer_ids(self) -> List[str]:
        return [p.assigned_lawyer_id for p in self.parties if p.assigned_lawyer_id]

    def party_user_ids(self) -> List[str]:
        return [p.user_id for p in self.parties]

    def is_party(self, user_id: str) -> bool:
        return user_id in self.party_user_ids()

    def is_represented_by(self, lawyer_id: str) -> bool:
        return lawyer_id in self.lawyer_ids()

    # --- Mutations ---

    def add_history_entry(
        self, action: HistoryAction, action_by: str, description: str, now: datetime.datetime
    ) -> CaseHistoryEntryDB:
        entry = CaseHistoryEntryDB(action=action, action_by=action_by, action_date=now, description=description)
        self.case_history.append(entry)
        self.updated_at = now
        return entry

    def assign_judge(
        self, judge_id: str, court_number: Optional[str], actor_id: str, judge_name: str, now: datetime.datetime
    ) -> CaseHistoryEntryDB:
        self.assigned_judge = judge_id
        self.court_number = court_number
        self.status = CaseStatus.ADMITTED
        return self.add_history_entry(
            HistoryAction.JUDGE_ASSIGNED, actor_id, f"Judge {judge_name} assigned to case", now
        )

    def schedule_hearing(self, hearing: HearingDB, actor_id: str, now: datetime.datetime) -> CaseHistoryEntryDB:
        self.hearings.append(hearing)
        # Last scheduled wins, regardless of how its date compares to earlier hearings.
        self.next_hearing = NextHearingDB(
            date=hearing.hearing_date,
            time=hearing.hearing_time,
            court_room=hearing.court_room,
            purpose=hearing.hearing_type,
        )
        self.status = CaseStatus.PENDING
        return self.add_history_entry(
            HistoryAction.HEARING_SCHEDULED,
            actor_id,
            f"Hearing scheduled for {hearing.hearing_date.date().isoformat()} at {hearing.hearing_time}",
            now,
        )

    def add_order(self, order: CaseOrderDB, now: datetime.datetime) -> CaseHistoryEntryDB:
        self.orders.append(order)
        return self.add_history_entry(
            HistoryAction.ORDER_PASSED, order.passed_by, f"{str(order.order_type).capitalize()} order passed", now
        )

    def change_status(
        self, new_status: CaseStatus, actor_id: str, remarks: Optional[str], now: datetime.datetime
    ) -> CaseHistoryEntryDB:
        old_status = self.status
        self.status = new_status
        if self.status == CaseStatus.DISPOSED:
            self.is_disposed = True
            self.disposal_date = now
        description = f"Case status changed from {old_status} to {self.status}"
        if remarks:
            description += f": {remarks}"
        return self.add_history_entry(HistoryAction.STATUS_UPDATED, actor_id, description, now)
