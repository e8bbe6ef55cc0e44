# Pydantic models for Kafka message structures
import datetime
import uuid
from typing import Optional

from pydantic import BaseModel, Field


class CaseEventMessage(BaseModel):
    """A committed case history entry, published for downstream notification delivery."""
    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    case_id: str
    case_number: Optional[str] = None
    action: str # CASE_REGISTERED, JUDGE_ASSIGNED, HEARING_SCHEDULED, ORDER_PASSED, STATUS_UPDATED
    action_by: str
    action_date: datetime.datetime
    description: str
    status: str # Case status after the action
    case_version: int
