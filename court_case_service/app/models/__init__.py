from .case_db import (
    CaseDB,
    PartyDB,
    HearingDB,
    HearingAttendeeDB,
    NextHearingDB,
    CaseOrderDB,
    CaseHistoryEntryDB,
)

__all__ = [
    "CaseDB",
    "PartyDB",
    "HearingDB",
    "HearingAttendeeDB",
    "NextHearingDB",
    "CaseOrderDB",
    "CaseHistoryEntryDB",
]
