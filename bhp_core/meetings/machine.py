# bhp_core/meetings/machine.py
"""
Meeting lifecycle.

    SCHEDULED -> IN_PROGRESS -> COMPLETED
    SCHEDULED | IN_PROGRESS -> CANCELLED
    CANCELLED -> SCHEDULED  (restored by an edit)

A meeting may also be ended without having been started.
"""
from __future__ import annotations

from enum import Enum

from bhp_core.common.api.exceptions import InvalidTransition
from bhp_core.meetings.models import MeetingStatus

LIVE_STATUSES = frozenset({MeetingStatus.SCHEDULED, MeetingStatus.IN_PROGRESS})


class MeetingEvent(str, Enum):
    START = "start"
    END = "end"
    CANCEL = "cancel"
    RESTORE = "restore"


_TRANSITIONS: dict[MeetingEvent, tuple[frozenset, MeetingStatus]] = {
    MeetingEvent.START: (frozenset({MeetingStatus.SCHEDULED}), MeetingStatus.IN_PROGRESS),
    MeetingEvent.END: (LIVE_STATUSES, MeetingStatus.COMPLETED),
    MeetingEvent.CANCEL: (LIVE_STATUSES, MeetingStatus.CANCELLED),
    MeetingEvent.RESTORE: (frozenset({MeetingStatus.CANCELLED}), MeetingStatus.SCHEDULED),
}


def next_meeting_status(*, current: str, event: MeetingEvent) -> str:
    allowed, target = _TRANSITIONS[event]
    if current not in allowed:
        raise InvalidTransition(f"Meeting cannot {event.value} from {current}.")
    return target
