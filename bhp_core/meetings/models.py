# bhp_core/meetings/models.py
from __future__ import annotations

from django.conf import settings
from django.db import models

from bhp_core.common.models import UUIDModel
from bhp_core.iam.gate import FacilityScope

MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 180
DEFAULT_DURATION_MINUTES = 30


class MeetingStatus(models.TextChoices):
    SCHEDULED = "SCHEDULED", "Scheduled"
    IN_PROGRESS = "IN_PROGRESS", "In progress"
    COMPLETED = "COMPLETED", "Completed"
    CANCELLED = "CANCELLED", "Cancelled"


class Meeting(UUIDModel):
    """
    A video meeting the BHP schedules with one of its facilities.

    The facility's BHRF may read it; only the BHP creates, edits, starts and
    ends it. Deleting cancels.
    """
    facility = models.ForeignKey("facilities.Facility", on_delete=models.CASCADE, related_name="meetings")
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="+")

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    scheduled_at = models.DateTimeField(db_index=True)
    duration_minutes = models.PositiveSmallIntegerField(default=DEFAULT_DURATION_MINUTES)
    meeting_url = models.URLField(max_length=500, blank=True, default="")

    status = models.CharField(
        max_length=16,
        choices=MeetingStatus.choices,
        default=MeetingStatus.SCHEDULED,
        db_index=True,
    )
    started_at = models.DateTimeField(null=True, blank=True)
    ended_at = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "meetings_meeting"
        indexes = [
            models.Index(fields=["facility", "scheduled_at"], name="meeting_facility_time_idx"),
        ]

    def access_scope(self) -> FacilityScope:
        return self.facility.access_scope()

    def __str__(self) -> str:
        return self.title
