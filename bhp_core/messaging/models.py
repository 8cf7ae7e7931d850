# bhp_core/messaging/models.py
from __future__ import annotations

from django.conf import settings
from django.db import models

from bhp_core.common.models import UUIDModel
from bhp_core.iam.gate import FacilityScope

MESSAGE_MAX_LENGTH = 5000


class Message(UUIDModel):
    """
    A message in a facility's thread between its BHP and its BHRF.

    read_at is set when someone other than the sender marks it read.
    """
    facility = models.ForeignKey("facilities.Facility", on_delete=models.CASCADE, related_name="messages")
    sender = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="sent_messages")

    content = models.TextField()
    # optional pointer to what the message is about, e.g. ("Intake", "<uuid>")
    linked_type = models.CharField(max_length=64, blank=True, default="")
    linked_id = models.CharField(max_length=64, blank=True, default="")

    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "messaging_message"
        indexes = [
            models.Index(fields=["facility", "created_at"], name="message_facility_time_idx"),
            models.Index(fields=["facility", "read_at"], name="message_facility_read_idx"),
        ]

    def access_scope(self) -> FacilityScope:
        return self.facility.member_scope()
