# bhp_core/facilities/models.py
from __future__ import annotations

from django.conf import settings
from django.db import models

from bhp_core.common.models import UUIDModel
from bhp_core.iam.constants import ApprovalStatus
from bhp_core.iam.gate import FacilityScope, ProfileScope


class Facility(UUIDModel):
    """
    A behavioral health residential facility.

    Owned by exactly one BHP; operated by at most one BHRF user (exactly one
    once its application is approved). Only the owning BHP mutates it.
    """
    bhp = models.ForeignKey("iam.BHPProfile", on_delete=models.PROTECT, related_name="facilities")

    name = models.CharField(max_length=255)
    address = models.CharField(max_length=255, blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")

    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "facilities_facility"
        indexes = [
            models.Index(fields=["bhp", "is_active"], name="facility_bhp_active_idx"),
        ]

    def access_scope(self) -> FacilityScope:
        return FacilityScope(facility_id=self.id, bhp_id=self.bhp_id, bhrf_read_only=True)

    def member_scope(self) -> FacilityScope:
        """Scope for rows hanging off this facility; its BHRF may mutate those."""
        return FacilityScope(facility_id=self.id, bhp_id=self.bhp_id)

    def __str__(self) -> str:
        return self.name


class FacilityApplication(UUIDModel):
    """
    A BHRF registrant's request to operate a facility under a chosen BHP.

    Decided once by that BHP. Approval creates the Facility and the
    applicant's BHRFProfile.
    """
    applicant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="facility_applications",
    )
    bhp = models.ForeignKey("iam.BHPProfile", on_delete=models.PROTECT, related_name="facility_applications")

    facility_name = models.CharField(max_length=255)
    facility_address = models.CharField(max_length=255)

    status = models.CharField(
        max_length=16,
        choices=ApprovalStatus.choices,
        default=ApprovalStatus.PENDING,
        db_index=True,
    )
    decided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )
    decided_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, default="")

    facility = models.OneToOneField(
        Facility,
        on_delete=models.SET_NULL,
        related_name="application",
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "facilities_facility_application"
        indexes = [
            models.Index(fields=["bhp", "status"], name="facility_app_bhp_status_idx"),
        ]

    def access_scope(self) -> ProfileScope:
        return ProfileScope(bhp_id=self.bhp_id)

    def __str__(self) -> str:
        return f"{self.facility_name} ({self.status})"
