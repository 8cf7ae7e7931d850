# bhp_core/iam/models.py
import uuid

from django.conf import settings
from django.db import models

from bhp_core.common.models import TimeStampedModel
from bhp_core.iam.constants import ApprovalStatus, Role


class UserProfile(TimeStampedModel):
    """
    BHP Connect account anchored to Django's AUTH_USER_MODEL.

    Carries the role and the registration approval state. approval_status is
    only ever changed by an ADMIN through ApprovalService; accounts are never
    deleted (is_active=False at most).
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")
    name = models.CharField(max_length=255)
    role = models.CharField(max_length=16, choices=Role.choices, db_index=True)

    approval_status = models.CharField(
        max_length=16,
        choices=ApprovalStatus.choices,
        default=ApprovalStatus.PENDING,
        db_index=True,
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="+",
        null=True,
        blank=True,
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True, default="")

    # TOTP
    mfa_secret = models.CharField(max_length=64, blank=True, default="")
    mfa_enabled = models.BooleanField(default=False)

    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "iam_user_profile"
        indexes = [
            models.Index(fields=["role", "approval_status"], name="iam_profile_role_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.role}, {self.approval_status})"


class BHPProfile(TimeStampedModel):
    """
    Professional profile of a BHP user. Owns facilities, credentials and BHP-level document categories.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="bhp_profile")
    phone = models.CharField(max_length=32, blank=True, default="")
    address = models.CharField(max_length=255, blank=True, default="")
    bio = models.TextField(blank=True, default="")

    class Meta:
        db_table = "iam_bhp_profile"

    def __str__(self) -> str:
        return f"BHP {self.user.email}"


class BHRFProfile(TimeStampedModel):
    """
    Operator profile of a BHRF user. Created when the facility application is approved;
    links the user to exactly one facility.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="bhrf_profile")
    facility = models.OneToOneField("facilities.Facility", on_delete=models.PROTECT, related_name="bhrf_profile")

    class Meta:
        db_table = "iam_bhrf_profile"

    def __str__(self) -> str:
        return f"BHRF {self.user.email}"
