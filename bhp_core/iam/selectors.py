# bhp_core/iam/selectors.py
from __future__ import annotations

from typing import Optional

from django.db.models import QuerySet

from bhp_core.iam.constants import ApprovalStatus, Role
from bhp_core.iam.models import BHPProfile, UserProfile


def available_bhps() -> QuerySet[BHPProfile]:
    """
    Approved, active BHPs a facility may apply to, sorted by name.
    """
    return (
        BHPProfile.objects.select_related("user", "user__profile")
        .filter(
            user__profile__role=Role.BHP,
            user__profile__approval_status=ApprovalStatus.APPROVED,
            user__profile__is_active=True,
        )
        .order_by("user__profile__name")
    )


def list_user_profiles(
    *,
    role: Optional[str] = None,
    approval_status: Optional[str] = None,
    search: Optional[str] = None,
) -> QuerySet[UserProfile]:
    qs = UserProfile.objects.select_related("user").exclude(role=Role.ADMIN)
    if role:
        qs = qs.filter(role=role)
    if approval_status:
        qs = qs.filter(approval_status=approval_status)
    if search:
        qs = qs.filter(name__icontains=search) | qs.filter(user__email__icontains=search)
    return qs.order_by("-created_at")


def pending_bhp_count() -> int:
    return UserProfile.objects.filter(role=Role.BHP, approval_status=ApprovalStatus.PENDING).count()
