# bhp_core/iam/actor.py
"""
Explicit actor context.

Views resolve the Actor once per request and pass it down to gates, services,
selectors and the notification aggregator. Nothing below the view layer reads
request state.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, NoReturn, Optional, Union
from uuid import UUID

from rest_framework.exceptions import NotAuthenticated, PermissionDenied

from bhp_core.iam.constants import ApprovalStatus, Role


@dataclass(frozen=True)
class AdminActor:
    role: ClassVar[str] = Role.ADMIN

    user_id: int
    approval_status: str

    @property
    def is_approved(self) -> bool:
        return self.approval_status == ApprovalStatus.APPROVED


@dataclass(frozen=True)
class BHPActor:
    role: ClassVar[str] = Role.BHP

    user_id: int
    approval_status: str
    bhp_profile_id: Optional[UUID]

    @property
    def is_approved(self) -> bool:
        return self.approval_status == ApprovalStatus.APPROVED


@dataclass(frozen=True)
class BHRFActor:
    role: ClassVar[str] = Role.BHRF

    user_id: int
    approval_status: str
    bhrf_profile_id: Optional[UUID]
    # None until the facility application is approved
    facility_id: Optional[UUID]

    @property
    def is_approved(self) -> bool:
        return self.approval_status == ApprovalStatus.APPROVED


Actor = Union[AdminActor, BHPActor, BHRFActor]


def assert_never(value: object) -> NoReturn:
    raise TypeError(f"Unhandled actor variant: {type(value).__name__}")


def actor_for_user(user) -> Actor:
    """
    Build the Actor for an authenticated Django user.

    Superusers without a profile are treated as approved admins so the seed
    account created through createsuperuser can review registrations.
    """
    if not user or not getattr(user, "is_authenticated", False):
        raise NotAuthenticated()

    profile = getattr(user, "profile", None)
    if profile is None:
        if getattr(user, "is_superuser", False):
            return AdminActor(user_id=user.id, approval_status=ApprovalStatus.APPROVED)
        raise PermissionDenied("Forbidden")

    if not profile.is_active:
        raise PermissionDenied("Forbidden")

    if profile.role == Role.ADMIN:
        return AdminActor(user_id=user.id, approval_status=profile.approval_status)

    if profile.role == Role.BHP:
        bhp = getattr(user, "bhp_profile", None)
        return BHPActor(
            user_id=user.id,
            approval_status=profile.approval_status,
            bhp_profile_id=bhp.id if bhp else None,
        )

    if profile.role == Role.BHRF:
        bhrf = getattr(user, "bhrf_profile", None)
        return BHRFActor(
            user_id=user.id,
            approval_status=profile.approval_status,
            bhrf_profile_id=bhrf.id if bhrf else None,
            facility_id=bhrf.facility_id if bhrf else None,
        )

    raise PermissionDenied("Forbidden")


def get_actor(request) -> Actor:
    """
    Resolve (and memoize on the request) the Actor for request.user.
    """
    actor = getattr(request, "_bhp_actor", None)
    if actor is None:
        actor = actor_for_user(getattr(request, "user", None))
        setattr(request, "_bhp_actor", actor)
    return actor
