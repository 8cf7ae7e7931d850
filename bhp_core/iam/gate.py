# bhp_core/iam/gate.py
"""
Authorization gate.

can_access(actor, action, target) is a pure decision. Rules are evaluated in
order and the first match wins:

1. actor not APPROVED -> only VIEW_OWN_STATUS / SIGN_OUT on its own account
   (an approved actor may act on its own account in general)
2. ADMIN -> user review and read-only admin views; nothing BHP/BHRF scoped
3. facility-scoped target -> BHP owning the facility, or the facility's BHRF
4. BHP-profile-scoped target -> that BHP only
5. DENY
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union
from uuid import UUID

from django.db.models import Q

from bhp_core.iam.actor import Actor, AdminActor, BHPActor, BHRFActor, assert_never


class Action(str, Enum):
    VIEW_OWN_STATUS = "view_own_status"
    SIGN_OUT = "sign_out"
    REVIEW_USERS = "review_users"
    VIEW_ADMIN = "view_admin"
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SUBMIT = "submit"
    DECIDE = "decide"


class Decision(str, Enum):
    ALLOW = "ALLOW"
    DENY = "DENY"


SELF_SERVICE_ACTIONS = frozenset({Action.VIEW_OWN_STATUS, Action.SIGN_OUT})
ADMIN_ACTIONS = frozenset({Action.REVIEW_USERS, Action.VIEW_ADMIN})


@dataclass(frozen=True)
class OwnAccount:
    user_id: int


@dataclass(frozen=True)
class AdminScope:
    """Aggregate admin views (user review queue, audit log)."""


@dataclass(frozen=True)
class FacilityScope:
    facility_id: UUID
    bhp_id: UUID
    # The Facility record itself: its BHRF may read but never mutate it.
    bhrf_read_only: bool = False


@dataclass(frozen=True)
class ProfileScope:
    bhp_id: UUID


Target = Union[OwnAccount, AdminScope, FacilityScope, ProfileScope]


def _allow(ok: bool) -> Decision:
    return Decision.ALLOW if ok else Decision.DENY


def can_access(actor: Actor, action: Action, target: Optional[Target]) -> Decision:
    # 1) approval gates everything
    if not actor.is_approved:
        return _allow(
            action in SELF_SERVICE_ACTIONS
            and isinstance(target, OwnAccount)
            and target.user_id == actor.user_id
        )

    if isinstance(target, OwnAccount):
        return _allow(target.user_id == actor.user_id)

    # 2) admins review users and read aggregates, nothing else
    if isinstance(actor, AdminActor):
        if action == Action.REVIEW_USERS:
            return Decision.ALLOW
        if action in {Action.VIEW_ADMIN, Action.READ} and isinstance(target, AdminScope):
            return Decision.ALLOW
        return Decision.DENY

    # 3) facility ownership chain
    if isinstance(target, FacilityScope):
        if isinstance(actor, BHPActor):
            return _allow(actor.bhp_profile_id is not None and target.bhp_id == actor.bhp_profile_id)
        if isinstance(actor, BHRFActor):
            if target.bhrf_read_only and action != Action.READ:
                return Decision.DENY
            return _allow(actor.facility_id is not None and target.facility_id == actor.facility_id)
        assert_never(actor)

    # 4) BHP-level entities
    if isinstance(target, ProfileScope):
        if isinstance(actor, BHPActor):
            return _allow(actor.bhp_profile_id is not None and target.bhp_id == actor.bhp_profile_id)
        return Decision.DENY

    # 5) default
    return Decision.DENY


def facility_q(actor: Actor, *, field: Optional[str] = "facility") -> Q:
    """
    List form of rule 3: a filter selecting exactly the rows whose facility the
    actor may access. Returns an always-false filter for everyone else.

    Pass field=None when filtering the Facility table itself.
    """
    bhp_lookup = f"{field}__bhp_id" if field else "bhp_id"
    facility_lookup = f"{field}_id" if field else "id"
    if not actor.is_approved:
        return Q(pk__in=[])
    if isinstance(actor, BHPActor):
        if actor.bhp_profile_id is None:
            return Q(pk__in=[])
        return Q(**{bhp_lookup: actor.bhp_profile_id})
    if isinstance(actor, BHRFActor):
        if actor.facility_id is None:
            return Q(pk__in=[])
        return Q(**{facility_lookup: actor.facility_id})
    if isinstance(actor, AdminActor):
        return Q(pk__in=[])
    assert_never(actor)
