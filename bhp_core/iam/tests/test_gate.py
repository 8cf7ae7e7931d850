import random
import uuid

import pytest
from django.db.models import Q

from bhp_core.iam.actor import AdminActor, BHPActor, BHRFActor, assert_never
from bhp_core.iam.constants import ApprovalStatus
from bhp_core.iam.gate import (
    Action,
    AdminScope,
    Decision,
    FacilityScope,
    OwnAccount,
    ProfileScope,
    can_access,
    facility_q,
)

ALLOW = Decision.ALLOW
DENY = Decision.DENY

BHP_ID = uuid.uuid4()
OTHER_BHP_ID = uuid.uuid4()
FACILITY_ID = uuid.uuid4()
OTHER_FACILITY_ID = uuid.uuid4()


def bhp(status=ApprovalStatus.APPROVED, bhp_id=BHP_ID, user_id=1):
    return BHPActor(user_id=user_id, approval_status=status, bhp_profile_id=bhp_id)


def bhrf(status=ApprovalStatus.APPROVED, facility_id=FACILITY_ID, user_id=2):
    return BHRFActor(user_id=user_id, approval_status=status, bhrf_profile_id=uuid.uuid4(), facility_id=facility_id)


def admin(status=ApprovalStatus.APPROVED, user_id=3):
    return AdminActor(user_id=user_id, approval_status=status)


OWN_FACILITY = FacilityScope(facility_id=FACILITY_ID, bhp_id=BHP_ID)
OTHER_FACILITY = FacilityScope(facility_id=OTHER_FACILITY_ID, bhp_id=OTHER_BHP_ID)
FACILITY_RECORD = FacilityScope(facility_id=FACILITY_ID, bhp_id=BHP_ID, bhrf_read_only=True)


# ----------------------------
# Unapproved accounts
# ----------------------------
@pytest.mark.parametrize("status", [ApprovalStatus.PENDING, ApprovalStatus.REJECTED])
@pytest.mark.parametrize("make_actor", [bhp, bhrf, admin])
def test_unapproved_actor_may_only_view_status_and_sign_out(status, make_actor):
    actor = make_actor(status=status)
    own = OwnAccount(user_id=actor.user_id)

    assert can_access(actor, Action.VIEW_OWN_STATUS, own) == ALLOW
    assert can_access(actor, Action.SIGN_OUT, own) == ALLOW
    assert can_access(actor, Action.VIEW_OWN_STATUS, OwnAccount(user_id=999)) == DENY
    assert can_access(actor, Action.UPDATE, own) == DENY


def test_unapproved_actor_is_denied_everything_else_randomized():
    rng = random.Random(20240601)
    # anything that is not the actor's own account
    targets = [OWN_FACILITY, OTHER_FACILITY, FACILITY_RECORD, ProfileScope(bhp_id=BHP_ID), AdminScope(), None]

    for _ in range(500):
        actor = rng.choice([bhp, bhrf, admin])(status=rng.choice([ApprovalStatus.PENDING, ApprovalStatus.REJECTED]))
        action = rng.choice(list(Action))
        target = rng.choice(targets)
        assert can_access(actor, action, target) == DENY, (actor, action, target)


# ----------------------------
# Approved accounts
# ----------------------------
@pytest.mark.parametrize(
    "actor, action, target, expected",
    [
        # BHP owns the facility chain
        (bhp(), Action.READ, OWN_FACILITY, ALLOW),
        (bhp(), Action.DECIDE, OWN_FACILITY, ALLOW),
        (bhp(), Action.DELETE, OWN_FACILITY, ALLOW),
        (bhp(), Action.UPDATE, FACILITY_RECORD, ALLOW),
        (bhp(), Action.READ, OTHER_FACILITY, DENY),
        (bhp(bhp_id=None), Action.READ, OWN_FACILITY, DENY),
        # BHRF is bound to its one facility
        (bhrf(), Action.READ, OWN_FACILITY, ALLOW),
        (bhrf(), Action.SUBMIT, OWN_FACILITY, ALLOW),
        (bhrf(), Action.READ, FACILITY_RECORD, ALLOW),
        (bhrf(), Action.UPDATE, FACILITY_RECORD, DENY),
        (bhrf(), Action.READ, OTHER_FACILITY, DENY),
        (bhrf(facility_id=None), Action.READ, OWN_FACILITY, DENY),
        # profile-level rows belong to the BHP alone
        (bhp(), Action.UPDATE, ProfileScope(bhp_id=BHP_ID), ALLOW),
        (bhp(), Action.READ, ProfileScope(bhp_id=OTHER_BHP_ID), DENY),
        (bhrf(), Action.READ, ProfileScope(bhp_id=BHP_ID), DENY),
        # admins review users and read aggregates only
        (admin(), Action.REVIEW_USERS, None, ALLOW),
        (admin(), Action.VIEW_ADMIN, AdminScope(), ALLOW),
        (admin(), Action.READ, AdminScope(), ALLOW),
        (admin(), Action.READ, OWN_FACILITY, DENY),
        (admin(), Action.UPDATE, ProfileScope(bhp_id=BHP_ID), DENY),
        (bhp(), Action.REVIEW_USERS, AdminScope(), DENY),
        (bhrf(), Action.VIEW_ADMIN, AdminScope(), DENY),
        # own account
        (bhp(), Action.UPDATE, OwnAccount(user_id=1), ALLOW),
        (bhp(), Action.UPDATE, OwnAccount(user_id=2), DENY),
        # no target
        (bhp(), Action.READ, None, DENY),
        (bhrf(), Action.CREATE, None, DENY),
    ],
)
def test_gate_matrix(actor, action, target, expected):
    assert can_access(actor, action, target) == expected


def test_gate_is_deterministic():
    actor = bhrf()
    decisions = {can_access(actor, Action.UPDATE, OWN_FACILITY) for _ in range(20)}
    assert decisions == {ALLOW}


def test_assert_never_rejects_unknown_variants():
    with pytest.raises(TypeError):
        assert_never(object())


# ----------------------------
# List filter
# ----------------------------
def test_facility_q_for_each_actor():
    assert facility_q(bhp()) == Q(facility__bhp_id=BHP_ID)
    assert facility_q(bhrf()) == Q(facility_id=FACILITY_ID)
    assert facility_q(bhp(), field=None) == Q(bhp_id=BHP_ID)
    assert facility_q(bhrf(), field="employee__facility") == Q(employee__facility_id=FACILITY_ID)

    empty = Q(pk__in=[])
    assert facility_q(admin()) == empty
    assert facility_q(bhp(status=ApprovalStatus.PENDING)) == empty
    assert facility_q(bhrf(facility_id=None)) == empty
