import pytest
from rest_framework.exceptions import PermissionDenied, ValidationError

from bhp_core.audit.models import AuditEvent
from bhp_core.common.api.exceptions import InvalidTransition
from bhp_core.iam.constants import ApprovalStatus, Role
from bhp_core.iam.services.approval import ApprovalService

pytestmark = pytest.mark.django_db


@pytest.fixture
def pending_bhp(user_factory):
    return user_factory("applicant@example.com", role=Role.BHP, status=ApprovalStatus.PENDING, name="Sam Lee")


def test_admin_approves_pending_bhp(admin_actor, admin_user, pending_bhp, mailoutbox, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        profile = ApprovalService.decide_user(
            actor=admin_actor,
            profile_id=pending_bhp.profile.id,
            decision=ApprovalStatus.APPROVED,
        )

    profile.refresh_from_db()
    assert profile.approval_status == ApprovalStatus.APPROVED
    assert profile.approved_by_id == admin_user.id
    assert profile.approved_at is not None

    event = AuditEvent.objects.get(action="USER_APPROVED")
    assert event.actor_user_id == admin_user.id
    assert event.entity_id == str(pending_bhp.id)

    assert len(mailoutbox) == 1
    assert mailoutbox[0].to == ["applicant@example.com"]
    assert "approved" in mailoutbox[0].subject


def test_second_decision_is_invalid_transition(admin_actor, pending_bhp):
    ApprovalService.decide_user(actor=admin_actor, profile_id=pending_bhp.profile.id, decision=ApprovalStatus.APPROVED)

    with pytest.raises(InvalidTransition):
        ApprovalService.decide_user(
            actor=admin_actor,
            profile_id=pending_bhp.profile.id,
            decision=ApprovalStatus.REJECTED,
            rejection_reason="Changed my mind about this one",
        )

    assert AuditEvent.objects.filter(action__in=["USER_APPROVED", "USER_REJECTED"]).count() == 1


def test_short_rejection_reason_fails_before_any_write(admin_actor, pending_bhp):
    with pytest.raises(ValidationError):
        ApprovalService.decide_user(
            actor=admin_actor,
            profile_id=pending_bhp.profile.id,
            decision=ApprovalStatus.REJECTED,
            rejection_reason="too short",
        )

    pending_bhp.profile.refresh_from_db()
    assert pending_bhp.profile.approval_status == ApprovalStatus.PENDING
    assert pending_bhp.profile.approved_by_id is None
    assert not AuditEvent.objects.filter(action="USER_REJECTED").exists()


def test_rejection_stores_reason(admin_actor, pending_bhp):
    profile = ApprovalService.decide_user(
        actor=admin_actor,
        profile_id=pending_bhp.profile.id,
        decision=ApprovalStatus.REJECTED,
        rejection_reason="  License number could not be verified  ",
    )

    assert profile.approval_status == ApprovalStatus.REJECTED
    assert profile.rejection_reason == "License number could not be verified"


def test_non_admin_cannot_decide(bhp_actor, pending_bhp):
    with pytest.raises(PermissionDenied):
        ApprovalService.decide_user(actor=bhp_actor, profile_id=pending_bhp.profile.id, decision=ApprovalStatus.APPROVED)


def test_admin_profiles_are_not_reviewable(admin_actor, user_factory):
    other_admin = user_factory("second.admin@example.com", role=Role.ADMIN, status=ApprovalStatus.PENDING)

    with pytest.raises(PermissionDenied):
        ApprovalService.decide_user(
            actor=admin_actor,
            profile_id=other_admin.profile.id,
            decision=ApprovalStatus.APPROVED,
        )


# ----------------------------
# HTTP
# ----------------------------
def test_review_queue_filters_by_status(client_for, admin_user, bhp_user, pending_bhp):
    res = client_for(admin_user).get("/api/v1/admin/users/", {"approval_status": ApprovalStatus.PENDING})

    assert res.status_code == 200
    assert [row["email"] for row in res.data["results"]] == ["applicant@example.com"]


def test_double_approval_over_http_returns_400(client_for, admin_user, pending_bhp):
    client = client_for(admin_user)
    url = f"/api/v1/admin/users/{pending_bhp.profile.id}/approval/"

    first = client.post(url, {"status": ApprovalStatus.APPROVED}, format="json")
    second = client.post(url, {"status": ApprovalStatus.APPROVED}, format="json")

    assert first.status_code == 200
    assert first.data["approval_status"] == ApprovalStatus.APPROVED
    assert second.status_code == 400
    assert second.data["error"]["code"] == "invalid_transition"


def test_review_queue_is_admin_only(client_for, bhp_user):
    res = client_for(bhp_user).get("/api/v1/admin/users/")

    assert res.status_code == 403
    assert res.data["error"]["code"] == "permission_denied"
