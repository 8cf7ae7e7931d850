import pytest
from django.contrib.auth import get_user_model
from rest_framework.exceptions import PermissionDenied, ValidationError

from bhp_core.audit.models import AuditEvent
from bhp_core.common.api.exceptions import InvalidTransition
from bhp_core.facilities.models import Facility, FacilityApplication
from bhp_core.facilities.services import FacilityApplicationService
from bhp_core.iam.actor import BHRFActor
from bhp_core.iam.constants import ApprovalStatus, Role
from bhp_core.iam.models import BHRFProfile

pytestmark = pytest.mark.django_db


@pytest.fixture
def applicant(user_factory):
    return user_factory("operator@example.com", role=Role.BHRF, status=ApprovalStatus.PENDING, name="Pat Operator")


@pytest.fixture
def application(applicant, bhp_user):
    return FacilityApplication.objects.create(
        applicant=applicant,
        bhp=bhp_user.bhp_profile,
        facility_name="Desert Bloom",
        facility_address="12 Cactus Rd",
    )


def test_approval_creates_facility_and_links_operator(bhp_actor, bhp_user, application, applicant, as_actor):
    decided = FacilityApplicationService.decide(
        actor=bhp_actor,
        application_id=application.id,
        decision=ApprovalStatus.APPROVED,
    )

    assert decided.status == ApprovalStatus.APPROVED
    assert decided.decided_by_id == bhp_user.id
    facility = Facility.objects.get(id=decided.facility_id)
    assert facility.name == "Desert Bloom"
    assert facility.bhp_id == bhp_user.bhp_profile.id

    assert BHRFProfile.objects.get(user=applicant).facility_id == facility.id
    applicant.profile.refresh_from_db()
    assert applicant.profile.approval_status == ApprovalStatus.APPROVED

    actor = as_actor(applicant)
    assert isinstance(actor, BHRFActor)
    assert actor.is_approved
    assert actor.facility_id == facility.id

    event = AuditEvent.objects.get(action="FACILITY_APPLICATION_APPROVED")
    assert event.details["facility_id"] == str(facility.id)
    assert event.details["applicant_user_id"] == applicant.id


def test_rejection_rejects_the_operator_account(bhp_actor, application, applicant):
    FacilityApplicationService.decide(
        actor=bhp_actor,
        application_id=application.id,
        decision=ApprovalStatus.REJECTED,
        rejection_reason="Facility address is outside our service area",
    )

    application.refresh_from_db()
    applicant.profile.refresh_from_db()
    assert application.status == ApprovalStatus.REJECTED
    assert application.facility is None
    assert applicant.profile.approval_status == ApprovalStatus.REJECTED
    assert applicant.profile.rejection_reason == "Facility address is outside our service area"
    assert not Facility.objects.exists()


def test_short_reason_leaves_application_pending(bhp_actor, application, applicant):
    with pytest.raises(ValidationError):
        FacilityApplicationService.decide(
            actor=bhp_actor,
            application_id=application.id,
            decision=ApprovalStatus.REJECTED,
            rejection_reason="no",
        )

    application.refresh_from_db()
    assert application.status == ApprovalStatus.PENDING
    assert not AuditEvent.objects.exists()


def test_application_is_decided_once(bhp_actor, application):
    FacilityApplicationService.decide(actor=bhp_actor, application_id=application.id, decision=ApprovalStatus.APPROVED)

    with pytest.raises(InvalidTransition):
        FacilityApplicationService.decide(actor=bhp_actor, application_id=application.id, decision=ApprovalStatus.APPROVED)

    assert Facility.objects.count() == 1


def test_only_the_selected_bhp_decides(other_bhp_actor, admin_actor, application):
    for actor in (other_bhp_actor, admin_actor):
        with pytest.raises(PermissionDenied):
            FacilityApplicationService.decide(actor=actor, application_id=application.id, decision=ApprovalStatus.APPROVED)

    application.refresh_from_db()
    assert application.status == ApprovalStatus.PENDING


# ----------------------------
# HTTP
# ----------------------------
def test_bhp_lists_and_decides_over_http(client_for, bhp_user, application):
    client = client_for(bhp_user)

    listed = client.get("/api/v1/facility-applications/", {"status": ApprovalStatus.PENDING})
    assert listed.status_code == 200
    assert [row["id"] for row in listed.data["results"]] == [str(application.id)]

    res = client.post(
        f"/api/v1/facility-applications/{application.id}/decide/",
        {"status": ApprovalStatus.APPROVED},
        format="json",
    )
    assert res.status_code == 200
    assert res.data["status"] == ApprovalStatus.APPROVED
    assert res.data["facility_id"] is not None

    operator = get_user_model().objects.get(email="operator@example.com")
    me = client_for(operator).get("/api/v1/me/")
    assert me.data["user"]["facility_id"] == Facility.objects.get().id


def test_other_bhp_gets_generic_403(client_for, other_bhp_user, application):
    client = client_for(other_bhp_user)

    existing = client.get(f"/api/v1/facility-applications/{application.id}/")
    missing = client.get("/api/v1/facility-applications/00000000-0000-0000-0000-000000000000/")

    assert existing.status_code == missing.status_code == 403
    assert existing.data["error"]["message"] == missing.data["error"]["message"] == "Forbidden"
