from datetime import date, timedelta

import pytest
from django.utils.timezone import now

from bhp_core.compliance.models import Credential, Document, DocumentStatus
from bhp_core.facilities.models import FacilityApplication
from bhp_core.iam.constants import ApprovalStatus, Role
from bhp_core.intakes.services import IntakeService
from bhp_core.messaging.services import MessageService
from bhp_core.notifications.services import badge_counts, urgent_for

pytestmark = pytest.mark.django_db


@pytest.fixture
def make_applications(user_factory):
    def make(bhp_user, n):
        for i in range(n):
            applicant = user_factory(f"applicant{i}@example.com", role=Role.BHRF, status=ApprovalStatus.PENDING)
            FacilityApplication.objects.create(
                applicant=applicant,
                bhp=bhp_user.bhp_profile,
                facility_name=f"House {i}",
                facility_address=f"{i} Oak Ave",
            )

    return make


def post_messages(actor, facility, n):
    for i in range(n):
        MessageService.send(actor=actor, facility_id=facility.id, content=f"update {i}")


def test_three_pending_applications_make_one_warning(make_applications, bhp_user, bhp_actor):
    make_applications(bhp_user, 3)

    notifications = urgent_for(bhp_actor)

    assert [n.as_dict() for n in notifications] == [
        {
            "id": "pending-applications",
            "severity": "warning",
            "message": "You have 3 pending facility applications awaiting review.",
            "link": "/bhp/applications",
            "link_text": "Review now",
        }
    ]


def test_expired_credentials_are_urgent(bhp_user, bhp_actor):
    Credential.objects.create(
        bhp=bhp_user.bhp_profile,
        type="LICENSE",
        name="License",
        file_key="credentials/1/1-license.pdf",
        expires_at=now() - timedelta(days=1),
    )
    Credential.objects.create(
        bhp=bhp_user.bhp_profile,
        type="RESUME",
        name="Resume",
        file_key="credentials/1/2-resume.pdf",
        no_expiration=True,
    )

    [notification] = urgent_for(bhp_actor)

    assert notification.id == "expired-credentials"
    assert notification.severity == "urgent"
    assert notification.message == "You have 1 expired credential that needs immediate attention."


@pytest.mark.parametrize("unread, expected", [(5, []), (6, ["unread-messages"])])
def test_unread_messages_threshold_for_bhp(bhp_actor, bhrf_actor, facility, unread, expected):
    post_messages(bhrf_actor, facility, unread)

    assert [n.id for n in urgent_for(bhp_actor)] == expected


def test_bhrf_rules_in_declaration_order(bhp_actor, bhrf_actor, facility):
    reference = now()
    Document.objects.create(
        facility=facility,
        name="Fire inspection",
        type="Inspection",
        status=DocumentStatus.UPLOADED,
        file_key="documents/1/fire.pdf",
        expires_at=reference + timedelta(days=3),
    )
    Document.objects.create(
        facility=facility,
        name="Occupancy permit",
        type="Permit",
        status=DocumentStatus.UPLOADED,
        file_key="documents/1/permit.pdf",
        expires_at=reference + timedelta(days=20),
    )
    for name in ("Insurance", "Staff roster"):
        Document.objects.create(facility=facility, name=name, type="Other", status=DocumentStatus.REQUESTED)
    post_messages(bhp_actor, facility, 1)

    notifications = urgent_for(bhrf_actor, now=reference)

    assert [(n.id, n.severity) for n in notifications] == [
        ("requested-docs", "warning"),
        ("expiring-docs", "urgent"),
        ("unread-messages-bhrf", "info"),
    ]
    assert notifications[0].message == "Your BHP has requested 2 documents."
    assert notifications[1].message == "1 document will expire within 7 days."
    assert notifications[2].message == "You have 1 unread message from your BHP."


def test_admin_sees_pending_bhps(user_factory, admin_actor):
    user_factory("new.bhp@example.com", role=Role.BHP, status=ApprovalStatus.PENDING)
    user_factory("rejected.bhp@example.com", role=Role.BHP, status=ApprovalStatus.REJECTED)

    [notification] = urgent_for(admin_actor)

    assert notification.id == "pending-bhps"
    assert notification.message == "1 BHP registration awaiting approval."


def test_unapproved_actor_gets_nothing(user_factory, as_actor, make_applications):
    pending_bhp = user_factory("waiting@example.com", role=Role.BHP, status=ApprovalStatus.PENDING)
    make_applications(pending_bhp, 2)

    actor = as_actor(pending_bhp)

    assert urgent_for(actor) == []
    assert set(badge_counts(actor).values()) == {0}


def test_nothing_to_report_is_empty(bhp_actor, bhrf_actor, admin_actor):
    for actor in (bhp_actor, bhrf_actor, admin_actor):
        assert urgent_for(actor) == []


# ----------------------------
# HTTP
# ----------------------------
def test_urgent_endpoint(client_for, make_applications, bhp_user):
    make_applications(bhp_user, 1)

    res = client_for(bhp_user).get("/api/v1/notifications/urgent/")

    assert res.status_code == 200
    assert res.data["notifications"][0]["message"] == "You have 1 pending facility application awaiting review."


def test_counts_endpoint(client_for, bhp_user, bhrf_user, bhrf_actor, facility):
    IntakeService.create(
        actor=bhrf_actor,
        facility_id=facility.id,
        fields={"resident_name": "Jordan Smith", "date_of_birth": date(1990, 4, 2)},
        submit=True,
    )
    post_messages(bhrf_actor, facility, 2)

    res = client_for(bhp_user).get("/api/v1/notifications/counts/")

    assert res.status_code == 200
    assert res.data == {"messages": 2, "applications": 0, "intakes": 1, "asam": 0, "documents": 0}

    bhrf_counts = client_for(bhrf_user).get("/api/v1/notifications/counts/").data
    assert bhrf_counts["messages"] == 0


def test_pending_account_cannot_poll(client_for, user_factory):
    pending = user_factory("waiting@example.com", role=Role.BHP, status=ApprovalStatus.PENDING)

    assert client_for(pending).get("/api/v1/notifications/urgent/").status_code == 403
