from datetime import date, timedelta

import pytest
from django.utils.timezone import now

from bhp_core.compliance.models import (
    Credential,
    Document,
    DocumentStatus,
    Employee,
    EmployeeDocument,
    EmployeeDocumentType,
)
from bhp_core.facilities.models import FacilityApplication
from bhp_core.iam.constants import ApprovalStatus, Role
from bhp_core.intakes.services import IntakeService
from bhp_core.meetings.services import MeetingService
from bhp_core.messaging.models import Message
from bhp_core.messaging.services import MessageService
from bhp_core.notifications import feed as feed_module
from bhp_core.notifications.feed import feed_for, mark_feed_read
from bhp_core.workflow.machine import DocumentStatus as WorkflowStatus

pytestmark = pytest.mark.django_db


def submit_intake(bhrf_actor, facility, name="Jordan Smith"):
    return IntakeService.create(
        actor=bhrf_actor,
        facility_id=facility.id,
        fields={"resident_name": name, "date_of_birth": date(1990, 4, 2)},
        submit=True,
    )


def test_bhp_feed_collects_every_source(user_factory, bhp_user, bhp_actor, bhrf_actor, facility):
    applicant = user_factory("applicant@example.com", role=Role.BHRF, status=ApprovalStatus.PENDING, name="Pat Lee")
    FacilityApplication.objects.create(
        applicant=applicant,
        bhp=bhp_user.bhp_profile,
        facility_name="Desert Bloom",
        facility_address="9 Palm Rd",
    )
    submit_intake(bhrf_actor, facility)
    MessageService.send(actor=bhrf_actor, facility_id=facility.id, content="Inspection uploaded")
    Credential.objects.create(
        bhp=bhp_user.bhp_profile,
        type="LICENSE",
        name="State license",
        file_key="credentials/1/license.pdf",
        expires_at=now() + timedelta(days=10),
    )
    Document.objects.create(
        facility=facility,
        name="Fire inspection",
        type="Inspection",
        status=DocumentStatus.UPLOADED,
        file_key="documents/1/fire.pdf",
        uploaded_at=now(),
    )
    MeetingService.schedule(
        actor=bhp_actor,
        facility_id=facility.id,
        title="Check-in",
        scheduled_at=now() + timedelta(hours=3),
    )

    feed = feed_for(bhp_actor)

    by_type = {item.type: item for item in feed.notifications}
    assert set(by_type) == {"application", "intake", "message", "credential", "document", "meeting"}
    assert by_type["application"].description == "Pat Lee has applied to register Desert Bloom"
    assert by_type["intake"].description == f"Jordan Smith from {facility.name}"
    assert by_type["meeting"].description == f"Check-in with {facility.name}"
    assert by_type["message"].id.startswith("msg-")
    assert feed.unread_message_count == 1
    assert feed.total_count == 6

    stamps = [item.created_at for item in feed.notifications]
    assert stamps == sorted(stamps, reverse=True)


def test_bhrf_feed(bhp_actor, bhrf_actor, facility):
    intake = submit_intake(bhrf_actor, facility)
    IntakeService.decide(
        actor=bhp_actor,
        doc_id=intake.id,
        decision=WorkflowStatus.CONDITIONAL,
        reason="Missing consent forms",
    )
    MessageService.send(actor=bhp_actor, facility_id=facility.id, content="x" * 60)
    Document.objects.create(facility=facility, name="Insurance", type="Other", status=DocumentStatus.REQUESTED)

    employee = Employee.objects.create(facility=facility, first_name="Casey", last_name="Nguyen")
    cpr = EmployeeDocumentType.objects.create(facility=facility, name="CPR")
    EmployeeDocument.objects.create(
        employee=employee,
        document_type=cpr,
        file_key="employee-docs/1/cpr.pdf",
        expires_at=now() - timedelta(days=2),
    )

    feed = feed_for(bhrf_actor)

    by_id = {item.id.rsplit("-", 5)[0]: item for item in feed.notifications}
    assert by_id["intake-decision"].title == "Intake Conditionally Approved"
    assert by_id["intake-decision"].description == "Jordan Smith has been conditionally approved"
    assert by_id["msg"].description.endswith("x" * 50 + "...")
    assert by_id["doc-request"].description == "Please upload: Insurance"
    assert by_id["emp-doc-expired"].description == "Casey Nguyen's CPR has expired"


def test_admin_feed_lists_pending_bhps(user_factory, admin_actor):
    user_factory("new.bhp@example.com", role=Role.BHP, status=ApprovalStatus.PENDING, name="Dr. Chen")

    [item] = feed_for(admin_actor).notifications

    assert item.type == "application"
    assert item.description == "Dr. Chen (new.bhp@example.com) is awaiting approval"


def test_feed_is_capped(monkeypatch, bhrf_actor, bhp_actor, facility):
    monkeypatch.setattr(feed_module, "FEED_LIMIT", 2)
    for i in range(4):
        MessageService.send(actor=bhrf_actor, facility_id=facility.id, content=f"update {i}")

    feed = feed_for(bhp_actor)

    assert len(feed.notifications) == 2
    assert feed.total_count == 4
    assert feed.unread_message_count == 4


def test_unapproved_actor_has_empty_feed(user_factory, as_actor):
    pending = user_factory("waiting@example.com", role=Role.BHP, status=ApprovalStatus.PENDING)

    feed = feed_for(as_actor(pending))

    assert feed.notifications == []
    assert feed.total_count == 0


def test_mark_read_only_touches_messages(bhp_actor, bhrf_actor, facility):
    first = MessageService.send(actor=bhrf_actor, facility_id=facility.id, content="one")
    second = MessageService.send(actor=bhrf_actor, facility_id=facility.id, content="two")

    updated = mark_feed_read(
        actor=bhp_actor,
        notification_ids=[f"msg-{first.id}", "msg-not-a-uuid", f"doc-{second.id}"],
        type="message",
    )

    assert updated == 1
    assert Message.objects.get(id=first.id).read_at is not None
    assert Message.objects.get(id=second.id).read_at is None
    assert mark_feed_read(actor=bhp_actor, notification_ids=[f"msg-{second.id}"], type="intake") == 0


# ----------------------------
# HTTP
# ----------------------------
def test_feed_and_mark_read_over_http(client_for, bhp_user, bhrf_actor, facility):
    message = MessageService.send(actor=bhrf_actor, facility_id=facility.id, content="hello")
    client = client_for(bhp_user)

    res = client.get("/api/v1/notifications/")
    assert res.status_code == 200
    assert res.data["unread_message_count"] == 1
    assert res.data["notifications"][0]["id"] == f"msg-{message.id}"

    marked = client.post(
        "/api/v1/notifications/read/",
        {"notification_ids": [f"msg-{message.id}"], "type": "message"},
        format="json",
    )
    assert marked.status_code == 200
    assert marked.data == {"success": True, "updated": 1}
    assert client.get("/api/v1/notifications/").data["unread_message_count"] == 0


def test_mark_read_validates_body(client_for, bhp_user):
    res = client_for(bhp_user).post(
        "/api/v1/notifications/read/",
        {"notification_ids": [], "type": "unknown"},
        format="json",
    )

    assert res.status_code == 400
    assert set(res.data["error"]["details"]) == {"notification_ids", "type"}
