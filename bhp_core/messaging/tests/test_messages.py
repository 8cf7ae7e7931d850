import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.exceptions import PermissionDenied

from bhp_core.messaging.models import MESSAGE_MAX_LENGTH, Message
from bhp_core.messaging.selectors import messages_for_actor, unread_for_actor
from bhp_core.messaging.services import MessageService

pytestmark = pytest.mark.django_db


def test_send_and_read_between_bhp_and_facility(bhp_actor, bhrf_actor, facility):
    message = MessageService.send(
        actor=bhp_actor,
        facility_id=facility.id,
        content="  Please upload the fire inspection.  ",
        linked_type="Document",
        linked_id="abc-123",
    )

    assert message.content == "Please upload the fire inspection."
    assert list(unread_for_actor(bhrf_actor)) == [message]
    # own messages never count as unread
    assert list(unread_for_actor(bhp_actor)) == []

    assert MessageService.mark_read(actor=bhrf_actor, message_ids=[message.id]) == 1
    message.refresh_from_db()
    assert message.read_at is not None
    assert MessageService.mark_read(actor=bhrf_actor) == 0


def test_mark_read_without_ids_clears_everything(bhp_actor, bhrf_actor, facility):
    for text in ("one", "two", "three"):
        MessageService.send(actor=bhrf_actor, facility_id=facility.id, content=text)

    assert MessageService.mark_read(actor=bhp_actor) == 3
    assert not unread_for_actor(bhp_actor).exists()


def test_mark_read_ignores_messages_outside_scope(bhp_actor, other_bhp_actor, other_facility, bhrf_actor, facility):
    foreign = MessageService.send(actor=other_bhp_actor, facility_id=other_facility.id, content="hello")

    assert MessageService.mark_read(actor=bhrf_actor, message_ids=[foreign.id]) == 0
    foreign.refresh_from_db()
    assert foreign.read_at is None


@pytest.mark.parametrize("content", ["", "   ", "x" * (MESSAGE_MAX_LENGTH + 1)])
def test_content_length_is_enforced(bhp_actor, facility, content):
    with pytest.raises(DjangoValidationError) as exc:
        MessageService.send(actor=bhp_actor, facility_id=facility.id, content=content)

    assert "content" in exc.value.message_dict
    assert not Message.objects.exists()


def test_longest_message_is_accepted(bhp_actor, facility):
    message = MessageService.send(actor=bhp_actor, facility_id=facility.id, content="x" * MESSAGE_MAX_LENGTH)
    assert len(message.content) == MESSAGE_MAX_LENGTH


def test_other_tenants_cannot_post(other_bhp_actor, other_bhrf_actor, admin_actor, facility):
    for actor in (other_bhp_actor, other_bhrf_actor, admin_actor):
        with pytest.raises(PermissionDenied):
            MessageService.send(actor=actor, facility_id=facility.id, content="hi")


def test_thread_is_scoped_to_the_facility(bhp_actor, bhrf_actor, other_bhrf_actor, facility):
    MessageService.send(actor=bhp_actor, facility_id=facility.id, content="hello")

    assert messages_for_actor(bhrf_actor).count() == 1
    assert messages_for_actor(other_bhrf_actor).count() == 0


# ----------------------------
# HTTP
# ----------------------------
def test_bhrf_posts_to_its_facility_by_default(client_for, bhrf_user, bhp_user, facility):
    res = client_for(bhrf_user).post("/api/v1/messages/", {"content": "Inspection uploaded"}, format="json")

    assert res.status_code == 201
    assert res.data["facility_id"] == facility.id
    assert res.data["sender"]["role"] == "BHRF"

    inbox = client_for(bhp_user)
    listed = inbox.get("/api/v1/messages/", {"facility": str(facility.id)})
    assert listed.data["count"] == 1

    marked = inbox.post("/api/v1/messages/read/", {}, format="json")
    assert marked.status_code == 200
    assert marked.data == {"updated": 1}


def test_bhp_must_name_a_facility(client_for, bhp_user, facility):
    res = client_for(bhp_user).post("/api/v1/messages/", {"content": "hello"}, format="json")

    assert res.status_code == 400
    assert "facility_id" in res.data["error"]["details"]


def test_oversized_message_is_rejected_over_http(client_for, bhrf_user, facility):
    res = client_for(bhrf_user).post(
        "/api/v1/messages/",
        {"content": "x" * (MESSAGE_MAX_LENGTH + 1)},
        format="json",
    )

    assert res.status_code == 400
    assert "content" in res.data["error"]["details"]


def test_admin_has_no_inbox(client_for, admin_user):
    assert client_for(admin_user).get("/api/v1/messages/").status_code == 403
