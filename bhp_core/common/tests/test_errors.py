from io import StringIO

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.management import CommandError, call_command
from rest_framework.exceptions import PermissionDenied
from rest_framework.test import APIRequestFactory

from bhp_core.common.api.exceptions import ConflictError, InvalidTransition, api_exception_handler
from bhp_core.common.result import Outcome
from bhp_core.iam.constants import ApprovalStatus, Role
from bhp_core.iam.models import UserProfile


def handle(exc, **headers):
    request = APIRequestFactory().get("/", **headers)
    return api_exception_handler(exc, {"request": request, "view": None})


def test_django_validation_error_keeps_field_details():
    res = handle(DjangoValidationError({"name": ["Name must be at least 2 characters."]}))

    assert res.status_code == 400
    error = res.data["error"]
    assert error["code"] == "validation_error"
    assert error["message"] == "Request failed."
    assert error["details"] == {"name": ["Name must be at least 2 characters."]}


def test_plain_django_validation_error_becomes_the_message():
    res = handle(DjangoValidationError("No file has been uploaded for this document."))

    assert res.data["error"]["message"] == "No file has been uploaded for this document."
    assert res.data["error"]["details"] is None


@pytest.mark.parametrize(
    "exc, status_code, code",
    [
        (PermissionDenied("Forbidden"), 403, "permission_denied"),
        (InvalidTransition(), 400, "invalid_transition"),
        (ConflictError("Email already registered."), 409, "conflict"),
    ],
)
def test_api_exceptions_map_to_codes(exc, status_code, code):
    res = handle(exc)

    assert res.status_code == status_code
    assert res.data["error"]["code"] == code
    assert res.data["error"]["message"] == str(exc.detail)


def test_request_id_is_echoed_from_header():
    res = handle(PermissionDenied("Forbidden"), HTTP_X_REQUEST_ID="req-123")
    assert res.data["error"]["request_id"] == "req-123"


def test_unhandled_error_is_a_500_envelope():
    res = handle(RuntimeError("boom"))

    assert res.status_code == 500
    assert res.data["error"]["code"] == "server_error"
    assert res.data["error"]["message"] == "Unexpected server error."
    assert len(res.data["error"]["request_id"]) == 32


def test_outcome():
    failure = Outcome.failure(OSError("down"))

    assert Outcome.success(3).ok and Outcome.success(3).value == 3
    assert not failure.ok
    assert failure.ignore() is None


# ----------------------------
# ensure_admin
# ----------------------------
@pytest.mark.django_db
def test_ensure_admin_is_idempotent():
    out = StringIO()

    call_command("ensure_admin", "--email", "Root@Example.com", "--password", "Passw0rd!", stdout=out)
    call_command("ensure_admin", "--email", "root@example.com", stdout=out)

    profile = UserProfile.objects.get(user__email="root@example.com")
    assert profile.role == Role.ADMIN
    assert profile.approval_status == ApprovalStatus.APPROVED
    assert profile.user.check_password("Passw0rd!")
    assert "Admin root@example.com created." in out.getvalue()
    assert "Admin root@example.com ensured." in out.getvalue()


@pytest.mark.django_db
def test_ensure_admin_refuses_other_roles(bhp_user):
    with pytest.raises(CommandError):
        call_command("ensure_admin", "--email", bhp_user.email, stdout=StringIO())


@pytest.mark.django_db
def test_ensure_admin_needs_password_to_create():
    with pytest.raises(CommandError):
        call_command("ensure_admin", "--email", "new@example.com", stdout=StringIO())
