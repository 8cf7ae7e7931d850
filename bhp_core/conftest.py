import pytest
from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework.test import APIClient

from bhp_core.common.result import Outcome
from bhp_core.facilities.models import Facility
from bhp_core.iam.actor import actor_for_user
from bhp_core.iam.constants import ApprovalStatus, Role
from bhp_core.iam.models import BHPProfile, BHRFProfile, UserProfile
from bhp_core.integrations import storage


PASSWORD = "Passw0rd!"


def _create_user(email: str, *, role: str, status: str = ApprovalStatus.APPROVED, name: str | None = None):
    User = get_user_model()
    user = User.objects.create_user(username=email, email=email, password=PASSWORD)
    UserProfile.objects.create(
        user=user,
        name=name or email.split("@")[0].replace(".", " ").title(),
        role=role,
        approval_status=status,
    )
    if role == Role.BHP:
        BHPProfile.objects.create(user=user)
    return user


def fresh(user):
    """
    Reload a user so cached profile lookups (bhrf_profile in particular) are
    not stale after a service created or changed them.
    """
    return get_user_model().objects.get(pk=user.pk)


def actor_of(user):
    return actor_for_user(fresh(user))


# ----------------------------
# Users / facilities
# ----------------------------
@pytest.fixture
def user_factory(db):
    return _create_user


@pytest.fixture
def facility_factory(db):
    def make(bhp_user, name="Sunrise House"):
        return Facility.objects.create(bhp=fresh(bhp_user).bhp_profile, name=name, address="1 Main St")

    return make


@pytest.fixture
def bhrf_factory(db):
    def make(email, facility, *, status=ApprovalStatus.APPROVED):
        user = _create_user(email, role=Role.BHRF, status=status)
        BHRFProfile.objects.create(user=user, facility=facility)
        return fresh(user)

    return make


@pytest.fixture
def admin_user(user_factory):
    return user_factory("admin@example.com", role=Role.ADMIN)


@pytest.fixture
def bhp_user(user_factory):
    return user_factory("bhp@example.com", role=Role.BHP, name="Dr. Rivera")


@pytest.fixture
def other_bhp_user(user_factory):
    return user_factory("other.bhp@example.com", role=Role.BHP)


@pytest.fixture
def facility(facility_factory, bhp_user):
    return facility_factory(bhp_user)


@pytest.fixture
def other_facility(facility_factory, other_bhp_user):
    return facility_factory(other_bhp_user, name="Harbor View")


@pytest.fixture
def bhrf_user(bhrf_factory, facility):
    return bhrf_factory("bhrf@example.com", facility)


@pytest.fixture
def other_bhrf_user(bhrf_factory, other_facility):
    return bhrf_factory("other.bhrf@example.com", other_facility)


# ----------------------------
# Actors
# ----------------------------
@pytest.fixture
def as_actor(db):
    return actor_of


@pytest.fixture
def admin_actor(admin_user):
    return actor_of(admin_user)


@pytest.fixture
def bhp_actor(bhp_user):
    return actor_of(bhp_user)


@pytest.fixture
def other_bhp_actor(other_bhp_user):
    return actor_of(other_bhp_user)


@pytest.fixture
def bhrf_actor(bhrf_user):
    return actor_of(bhrf_user)


@pytest.fixture
def other_bhrf_actor(other_bhrf_user):
    return actor_of(other_bhrf_user)


# ----------------------------
# HTTP
# ----------------------------
@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(db):
    def make(user):
        client = APIClient()
        client.force_authenticate(user=fresh(user))
        return client

    return make


# ----------------------------
# Object storage
# ----------------------------
class FakeStorage:
    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_deletes = False

    def put_object(self, key, data, content_type="application/octet-stream"):
        self.objects[key] = data
        return key

    def signed_url(self, key, expires_in=None):
        return f"https://storage.test/bhp/{key}?X-Amz-Expires={expires_in or 3600}"

    def delete_object(self, key):
        if self.fail_deletes:
            return Outcome.failure(OSError("storage unavailable"))
        self.objects.pop(key, None)
        self.deleted.append(key)
        return Outcome.success()


@pytest.fixture
def fake_storage(monkeypatch):
    fake = FakeStorage()
    storage.get_storage.cache_clear()
    monkeypatch.setattr(storage, "S3Storage", lambda: fake)
    yield fake
    storage.get_storage.cache_clear()


@pytest.fixture
def pdf_upload():
    def make(name="license.pdf", content=b"%PDF-1.4 test file"):
        return SimpleUploadedFile(name, content, content_type="application/pdf")

    return make
