import pytest
from rest_framework.exceptions import PermissionDenied

from bhp_core.audit.models import AuditEvent
from bhp_core.facilities.services import FacilityService

pytestmark = pytest.mark.django_db


def test_bhp_creates_and_updates_own_facility(bhp_actor, bhp_user):
    facility = FacilityService.create_facility(actor=bhp_actor, name="  Mesa Ridge  ", address="4 Elm St")
    assert facility.name == "Mesa Ridge"
    assert facility.bhp_id == bhp_user.bhp_profile.id

    facility = FacilityService.update_facility(actor=bhp_actor, facility_id=facility.id, changes={"phone": "555-0101"})
    assert facility.phone == "555-0101"

    actions = list(AuditEvent.objects.order_by("id").values_list("action", flat=True))
    assert actions == ["FACILITY_CREATED", "FACILITY_UPDATED"]


def test_unchanged_update_writes_no_audit(bhp_actor, facility):
    FacilityService.update_facility(actor=bhp_actor, facility_id=facility.id, changes={"name": facility.name})
    assert not AuditEvent.objects.exists()


def test_bhrf_reads_but_never_mutates_its_facility(client_for, bhrf_user, bhrf_actor, facility):
    client = client_for(bhrf_user)

    assert client.get(f"/api/v1/facilities/{facility.id}/").status_code == 200

    with pytest.raises(PermissionDenied):
        FacilityService.update_facility(actor=bhrf_actor, facility_id=facility.id, changes={"name": "Renamed"})

    res = client.patch(f"/api/v1/facilities/{facility.id}/", {"name": "Renamed"}, format="json")
    assert res.status_code == 403


def test_facility_lists_are_tenant_scoped(client_for, bhp_user, bhrf_user, facility, other_facility):
    for user in (bhp_user, bhrf_user):
        res = client_for(user).get("/api/v1/facilities/")
        assert res.status_code == 200
        assert [row["id"] for row in res.data["results"]] == [str(facility.id)]


def test_cross_tenant_facility_is_forbidden(client_for, bhp_user, other_facility):
    res = client_for(bhp_user).get(f"/api/v1/facilities/{other_facility.id}/")

    assert res.status_code == 403
    assert res.data["error"]["code"] == "permission_denied"


def test_admin_cannot_create_facilities(client_for, admin_user):
    res = client_for(admin_user).post("/api/v1/facilities/", {"name": "Nope"}, format="json")
    assert res.status_code == 403
