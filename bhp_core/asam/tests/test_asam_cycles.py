from datetime import date

import pytest
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework.exceptions import ValidationError

from bhp_core.asam.models import ASAMAssessment
from bhp_core.asam.selectors import eligible_intakes
from bhp_core.asam.services import ASAMService
from bhp_core.audit.selectors import events_for_entity
from bhp_core.common.api.exceptions import InvalidTransition
from bhp_core.intakes.services import IntakeService
from bhp_core.workflow.machine import DocumentStatus

pytestmark = pytest.mark.django_db


def make_intake(bhrf_actor, bhp_actor, facility, *, decision=DocumentStatus.APPROVED, name="Jordan Smith"):
    intake = IntakeService.create(
        actor=bhrf_actor,
        facility_id=facility.id,
        fields={"resident_name": name, "date_of_birth": date(1990, 4, 2)},
        submit=True,
    )
    if decision:
        reason = "" if decision == DocumentStatus.APPROVED else "Missing consent forms"
        IntakeService.decide(actor=bhp_actor, doc_id=intake.id, decision=decision, reason=reason)
    intake.refresh_from_db()
    return intake


def test_assessment_defaults_identity_from_intake(bhrf_actor, bhp_actor, facility):
    intake = make_intake(bhrf_actor, bhp_actor, facility)

    assessment = ASAMService.create(actor=bhrf_actor, facility_id=facility.id, fields={"intake_id": intake.id})

    assert assessment.intake_id == intake.id
    assert assessment.patient_name == "Jordan Smith"
    assert assessment.date_of_birth == date(1990, 4, 2)
    assert assessment.status == DocumentStatus.DRAFT


@pytest.mark.parametrize("decision", [None, DocumentStatus.CONDITIONAL, DocumentStatus.DENIED])
def test_only_approved_intakes_are_eligible(bhrf_actor, bhp_actor, facility, decision):
    intake = make_intake(bhrf_actor, bhp_actor, facility, decision=decision)

    with pytest.raises(DjangoValidationError) as exc:
        ASAMService.create(actor=bhrf_actor, facility_id=facility.id, fields={"intake_id": intake.id})

    assert "intake_id" in exc.value.message_dict


def test_intake_from_another_facility_is_rejected(bhrf_actor, bhp_actor, other_bhrf_actor, facility, other_facility):
    intake = make_intake(bhrf_actor, bhp_actor, facility)

    with pytest.raises(DjangoValidationError):
        ASAMService.create(actor=other_bhrf_actor, facility_id=other_facility.id, fields={"intake_id": intake.id})


def test_active_cycle_blocks_a_second_assessment(bhrf_actor, bhp_actor, facility):
    intake = make_intake(bhrf_actor, bhp_actor, facility)
    ASAMService.create(actor=bhrf_actor, facility_id=facility.id, fields={"intake_id": intake.id}, submit=True)

    with pytest.raises(InvalidTransition):
        ASAMService.create(actor=bhrf_actor, facility_id=facility.id, fields={"intake_id": intake.id})


def test_second_draft_cannot_be_submitted_while_first_is_pending(bhrf_actor, bhp_actor, facility):
    intake = make_intake(bhrf_actor, bhp_actor, facility)
    first = ASAMService.create(actor=bhrf_actor, facility_id=facility.id, fields={"intake_id": intake.id})
    second = ASAMService.create(actor=bhrf_actor, facility_id=facility.id, fields={"intake_id": intake.id})

    ASAMService.submit(actor=bhrf_actor, doc_id=first.id, changes={"level_of_care": "3.5"})
    with pytest.raises(InvalidTransition):
        ASAMService.submit(actor=bhrf_actor, doc_id=second.id, changes={"level_of_care": "3.5"})

    second.refresh_from_db()
    assert second.status == DocumentStatus.DRAFT
    assert ASAMAssessment.objects.filter(intake=intake, status=DocumentStatus.PENDING).count() == 1


def test_denied_assessment_reopens_eligibility(bhrf_actor, bhp_actor, facility):
    intake = make_intake(bhrf_actor, bhp_actor, facility)
    first = ASAMService.create(actor=bhrf_actor, facility_id=facility.id, fields={"intake_id": intake.id}, submit=True)
    assert list(eligible_intakes(bhp_actor)) == []

    ASAMService.decide(actor=bhp_actor, doc_id=first.id, decision=DocumentStatus.DENIED, reason="Wrong level")

    assert list(eligible_intakes(bhp_actor)) == [intake]
    second = ASAMService.create(actor=bhrf_actor, facility_id=facility.id, fields={"intake_id": intake.id})
    assert second.id != first.id


def test_eligible_intakes_are_tenant_scoped(bhrf_actor, bhp_actor, other_bhp_actor, facility):
    approved = make_intake(bhrf_actor, bhp_actor, facility)
    make_intake(bhrf_actor, bhp_actor, facility, decision=None, name="Still Pending")

    assert list(eligible_intakes(bhrf_actor)) == [approved]
    assert list(eligible_intakes(bhp_actor)) == [approved]
    assert list(eligible_intakes(other_bhp_actor)) == []


def test_asam_needs_reason_for_every_decision(bhrf_actor, bhp_actor, facility):
    intake = make_intake(bhrf_actor, bhp_actor, facility)
    assessment = ASAMService.create(actor=bhrf_actor, facility_id=facility.id, fields={"intake_id": intake.id}, submit=True)

    with pytest.raises(ValidationError) as exc:
        ASAMService.decide(actor=bhp_actor, doc_id=assessment.id, decision=DocumentStatus.APPROVED, reason="  ")
    assert "decision_reason" in exc.value.detail

    ASAMService.decide(actor=bhp_actor, doc_id=assessment.id, decision=DocumentStatus.APPROVED, reason="Level 3.5 fits")
    assessment.refresh_from_db()
    assert assessment.status == DocumentStatus.APPROVED


def test_decided_asam_stays_editable_without_moving_status(bhrf_actor, bhp_actor, facility):
    intake = make_intake(bhrf_actor, bhp_actor, facility)
    assessment = ASAMService.create(actor=bhrf_actor, facility_id=facility.id, fields={"intake_id": intake.id}, submit=True)
    ASAMService.decide(actor=bhp_actor, doc_id=assessment.id, decision=DocumentStatus.CONDITIONAL, reason="Recheck in 30d")

    edited = ASAMService.edit(actor=bhp_actor, doc_id=assessment.id, changes={"level_of_care": "3.5"})

    assert edited.status == DocumentStatus.CONDITIONAL
    assert edited.level_of_care == "3.5"
    actions = list(events_for_entity(entity_type="ASAMAssessment", entity_id=assessment.id).values_list("action", flat=True))
    assert actions == ["ASAM_CREATED", "ASAM_SUBMITTED", "ASAM_CONDITIONAL", "ASAM_UPDATED"]


def test_eligible_intakes_endpoint(client_for, bhrf_user, bhrf_actor, bhp_actor, facility):
    intake = make_intake(bhrf_actor, bhp_actor, facility)

    res = client_for(bhrf_user).get("/api/v1/asam/eligible-intakes/")

    assert res.status_code == 200
    assert [row["id"] for row in res.data] == [str(intake.id)]


def test_create_over_http(client_for, bhrf_user, bhrf_actor, bhp_actor, facility):
    intake = make_intake(bhrf_actor, bhp_actor, facility)
    client = client_for(bhrf_user)

    res = client.post("/api/v1/asam/", {"intake_id": str(intake.id), "level_of_care": "3.1", "submit": True}, format="json")

    assert res.status_code == 201
    assert res.data["status"] == DocumentStatus.PENDING
    assert res.data["level_of_care_label"] == "Clinically Managed Low-Intensity Residential"

    duplicate = client.post("/api/v1/asam/", {"intake_id": str(intake.id)}, format="json")
    assert duplicate.status_code == 400
    assert duplicate.data["error"]["code"] == "invalid_transition"
