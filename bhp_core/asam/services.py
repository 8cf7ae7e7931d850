# bhp_core/asam/services.py
from __future__ import annotations

from typing import Any

from django.core.exceptions import ValidationError

from bhp_core.asam.models import ASAMAssessment
from bhp_core.asam.selectors import has_active_assessment
from bhp_core.common.api.exceptions import InvalidTransition
from bhp_core.facilities.models import Facility
from bhp_core.iam.actor import Actor
from bhp_core.intakes.models import Intake
from bhp_core.workflow.machine import DocumentStatus
from bhp_core.workflow.services import WorkflowDocumentService


class ASAMService(WorkflowDocumentService):
    model = ASAMAssessment
    editable_fields = ("patient_name", "date_of_birth", "level_of_care")

    @classmethod
    def before_create(cls, *, actor: Actor, facility: Facility, fields: dict[str, Any]) -> dict[str, Any]:
        """
        A new cycle needs an APPROVED intake from the same facility with no
        active assessment. Resident identity defaults from the intake.
        """
        intake_id = fields.pop("intake_id", None)
        if not intake_id:
            raise ValidationError({"intake_id": "An approved intake is required."})

        try:
            intake = Intake.objects.select_for_update().get(id=intake_id, facility_id=facility.id)
        except (Intake.DoesNotExist, ValidationError, ValueError):
            raise ValidationError({"intake_id": "Intake not found for this facility."})

        if intake.status != DocumentStatus.APPROVED:
            raise ValidationError({"intake_id": "ASAM assessments require an approved intake."})
        if has_active_assessment(intake_id=intake.id):
            raise InvalidTransition("This intake already has an active ASAM assessment.")

        fields["intake"] = intake
        fields.setdefault("patient_name", intake.resident_name)
        fields.setdefault("date_of_birth", intake.date_of_birth)
        return fields

    @classmethod
    def before_submit(cls, *, actor: Actor, doc: ASAMAssessment) -> None:
        # drafts are not active, so two drafts of one intake meet here
        Intake.objects.select_for_update().get(id=doc.intake_id)
        if has_active_assessment(intake_id=doc.intake_id, exclude_id=doc.id):
            raise InvalidTransition("This intake already has an active ASAM assessment.")

    @classmethod
    def _apply(cls, doc, changes):
        intake = changes.pop("intake", None)
        if intake is not None:
            doc.intake = intake
        return super()._apply(doc, changes)
