# bhp_core/intakes/services.py
from __future__ import annotations

from bhp_core.intakes.models import Intake
from bhp_core.workflow.services import WorkflowDocumentService


class IntakeService(WorkflowDocumentService):
    model = Intake
    editable_fields = (
        "resident_name",
        "date_of_birth",
        "admission_date",
        "sex",
        "language",
        "patient_phone",
        "emergency_contact_name",
        "emergency_contact_phone",
        "insurance_provider",
        "policy_number",
        "medications",
    )
