# bhp_core/asam/pdf.py
from __future__ import annotations

from bhp_core.asam.models import ASAMAssessment
from bhp_core.integrations.pdf import render_document


def render_assessment(assessment: ASAMAssessment) -> bytes:
    dimensions = sorted((assessment.form_data or {}).items())
    sections = [
        (
            "Patient",
            [
                ("Name", assessment.patient_name),
                ("Date of birth", assessment.date_of_birth),
                ("Intake", assessment.intake_id),
            ],
        ),
        ("Dimensions", [(key.replace("_", " ").capitalize(), value) for key, value in dimensions]),
        (
            "Placement",
            [
                ("Level of care", assessment.get_level_of_care_display() if assessment.level_of_care else ""),
                ("Status", assessment.get_status_display()),
                ("Decision reason", assessment.decision_reason),
                ("Decided", assessment.decided_at),
            ],
        ),
    ]
    return render_document("ASAM Assessment", sections, subtitle=assessment.facility.name)
