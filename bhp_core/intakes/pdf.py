# bhp_core/intakes/pdf.py
from __future__ import annotations

from bhp_core.integrations.pdf import render_document
from bhp_core.intakes.models import Intake


def _humanize(key: str) -> str:
    return key.replace("_", " ").capitalize()


def render_intake(intake: Intake) -> bytes:
    medications = [
        " ".join(str(m.get(k, "")) for k in ("name", "dosage", "frequency") if m.get(k)).strip()
        for m in intake.medications or []
        if isinstance(m, dict)
    ]
    sections = [
        (
            "Resident",
            [
                ("Name", intake.resident_name),
                ("Date of birth", intake.date_of_birth),
                ("Admission date", intake.admission_date),
                ("Sex", intake.sex),
                ("Language", intake.language),
                ("Phone", intake.patient_phone),
            ],
        ),
        (
            "Emergency contact",
            [
                ("Name", intake.emergency_contact_name),
                ("Phone", intake.emergency_contact_phone),
            ],
        ),
        (
            "Insurance",
            [
                ("Provider", intake.insurance_provider),
                ("Policy number", intake.policy_number),
            ],
        ),
        ("Medications", [(f"#{i}", m) for i, m in enumerate(medications, start=1)]),
        ("Assessment", [(_humanize(k), v) for k, v in sorted((intake.form_data or {}).items())]),
        (
            "Review",
            [
                ("Status", intake.get_status_display()),
                ("Submitted", intake.submitted_at),
                ("Decided", intake.decided_at),
                ("Decision reason", intake.decision_reason),
            ],
        ),
    ]
    return render_document("Intake Assessment", sections, subtitle=intake.facility.name)
