# bhp_core/intakes/models.py
from django.db import models

from bhp_core.workflow.models import WorkflowDocument


class Intake(WorkflowDocument):
    """
    Resident intake assessment.

    Identity, contact and insurance details are columns; the remaining wizard
    steps (history, symptoms, risk, ...) live in form_data.
    """
    facility = models.ForeignKey("facilities.Facility", on_delete=models.PROTECT, related_name="intakes")

    # Demographics
    resident_name = models.CharField(max_length=255, blank=True, default="")
    date_of_birth = models.DateField(null=True, blank=True)
    admission_date = models.DateField(null=True, blank=True)
    sex = models.CharField(max_length=32, blank=True, default="")
    language = models.CharField(max_length=64, blank=True, default="")

    # Contact
    patient_phone = models.CharField(max_length=32, blank=True, default="")
    emergency_contact_name = models.CharField(max_length=255, blank=True, default="")
    emergency_contact_phone = models.CharField(max_length=32, blank=True, default="")

    # Insurance
    insurance_provider = models.CharField(max_length=255, blank=True, default="")
    policy_number = models.CharField(max_length=64, blank=True, default="")

    # [{"name", "dosage", "frequency", "route"}]
    medications = models.JSONField(default=list, blank=True)

    POLICY_KIND = "intake"
    AUDIT_PREFIX = "INTAKE"
    REQUIRED_FOR_SUBMIT = ("resident_name", "date_of_birth")

    class Meta:
        db_table = "intakes_intake"
        indexes = [
            models.Index(fields=["facility", "status"], name="intake_facility_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Intake {self.resident_name or self.id} ({self.status})"
