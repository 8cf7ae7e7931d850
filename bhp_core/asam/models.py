# bhp_core/asam/models.py
from django.db import models

from bhp_core.workflow.models import WorkflowDocument


class LevelOfCare(models.TextChoices):
    LEVEL_0_5 = "0.5", "Early Intervention"
    LEVEL_1 = "1", "Outpatient Services"
    LEVEL_2_1 = "2.1", "Intensive Outpatient"
    LEVEL_2_5 = "2.5", "Partial Hospitalization"
    LEVEL_3_1 = "3.1", "Clinically Managed Low-Intensity Residential"
    LEVEL_3_3 = "3.3", "Clinically Managed Population-Specific High-Intensity Residential"
    LEVEL_3_5 = "3.5", "Clinically Managed High-Intensity Residential"
    LEVEL_3_7 = "3.7", "Medically Monitored Intensive Inpatient"
    LEVEL_4 = "4", "Medically Managed Intensive Inpatient"


class ASAMAssessment(WorkflowDocument):
    """
    ASAM placement assessment for a resident whose intake was approved.

    One assessment cycle per intake at a time; dimension ratings live in form_data.
    """
    facility = models.ForeignKey("facilities.Facility", on_delete=models.PROTECT, related_name="asam_assessments")
    intake = models.ForeignKey("intakes.Intake", on_delete=models.PROTECT, related_name="asam_assessments")

    patient_name = models.CharField(max_length=255, blank=True, default="")
    date_of_birth = models.DateField(null=True, blank=True)
    level_of_care = models.CharField(max_length=8, choices=LevelOfCare.choices, blank=True, default="")

    POLICY_KIND = "asam"
    AUDIT_PREFIX = "ASAM"
    REQUIRED_FOR_SUBMIT = ("patient_name",)

    class Meta:
        db_table = "asam_assessment"
        indexes = [
            models.Index(fields=["facility", "status"], name="asam_facility_status_idx"),
            models.Index(fields=["intake", "status"], name="asam_intake_status_idx"),
        ]

    def __str__(self) -> str:
        return f"ASAM {self.patient_name or self.id} ({self.status})"
