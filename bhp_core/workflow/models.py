# bhp_core/workflow/models.py
from __future__ import annotations

from django.conf import settings
from django.db import models

from bhp_core.common.models import UUIDModel
from bhp_core.iam.gate import FacilityScope
from bhp_core.workflow.machine import DocumentStatus


class WorkflowDocument(UUIDModel):
    """
    Facility-scoped document authored by the facility's BHRF and decided by
    the facility's BHP.

    status only moves through bhp_core.workflow.machine.next_status;
    draft_step is the author's wizard position while the document is a draft.
    """
    facility = models.ForeignKey("facilities.Facility", on_delete=models.PROTECT, related_name="+")

    status = models.CharField(
        max_length=16,
        choices=DocumentStatus.choices,
        default=DocumentStatus.DRAFT,
        db_index=True,
    )
    draft_step = models.PositiveSmallIntegerField(default=0)
    form_data = models.JSONField(default=dict, blank=True)

    submitted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="+",
        null=True,
        blank=True,
    )
    submitted_at = models.DateTimeField(null=True, blank=True)

    decided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="+",
        null=True,
        blank=True,
    )
    decided_at = models.DateTimeField(null=True, blank=True)
    decision_reason = models.TextField(blank=True, default="")

    # Subclasses set these.
    POLICY_KIND = ""
    AUDIT_PREFIX = ""
    REQUIRED_FOR_SUBMIT: tuple[str, ...] = ()

    class Meta:
        abstract = True

    def access_scope(self) -> FacilityScope:
        return FacilityScope(facility_id=self.facility_id, bhp_id=self.facility.bhp_id)

    def missing_required_fields(self) -> list[str]:
        return [name for name in self.REQUIRED_FOR_SUBMIT if getattr(self, name, None) in (None, "")]
