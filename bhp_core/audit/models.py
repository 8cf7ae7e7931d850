# bhp_core/audit/models.py
from django.conf import settings
from django.db import models


class AuditLogImmutable(Exception):
    """Raised on any attempt to change or remove an audit row."""


class AuditEventQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise AuditLogImmutable("Audit events are append-only.")

    def delete(self):
        raise AuditLogImmutable("Audit events are append-only.")


class AuditEvent(models.Model):
    """
    Immutable audit record.

    The integer primary key doubles as the insertion sequence, so entries written
    in the same transaction keep their order even when timestamps collide.
    """
    id = models.BigAutoField(primary_key=True)

    actor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="audit_events",
        null=True,
        blank=True,
    )

    action = models.CharField(max_length=64, db_index=True)  # e.g. "INTAKE_SUBMITTED"
    entity_type = models.CharField(max_length=64, db_index=True)  # e.g. "Intake"
    entity_id = models.CharField(max_length=64, blank=True, default="", db_index=True)

    details = models.JSONField(default=dict, blank=True)

    ip_address = models.CharField(max_length=64, default="unknown")
    user_agent = models.CharField(max_length=512, default="unknown")

    occurred_at = models.DateTimeField(auto_now_add=True, db_index=True)

    objects = AuditEventQuerySet.as_manager()

    class Meta:
        db_table = "audit_audit_event"
        ordering = ["-occurred_at", "-id"]
        indexes = [
            models.Index(fields=["entity_type", "entity_id"], name="audit_entity_idx"),
            models.Index(fields=["actor_user", "occurred_at"], name="audit_actor_time_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AuditLogImmutable("Audit events are append-only.")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AuditLogImmutable("Audit events are append-only.")

    def __str__(self) -> str:
        return f"{self.action} {self.entity_type}:{self.entity_id}"
