# bhp_core/compliance/services/purge.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from django.db import transaction

from bhp_core.audit.actions import AuditAction
from bhp_core.audit.services import AuditService
from bhp_core.compliance.selectors import unused_inactive_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PurgeResult:
    document_categories: int
    employee_document_types: int
    dry_run: bool

    @property
    def total(self) -> int:
        return self.document_categories + self.employee_document_types


class PurgeService:
    """
    Phase two of the two-phase delete: hard-delete inactive catalogue rows
    that no document references any more.
    """

    @staticmethod
    @transaction.atomic
    def purge_inactive(*, older_than: Optional[datetime] = None, dry_run: bool = False) -> PurgeResult:
        rows = unused_inactive_rows(older_than=older_than)
        ids = {label: list(qs.values_list("id", flat=True).distinct()) for label, qs in rows.items()}

        result = PurgeResult(
            document_categories=len(ids["document_categories"]),
            employee_document_types=len(ids["employee_document_types"]),
            dry_run=dry_run,
        )
        if dry_run or result.total == 0:
            return result

        for label, qs in rows.items():
            qs.model.objects.filter(id__in=ids[label]).delete()

        AuditService.record(
            actor_user_id=None,
            action=AuditAction.INACTIVE_ROWS_PURGED,
            entity_type="Catalog",
            details={label: [str(pk) for pk in pks] for label, pks in ids.items()},
        ).ignore()
        logger.info(
            "Purged %d document categories and %d employee document types",
            result.document_categories,
            result.employee_document_types,
        )
        return result
