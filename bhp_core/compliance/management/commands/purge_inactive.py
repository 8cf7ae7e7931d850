# bhp_core/compliance/management/commands/purge_inactive.py
from __future__ import annotations

from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils.timezone import now

from bhp_core.compliance.services import PurgeService


class Command(BaseCommand):
    help = "Delete inactive document categories and employee document types that no document references."

    def add_arguments(self, parser):
        parser.add_argument("--dry-run", action="store_true", help="Print counts only; do not delete.")
        parser.add_argument(
            "--older-than-days",
            type=int,
            default=None,
            help="Only purge rows deactivated at least this many days ago.",
        )

    def handle(self, *args, **opts):
        days = opts["older_than_days"]
        older_than = now() - timedelta(days=days) if days is not None else None

        result = PurgeService.purge_inactive(older_than=older_than, dry_run=opts["dry_run"])

        prefix = "Would purge" if result.dry_run else "Purged"
        self.stdout.write(
            self.style.SUCCESS(
                f"{prefix} {result.document_categories} document categories "
                f"and {result.employee_document_types} employee document types."
            )
        )
