# bhp_core/common/management/commands/ensure_admin.py

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils.timezone import now

from bhp_core.iam.constants import ApprovalStatus, Role
from bhp_core.iam.models import UserProfile


class Command(BaseCommand):
    help = "Ensure the seed ADMIN account exists and is approved (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--email", required=True)
        parser.add_argument("--password", default=None, help="Only used when the account is created.")
        parser.add_argument("--name", default="Administrator")

    @transaction.atomic
    def handle(self, *args, **opts):
        email = opts["email"].strip().lower()
        User = get_user_model()

        user = User.objects.filter(email__iexact=email).first()
        created = user is None
        if created:
            if not opts["password"]:
                raise CommandError("--password is required when creating the admin account.")
            user = User.objects.create_user(username=email, email=email, password=opts["password"])

        profile = UserProfile.objects.filter(user=user).first()
        if profile is not None and profile.role != Role.ADMIN:
            raise CommandError(f"{email} already has a {profile.role} account.")

        if profile is None:
            UserProfile.objects.create(
                user=user,
                name=opts["name"],
                role=Role.ADMIN,
                approval_status=ApprovalStatus.APPROVED,
                approved_at=now(),
            )
        elif profile.approval_status != ApprovalStatus.APPROVED:
            profile.approval_status = ApprovalStatus.APPROVED
            profile.approved_at = now()
            profile.save(update_fields=["approval_status", "approved_at", "updated_at"])

        verb = "created" if created else "ensured"
        self.stdout.write(self.style.SUCCESS(f"Admin {email} {verb}."))
