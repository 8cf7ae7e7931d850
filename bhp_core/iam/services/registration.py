# bhp_core/iam/services/registration.py

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from bhp_core.audit.actions import AuditAction
from bhp_core.audit.services import AuditService, RequestMeta
from bhp_core.common.api.exceptions import ConflictError
from bhp_core.facilities.models import FacilityApplication
from bhp_core.iam.constants import ApprovalStatus, Role
from bhp_core.iam.models import BHPProfile, UserProfile
from bhp_core.iam.selectors import available_bhps

PASSWORD_MIN_LENGTH = 8
NAME_MIN_LENGTH = 2


@dataclass(frozen=True)
class RegistrationData:
    email: str
    password: str
    confirm_password: str
    name: str
    role: str
    # BHP
    phone: str = ""
    address: str = ""
    bio: str = ""
    # BHRF
    selected_bhp_id: Optional[str] = None
    facility_name: str = ""
    facility_address: str = ""


def _password_errors(password: str, confirm: str) -> list[str]:
    errors = []
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(f"Password must be at least {PASSWORD_MIN_LENGTH} characters.")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain an uppercase letter.")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain a lowercase letter.")
    if not re.search(r"[0-9]", password):
        errors.append("Password must contain a number.")
    if password != confirm:
        errors.append("Passwords do not match.")
    return errors


class RegistrationService:
    """
    Public self-registration for BHP and BHRF users.

    Every new account starts PENDING. A BHRF registrant also files a PENDING
    facility application with the BHP they selected; that BHP's decision is
    what approves the account.
    """

    @staticmethod
    def validate(data: RegistrationData) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}

        if len(data.name.strip()) < NAME_MIN_LENGTH:
            errors["name"] = [f"Name must be at least {NAME_MIN_LENGTH} characters."]

        pw_errors = _password_errors(data.password, data.confirm_password)
        if pw_errors:
            errors["password"] = pw_errors

        if data.role not in {Role.BHP, Role.BHRF}:
            errors["role"] = ["Role must be BHP or BHRF."]

        if data.role == Role.BHRF:
            if not data.selected_bhp_id:
                errors["selected_bhp_id"] = ["Please select a BHP."]
            if len(data.facility_name.strip()) < 2:
                errors["facility_name"] = ["Facility name must be at least 2 characters."]
            if len(data.facility_address.strip()) < 2:
                errors["facility_address"] = ["Facility address must be at least 2 characters."]

        return errors

    @staticmethod
    @transaction.atomic
    def register(*, data: RegistrationData, meta: Optional[RequestMeta] = None) -> UserProfile:
        errors = RegistrationService.validate(data)
        if errors:
            raise ValidationError(errors)

        email = data.email.strip().lower()
        User = get_user_model()

        if User.objects.filter(email__iexact=email).exists():
            raise ConflictError("An account with this email already exists.")

        bhp = None
        if data.role == Role.BHRF:
            try:
                bhp = available_bhps().get(id=data.selected_bhp_id)
            except (BHPProfile.DoesNotExist, ValidationError, ValueError):
                raise ValidationError({"selected_bhp_id": ["Selected BHP is not available."]})

        try:
            with transaction.atomic():
                user = User.objects.create_user(username=email, email=email, password=data.password)
        except IntegrityError:
            raise ConflictError("An account with this email already exists.")

        profile = UserProfile.objects.create(
            user=user,
            name=data.name.strip(),
            role=data.role,
            approval_status=ApprovalStatus.PENDING,
        )

        details = {"email": email, "role": data.role}
        if data.role == Role.BHP:
            BHPProfile.objects.create(
                user=user,
                phone=data.phone.strip(),
                address=data.address.strip(),
                bio=data.bio.strip(),
            )
        else:
            application = FacilityApplication.objects.create(
                applicant=user,
                bhp=bhp,
                facility_name=data.facility_name.strip(),
                facility_address=data.facility_address.strip(),
            )
            details["facility_application_id"] = str(application.id)
            details["selected_bhp_id"] = str(bhp.id)

        AuditService.record(
            actor_user_id=user.id,
            action=AuditAction.USER_REGISTERED,
            entity_type="User",
            entity_id=user.id,
            details=details,
            meta=meta,
        ).ignore()
        return profile
