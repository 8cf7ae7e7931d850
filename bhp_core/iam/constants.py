# bhp_core/iam/constants.py
from django.db import models


class Role(models.TextChoices):
    ADMIN = "ADMIN", "Administrator"
    BHP = "BHP", "Behavioral Health Professional"
    BHRF = "BHRF", "Behavioral Health Residential Facility"


class ApprovalStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"


REJECTION_REASON_MIN_LENGTH = 10
