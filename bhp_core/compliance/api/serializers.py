# bhp_core/compliance/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from bhp_core.compliance.models import (
    Credential,
    CredentialType,
    Document,
    DocumentCategory,
    DocumentOwnerType,
    Employee,
    EmployeeDocument,
    EmployeeDocumentType,
)
from bhp_core.compliance.status import ComplianceStatus


class ComplianceStatusMixin(serializers.Serializer):
    compliance_status = serializers.SerializerMethodField()

    def get_compliance_status(self, obj):
        # `now` can be pinned through the serializer context (tests, batch renders)
        status = obj.compliance_status(self.context.get("now"))
        return status.value if status is not None else None


# -----------------------------
# Credentials
# -----------------------------

class CredentialSerializer(ComplianceStatusMixin, serializers.ModelSerializer):
    class Meta:
        model = Credential
        fields = [
            "id",
            "type",
            "name",
            "file_key",
            "is_public",
            "expires_at",
            "no_expiration",
            "compliance_status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CredentialUploadSerializer(serializers.Serializer):
    file = serializers.FileField()
    type = serializers.ChoiceField(choices=CredentialType.choices)
    name = serializers.CharField(max_length=255)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)
    no_expiration = serializers.BooleanField(required=False, default=False)
    is_public = serializers.BooleanField(required=False, default=False)


class CredentialUpdateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=CredentialType.choices, required=False)
    name = serializers.CharField(max_length=255, required=False)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)
    no_expiration = serializers.BooleanField(required=False)
    is_public = serializers.BooleanField(required=False)


class SignedUrlSerializer(serializers.Serializer):
    url = serializers.URLField()
    expires_in = serializers.IntegerField()


# -----------------------------
# Categories / documents
# -----------------------------

class DocumentCategorySerializer(serializers.ModelSerializer):
    scope = serializers.SerializerMethodField()

    class Meta:
        model = DocumentCategory
        fields = [
            "id",
            "name",
            "description",
            "is_required",
            "is_active",
            "bhp_id",
            "facility_id",
            "scope",
            "created_at",
        ]
        read_only_fields = fields

    def get_scope(self, obj) -> str:
        return "facility" if obj.facility_id else "bhp"


class DocumentCategoryWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    is_required = serializers.BooleanField(required=False, default=False)


class DocumentVersionSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    file_key = serializers.CharField()
    uploaded_by_id = serializers.IntegerField(allow_null=True)
    created_at = serializers.DateTimeField()


class DocumentSerializer(ComplianceStatusMixin, serializers.ModelSerializer):
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)
    employee_name = serializers.CharField(source="employee.full_name", read_only=True, default=None)
    facility_name = serializers.CharField(source="facility.name", read_only=True)

    class Meta:
        model = Document
        fields = [
            "id",
            "facility_id",
            "facility_name",
            "category_id",
            "category_name",
            "name",
            "type",
            "status",
            "owner_type",
            "employee_id",
            "employee_name",
            "intake_id",
            "file_key",
            "notes",
            "requested_by_id",
            "uploaded_by_id",
            "uploaded_at",
            "expires_at",
            "no_expiration",
            "compliance_status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class DocumentDetailSerializer(DocumentSerializer):
    versions = DocumentVersionSerializer(many=True, read_only=True)

    class Meta(DocumentSerializer.Meta):
        fields = DocumentSerializer.Meta.fields + ["versions"]
        read_only_fields = fields


class _DocumentLinksSerializer(serializers.Serializer):
    owner_type = serializers.ChoiceField(
        choices=DocumentOwnerType.choices,
        required=False,
        default=DocumentOwnerType.FACILITY,
    )
    category_id = serializers.UUIDField(required=False, allow_null=True)
    employee_id = serializers.UUIDField(required=False, allow_null=True)
    intake_id = serializers.UUIDField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class DocumentRequestSerializer(_DocumentLinksSerializer):
    facility_id = serializers.UUIDField()
    name = serializers.CharField(max_length=255)
    type = serializers.CharField(max_length=128)


class DocumentUploadSerializer(_DocumentLinksSerializer):
    file = serializers.FileField()
    document_id = serializers.UUIDField(required=False, allow_null=True)
    name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    type = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")
    expires_at = serializers.DateTimeField(required=False, allow_null=True)
    no_expiration = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if not attrs.get("document_id"):
            errors = {}
            if not attrs.get("name"):
                errors["name"] = "This field is required."
            if not attrs.get("type"):
                errors["type"] = "This field is required."
            if errors:
                raise serializers.ValidationError(errors)
        return attrs


# -----------------------------
# Employees
# -----------------------------

class EmployeeSerializer(serializers.ModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = Employee
        fields = [
            "id",
            "facility_id",
            "first_name",
            "last_name",
            "full_name",
            "email",
            "phone",
            "position",
            "hire_date",
            "is_active",
            "deactivated_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class EmployeeWriteSerializer(serializers.Serializer):
    facility_id = serializers.UUIDField(required=False)
    first_name = serializers.CharField(max_length=128)
    last_name = serializers.CharField(max_length=128)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    position = serializers.CharField(max_length=128, required=False, allow_blank=True)
    hire_date = serializers.DateField(required=False, allow_null=True)


class EmployeeEmailSerializer(serializers.Serializer):
    additional_recipients = serializers.ListField(
        child=serializers.EmailField(),
        required=False,
        default=list,
    )


class EmployeeEmailResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()
    recipients = serializers.ListField(child=serializers.EmailField())


class EmployeeDocumentTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = EmployeeDocumentType
        fields = ["id", "facility_id", "name", "description", "is_required", "is_active", "created_at"]
        read_only_fields = fields


class EmployeeDocumentTypeWriteSerializer(DocumentCategoryWriteSerializer):
    pass


class EmployeeDocumentSerializer(ComplianceStatusMixin, serializers.ModelSerializer):
    document_type_name = serializers.CharField(source="document_type.name", read_only=True)

    class Meta:
        model = EmployeeDocument
        fields = [
            "id",
            "employee_id",
            "document_type_id",
            "document_type_name",
            "file_key",
            "issued_at",
            "expires_at",
            "no_expiration",
            "compliance_status",
            "notes",
            "uploaded_by_id",
            "created_at",
        ]
        read_only_fields = fields


class EmployeeDocumentUploadSerializer(serializers.Serializer):
    file = serializers.FileField()
    employee_id = serializers.UUIDField()
    document_type_id = serializers.UUIDField()
    issued_at = serializers.DateField(required=False, allow_null=True)
    expires_at = serializers.DateTimeField(required=False, allow_null=True)
    no_expiration = serializers.BooleanField(required=False, default=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
