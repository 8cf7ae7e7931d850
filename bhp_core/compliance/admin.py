from django.contrib import admin

from bhp_core.compliance.models import (
    Credential,
    Document,
    DocumentCategory,
    DocumentVersion,
    Employee,
    EmployeeDocument,
    EmployeeDocumentType,
)


@admin.register(Credential)
class CredentialAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "bhp", "expires_at", "no_expiration", "created_at")
    list_filter = ("type", "no_expiration")
    search_fields = ("name", "bhp__user__email")
    ordering = ("-created_at",)


@admin.register(DocumentCategory)
class DocumentCategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "bhp", "facility", "is_required", "is_active", "deactivated_at")
    list_filter = ("is_active", "is_required")
    search_fields = ("name",)


class DocumentVersionInline(admin.TabularInline):
    model = DocumentVersion
    extra = 0
    readonly_fields = ("file_key", "uploaded_by", "created_at")


@admin.register(Document)
class DocumentAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "facility", "status", "owner_type", "expires_at", "created_at")
    list_filter = ("status", "owner_type")
    search_fields = ("name", "type", "facility__name")
    inlines = [DocumentVersionInline]
    ordering = ("-created_at",)


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ("last_name", "first_name", "position", "facility", "is_active")
    list_filter = ("is_active",)
    search_fields = ("first_name", "last_name", "email", "facility__name")


@admin.register(EmployeeDocumentType)
class EmployeeDocumentTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "facility", "is_required", "is_active")
    list_filter = ("is_active", "is_required")
    search_fields = ("name", "facility__name")


@admin.register(EmployeeDocument)
class EmployeeDocumentAdmin(admin.ModelAdmin):
    list_display = ("employee", "document_type", "issued_at", "expires_at", "created_at")
    search_fields = ("employee__first_name", "employee__last_name", "document_type__name")
