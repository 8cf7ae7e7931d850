# bhp_core/audit/actions.py


class AuditAction:
    """
    Catalogue of audit action codes. Stored verbatim in AuditEvent.action.
    """
    # Accounts
    USER_REGISTERED = "USER_REGISTERED"
    USER_LOGIN = "USER_LOGIN"
    USER_APPROVED = "USER_APPROVED"
    USER_REJECTED = "USER_REJECTED"
    USER_MFA_ENABLED = "USER_MFA_ENABLED"

    # Facilities
    FACILITY_CREATED = "FACILITY_CREATED"
    FACILITY_UPDATED = "FACILITY_UPDATED"
    FACILITY_APPLICATION_APPROVED = "FACILITY_APPLICATION_APPROVED"
    FACILITY_APPLICATION_REJECTED = "FACILITY_APPLICATION_REJECTED"

    # Credentials
    CREDENTIAL_UPLOADED = "CREDENTIAL_UPLOADED"
    CREDENTIAL_UPDATED = "CREDENTIAL_UPDATED"
    CREDENTIAL_DELETED = "CREDENTIAL_DELETED"

    # Documents
    DOCUMENT_REQUESTED = "DOCUMENT_REQUESTED"
    DOCUMENT_UPLOADED = "DOCUMENT_UPLOADED"
    DOCUMENT_DELETED = "DOCUMENT_DELETED"
    DOCUMENT_CATEGORY_CREATED = "DOCUMENT_CATEGORY_CREATED"
    DOCUMENT_CATEGORY_UPDATED = "DOCUMENT_CATEGORY_UPDATED"
    DOCUMENT_CATEGORY_DELETED = "DOCUMENT_CATEGORY_DELETED"

    # Employees
    EMPLOYEE_CREATED = "EMPLOYEE_CREATED"
    EMPLOYEE_UPDATED = "EMPLOYEE_UPDATED"
    EMPLOYEE_DEACTIVATED = "EMPLOYEE_DEACTIVATED"
    EMPLOYEE_EMAIL_SENT = "EMPLOYEE_EMAIL_SENT"
    EMPLOYEE_DOC_UPLOADED = "EMPLOYEE_DOC_UPLOADED"
    EMPLOYEE_DOC_DELETED = "EMPLOYEE_DOC_DELETED"
    EMPLOYEE_DOC_TYPE_CREATED = "EMPLOYEE_DOC_TYPE_CREATED"
    EMPLOYEE_DOC_TYPE_UPDATED = "EMPLOYEE_DOC_TYPE_UPDATED"
    EMPLOYEE_DOC_TYPE_DELETED = "EMPLOYEE_DOC_TYPE_DELETED"

    # Messaging
    MESSAGE_SENT = "MESSAGE_SENT"

    # Meetings
    MEETING_CREATED = "MEETING_CREATED"
    MEETING_UPDATED = "MEETING_UPDATED"
    MEETING_CANCELLED = "MEETING_CANCELLED"
    MEETING_STARTED = "MEETING_STARTED"
    MEETING_ENDED = "MEETING_ENDED"

    # Reconciliation
    INACTIVE_ROWS_PURGED = "INACTIVE_ROWS_PURGED"


def workflow_action(prefix: str, suffix: str) -> str:
    """
    Workflow documents share one action family per kind:
    INTAKE_SUBMITTED, ASAM_APPROVED, INTAKE_PDF_DOWNLOADED, ...
    """
    return f"{prefix}_{suffix}"
