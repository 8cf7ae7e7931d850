from bhp_core.compliance.services.catalog import DocumentCategoryService, EmployeeDocumentTypeService
from bhp_core.compliance.services.credentials import CredentialService
from bhp_core.compliance.services.documents import DocumentService
from bhp_core.compliance.services.employees import EmployeeDocumentService, EmployeeService
from bhp_core.compliance.services.purge import PurgeService

__all__ = [
    "CredentialService",
    "DocumentCategoryService",
    "DocumentService",
    "EmployeeDocumentService",
    "EmployeeDocumentTypeService",
    "EmployeeService",
    "PurgeService",
]
