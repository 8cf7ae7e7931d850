# bhp_core/compliance/api/views.py
from __future__ import annotations

from django.conf import settings
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from bhp_core.audit.services import RequestMeta
from bhp_core.common.api.pagination import paginate
from bhp_core.common.permissions import get_authorized
from bhp_core.compliance.api.permissions import (
    CredentialPermission,
    DocumentCategoryPermission,
    DocumentPermission,
    EmployeeDocumentPermission,
    EmployeeDocumentTypePermission,
    EmployeePermission,
)
from bhp_core.compliance.api.serializers import (
    CredentialSerializer,
    CredentialUpdateSerializer,
    CredentialUploadSerializer,
    DocumentCategorySerializer,
    DocumentCategoryWriteSerializer,
    DocumentDetailSerializer,
    DocumentRequestSerializer,
    DocumentSerializer,
    DocumentUploadSerializer,
    EmployeeDocumentSerializer,
    EmployeeDocumentTypeSerializer,
    EmployeeDocumentTypeWriteSerializer,
    EmployeeDocumentUploadSerializer,
    EmployeeEmailResponseSerializer,
    EmployeeEmailSerializer,
    EmployeeSerializer,
    EmployeeWriteSerializer,
    SignedUrlSerializer,
)
from bhp_core.compliance.models import (
    Credential,
    Document,
    DocumentCategory,
    Employee,
    EmployeeDocument,
    EmployeeDocumentType,
)
from bhp_core.compliance.selectors import (
    DocumentFilter,
    categories_for_actor,
    credentials_for_actor,
    documents_for_actor,
    employee_document_types_for_actor,
    employee_documents_for_actor,
    employees_for_actor,
)
from bhp_core.compliance.services import (
    CredentialService,
    DocumentCategoryService,
    DocumentService,
    EmployeeDocumentService,
    EmployeeDocumentTypeService,
    EmployeeService,
)
from bhp_core.iam.actor import Actor, BHRFActor, get_actor

UPLOAD_PARSERS = [MultiPartParser, FormParser, JSONParser]


def _signed_url_response(url: str) -> Response:
    return Response({"url": url, "expires_in": settings.SIGNED_URL_TTL_SECONDS}, status=status.HTTP_200_OK)


def _facility_for(actor: Actor, requested_id):
    """
    A BHRF always works in its own facility; a BHP must name one.
    """
    if isinstance(actor, BHRFActor):
        return actor.facility_id
    if not requested_id:
        raise ValidationError({"facility_id": "This field is required."})
    return requested_id


# -----------------------------
# Credentials
# -----------------------------

@extend_schema(tags=["Compliance"])
class CredentialViewSet(viewsets.GenericViewSet):
    permission_classes = [CredentialPermission]
    serializer_class = CredentialSerializer
    parser_classes = UPLOAD_PARSERS
    queryset = Credential.objects.none()

    def list(self, request):
        qs = credentials_for_actor(get_actor(request))
        return paginate(request, qs, CredentialSerializer, paginator=self.paginator)

    def retrieve(self, request, pk=None):
        credential = get_authorized(Credential.objects.all(), pk=pk, actor=get_actor(request))
        return Response(CredentialSerializer(credential).data, status=status.HTTP_200_OK)

    @extend_schema(request=CredentialUploadSerializer, responses={201: CredentialSerializer})
    def create(self, request):
        ser = CredentialUploadSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        credential = CredentialService.upload(
            actor=get_actor(request),
            uploaded_file=data.pop("file"),
            meta=RequestMeta.from_request(request),
            **data,
        )
        return Response(CredentialSerializer(credential).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=CredentialUpdateSerializer, responses={200: CredentialSerializer})
    def partial_update(self, request, pk=None):
        ser = CredentialUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        credential = CredentialService.update(
            actor=get_actor(request),
            credential_id=pk,
            changes=ser.validated_data,
            meta=RequestMeta.from_request(request),
        )
        return Response(CredentialSerializer(credential).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        CredentialService.delete(actor=get_actor(request), credential_id=pk, meta=RequestMeta.from_request(request))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: SignedUrlSerializer})
    @action(detail=True, methods=["get"])
    def download(self, request, pk=None):
        return _signed_url_response(CredentialService.download_url(actor=get_actor(request), credential_id=pk))


# -----------------------------
# Document categories
# -----------------------------

@extend_schema(tags=["Compliance"])
class DocumentCategoryViewSet(viewsets.GenericViewSet):
    permission_classes = [DocumentCategoryPermission]
    serializer_class = DocumentCategorySerializer
    queryset = DocumentCategory.objects.none()

    def list(self, request):
        qs = categories_for_actor(get_actor(request))
        return paginate(request, qs, DocumentCategorySerializer, paginator=self.paginator)

    @extend_schema(request=DocumentCategoryWriteSerializer, responses={201: DocumentCategorySerializer})
    def create(self, request):
        ser = DocumentCategoryWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        category = DocumentCategoryService.create(
            actor=get_actor(request),
            meta=RequestMeta.from_request(request),
            **ser.validated_data,
        )
        return Response(DocumentCategorySerializer(category).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=DocumentCategoryWriteSerializer, responses={200: DocumentCategorySerializer})
    def partial_update(self, request, pk=None):
        ser = DocumentCategoryWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        category = DocumentCategoryService.update(
            actor=get_actor(request),
            category_id=pk,
            changes=ser.validated_data,
            meta=RequestMeta.from_request(request),
        )
        return Response(DocumentCategorySerializer(category).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        DocumentCategoryService.deactivate(
            actor=get_actor(request),
            category_id=pk,
            meta=RequestMeta.from_request(request),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


# -----------------------------
# Documents
# -----------------------------

@extend_schema(tags=["Compliance"])
class DocumentViewSet(viewsets.GenericViewSet):
    permission_classes = [DocumentPermission]
    serializer_class = DocumentSerializer
    parser_classes = UPLOAD_PARSERS
    queryset = Document.objects.none()

    def list(self, request):
        filterset = DocumentFilter(request.query_params, queryset=documents_for_actor(get_actor(request)))
        if not filterset.is_valid():
            raise ValidationError(filterset.errors)
        return paginate(request, filterset.qs, DocumentSerializer, paginator=self.paginator)

    def retrieve(self, request, pk=None):
        document = get_authorized(
            Document.objects.select_related("facility", "category", "employee").prefetch_related("versions"),
            pk=pk,
            actor=get_actor(request),
        )
        return Response(DocumentDetailSerializer(document).data, status=status.HTTP_200_OK)

    @extend_schema(request=DocumentRequestSerializer, responses={201: DocumentSerializer})
    def create(self, request):
        ser = DocumentRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        document = DocumentService.request_document(
            actor=get_actor(request),
            meta=RequestMeta.from_request(request),
            **ser.validated_data,
        )
        return Response(DocumentSerializer(document).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=DocumentUploadSerializer, responses={201: DocumentSerializer})
    @action(detail=False, methods=["post"])
    def upload(self, request):
        actor = get_actor(request)
        ser = DocumentUploadSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)

        document = DocumentService.upload(
            actor=actor,
            facility_id=None if data.get("document_id") else _facility_for(actor, None),
            uploaded_file=data.pop("file"),
            meta=RequestMeta.from_request(request),
            **data,
        )
        return Response(DocumentSerializer(document).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        DocumentService.delete(actor=get_actor(request), document_id=pk, meta=RequestMeta.from_request(request))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: SignedUrlSerializer})
    @action(detail=True, methods=["get"])
    def download(self, request, pk=None):
        return _signed_url_response(DocumentService.download_url(actor=get_actor(request), document_id=pk))


# -----------------------------
# Employees
# -----------------------------

@extend_schema(tags=["Employees"])
class EmployeeViewSet(viewsets.GenericViewSet):
    permission_classes = [EmployeePermission]
    serializer_class = EmployeeSerializer
    queryset = Employee.objects.none()

    @extend_schema(
        parameters=[
            OpenApiParameter("facility", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("include_inactive", OpenApiTypes.BOOL, OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        qs = employees_for_actor(
            get_actor(request),
            facility_id=request.query_params.get("facility") or None,
            include_inactive=request.query_params.get("include_inactive") in {"1", "true", "True"},
        )
        return paginate(request, qs, EmployeeSerializer, paginator=self.paginator)

    def retrieve(self, request, pk=None):
        employee = get_authorized(Employee.objects.select_related("facility"), pk=pk, actor=get_actor(request))
        return Response(EmployeeSerializer(employee).data, status=status.HTTP_200_OK)

    @extend_schema(request=EmployeeWriteSerializer, responses={201: EmployeeSerializer})
    def create(self, request):
        actor = get_actor(request)
        ser = EmployeeWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        facility_id = _facility_for(actor, data.pop("facility_id", None))

        employee = EmployeeService.create(
            actor=actor,
            facility_id=facility_id,
            fields=data,
            meta=RequestMeta.from_request(request),
        )
        return Response(EmployeeSerializer(employee).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=EmployeeWriteSerializer, responses={200: EmployeeSerializer})
    def partial_update(self, request, pk=None):
        ser = EmployeeWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        data.pop("facility_id", None)

        employee = EmployeeService.update(
            actor=get_actor(request),
            employee_id=pk,
            changes=data,
            meta=RequestMeta.from_request(request),
        )
        return Response(EmployeeSerializer(employee).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        EmployeeService.deactivate(actor=get_actor(request), employee_id=pk, meta=RequestMeta.from_request(request))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=EmployeeEmailSerializer, responses={200: EmployeeEmailResponseSerializer})
    @action(detail=True, methods=["post"], url_path="send-email")
    def send_email(self, request, pk=None):
        ser = EmployeeEmailSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        recipients = EmployeeService.send_summary_email(
            actor=get_actor(request),
            employee_id=pk,
            additional_recipients=ser.validated_data["additional_recipients"],
            meta=RequestMeta.from_request(request),
        )
        return Response({"detail": "Email sent.", "recipients": recipients}, status=status.HTTP_200_OK)


@extend_schema(tags=["Employees"])
class EmployeeDocumentTypeViewSet(viewsets.GenericViewSet):
    permission_classes = [EmployeeDocumentTypePermission]
    serializer_class = EmployeeDocumentTypeSerializer
    queryset = EmployeeDocumentType.objects.none()

    def list(self, request):
        qs = employee_document_types_for_actor(get_actor(request))
        return paginate(request, qs, EmployeeDocumentTypeSerializer, paginator=self.paginator)

    @extend_schema(request=EmployeeDocumentTypeWriteSerializer, responses={201: EmployeeDocumentTypeSerializer})
    def create(self, request):
        actor = get_actor(request)
        ser = EmployeeDocumentTypeWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        doc_type = EmployeeDocumentTypeService.create(
            actor=actor,
            facility_id=_facility_for(actor, None),
            meta=RequestMeta.from_request(request),
            **ser.validated_data,
        )
        return Response(EmployeeDocumentTypeSerializer(doc_type).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=EmployeeDocumentTypeWriteSerializer, responses={200: EmployeeDocumentTypeSerializer})
    def partial_update(self, request, pk=None):
        ser = EmployeeDocumentTypeWriteSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        doc_type = EmployeeDocumentTypeService.update(
            actor=get_actor(request),
            doc_type_id=pk,
            changes=ser.validated_data,
            meta=RequestMeta.from_request(request),
        )
        return Response(EmployeeDocumentTypeSerializer(doc_type).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        EmployeeDocumentTypeService.deactivate(
            actor=get_actor(request),
            doc_type_id=pk,
            meta=RequestMeta.from_request(request),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(tags=["Employees"])
class EmployeeDocumentViewSet(viewsets.GenericViewSet):
    permission_classes = [EmployeeDocumentPermission]
    serializer_class = EmployeeDocumentSerializer
    queryset = EmployeeDocument.objects.none()
    parser_classes = UPLOAD_PARSERS

    @extend_schema(
        parameters=[OpenApiParameter("employee", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False)],
    )
    def list(self, request):
        qs = employee_documents_for_actor(get_actor(request), employee_id=request.query_params.get("employee") or None)
        return paginate(request, qs, EmployeeDocumentSerializer, paginator=self.paginator)

    @extend_schema(request=EmployeeDocumentUploadSerializer, responses={201: EmployeeDocumentSerializer})
    def create(self, request):
        ser = EmployeeDocumentUploadSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        document = EmployeeDocumentService.upload(
            actor=get_actor(request),
            uploaded_file=data.pop("file"),
            meta=RequestMeta.from_request(request),
            **data,
        )
        return Response(EmployeeDocumentSerializer(document).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, pk=None):
        EmployeeDocumentService.delete(
            actor=get_actor(request),
            document_id=pk,
            meta=RequestMeta.from_request(request),
        )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses={200: SignedUrlSerializer})
    @action(detail=True, methods=["get"])
    def download(self, request, pk=None):
        url = EmployeeDocumentService.download_url(actor=get_actor(request), document_id=pk)
        return _signed_url_response(url)
