# bhp_core/workflow/views.py
from __future__ import annotations

from typing import Type

from django.http import HttpResponse
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from bhp_core.audit.services import RequestMeta
from bhp_core.common.api.pagination import paginate
from bhp_core.common.permissions import get_authorized
from bhp_core.iam.actor import Actor, BHRFActor, get_actor
from bhp_core.iam.gate import Action
from bhp_core.workflow.machine import DocumentStatus
from bhp_core.workflow.permissions import WorkflowDocumentPermission
from bhp_core.workflow.serializers import WorkflowDecisionSerializer
from bhp_core.workflow.services import WorkflowDocumentService


class WorkflowDocumentViewSet(viewsets.GenericViewSet):
    """
    Shared HTTP surface for workflow documents:
      list / retrieve / create / partial_update, plus submit, decide and pdf.

    Subclasses provide the service, serializers, filterset, the actor-scoped
    base queryset and the PDF renderer.
    """
    permission_classes = [WorkflowDocumentPermission]

    service: Type[WorkflowDocumentService]
    write_serializer_class = None
    filterset_class = None
    pdf_filename = "document"

    def base_queryset(self, actor: Actor):
        raise NotImplementedError

    def render_pdf(self, doc) -> bytes:
        raise NotImplementedError

    def _get_doc(self, request, pk):
        qs = self.service.model.objects.select_related("facility")
        return get_authorized(qs, pk=pk, actor=get_actor(request), action=Action.READ)

    def _write_data(self, request, *, partial: bool) -> dict:
        ser = self.write_serializer_class(data=request.data, partial=partial)
        ser.is_valid(raise_exception=True)
        return dict(ser.validated_data)

    def _respond(self, doc, http_status=status.HTTP_200_OK) -> Response:
        return Response(self.get_serializer(doc).data, status=http_status)

    # ----------------------------
    # Reads
    # ----------------------------
    def list(self, request):
        qs = self.base_queryset(get_actor(request))
        if self.filterset_class is not None:
            filterset = self.filterset_class(request.query_params, queryset=qs)
            if not filterset.is_valid():
                raise ValidationError(filterset.errors)
            qs = filterset.qs
        return paginate(request, qs, self.get_serializer_class(), paginator=self.paginator)

    def retrieve(self, request, pk=None):
        return self._respond(self._get_doc(request, pk))

    # ----------------------------
    # Author
    # ----------------------------
    def create(self, request):
        actor = get_actor(request)
        data = self._write_data(request, partial=False)
        submit = bool(data.pop("submit", False))
        facility_id = actor.facility_id if isinstance(actor, BHRFActor) else None

        doc = self.service.create(
            actor=actor,
            facility_id=facility_id,
            fields=data,
            submit=submit,
            meta=RequestMeta.from_request(request),
        )
        return self._respond(doc, status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        actor = get_actor(request)
        current = self._get_doc(request, pk)
        data = self._write_data(request, partial=True)
        data.pop("submit", None)
        meta = RequestMeta.from_request(request)

        if current.status == DocumentStatus.DRAFT:
            doc = self.service.save_draft(actor=actor, doc_id=pk, changes=data, meta=meta)
        else:
            doc = self.service.edit(actor=actor, doc_id=pk, changes=data, meta=meta)
        return self._respond(doc)

    @action(detail=True, methods=["post"])
    def submit(self, request, pk=None):
        data = self._write_data(request, partial=True)
        data.pop("submit", None)
        doc = self.service.submit(
            actor=get_actor(request),
            doc_id=pk,
            changes=data,
            meta=RequestMeta.from_request(request),
        )
        return self._respond(doc)

    # ----------------------------
    # Decider
    # ----------------------------
    @extend_schema(request=WorkflowDecisionSerializer)
    @action(detail=True, methods=["post"])
    def decide(self, request, pk=None):
        ser = WorkflowDecisionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        doc = self.service.decide(
            actor=get_actor(request),
            doc_id=pk,
            decision=ser.validated_data["status"],
            reason=ser.validated_data.get("decision_reason"),
            meta=RequestMeta.from_request(request),
        )
        return self._respond(doc)

    @extend_schema(responses={(200, "application/pdf"): OpenApiTypes.BINARY})
    @action(detail=True, methods=["get"])
    def pdf(self, request, pk=None):
        doc = self._get_doc(request, pk)
        content = self.render_pdf(doc)
        self.service.record_pdf_download(actor=get_actor(request), doc=doc, meta=RequestMeta.from_request(request))

        response = HttpResponse(content, content_type="application/pdf")
        response["Content-Disposition"] = f'attachment; filename="{self.pdf_filename}-{doc.id}.pdf"'
        return response
