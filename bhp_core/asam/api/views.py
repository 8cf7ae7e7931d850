# bhp_core/asam/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.response import Response

from bhp_core.asam.api.serializers import ASAMAssessmentSerializer, ASAMWriteSerializer, EligibleIntakeSerializer
from bhp_core.asam.models import ASAMAssessment
from bhp_core.asam.pdf import render_assessment
from bhp_core.asam.selectors import ASAMFilter, assessments_for_actor, eligible_intakes as eligible_intakes_for
from bhp_core.asam.services import ASAMService
from bhp_core.iam.actor import get_actor
from bhp_core.workflow.views import WorkflowDocumentViewSet


@extend_schema_view(
    create=extend_schema(request=ASAMWriteSerializer),
    partial_update=extend_schema(request=ASAMWriteSerializer),
    submit=extend_schema(request=ASAMWriteSerializer),
)
@extend_schema(tags=["ASAM"])
class ASAMAssessmentViewSet(WorkflowDocumentViewSet):
    service = ASAMService
    serializer_class = ASAMAssessmentSerializer
    write_serializer_class = ASAMWriteSerializer
    filterset_class = ASAMFilter
    queryset = ASAMAssessment.objects.none()
    pdf_filename = "asam"

    def base_queryset(self, actor):
        return assessments_for_actor(actor)

    def render_pdf(self, doc) -> bytes:
        return render_assessment(doc)

    @extend_schema(responses={200: EligibleIntakeSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="eligible-intakes")
    def eligible_intakes(self, request):
        qs = eligible_intakes_for(get_actor(request))
        return Response(EligibleIntakeSerializer(qs, many=True).data, status=status.HTTP_200_OK)
