# bhp_core/intakes/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema, extend_schema_view

from bhp_core.intakes.api.serializers import IntakeSerializer, IntakeWriteSerializer
from bhp_core.intakes.models import Intake
from bhp_core.intakes.pdf import render_intake
from bhp_core.intakes.selectors import IntakeFilter, intakes_for_actor
from bhp_core.intakes.services import IntakeService
from bhp_core.workflow.views import WorkflowDocumentViewSet


@extend_schema_view(
    create=extend_schema(request=IntakeWriteSerializer),
    partial_update=extend_schema(request=IntakeWriteSerializer),
    submit=extend_schema(request=IntakeWriteSerializer),
)
@extend_schema(tags=["Intakes"])
class IntakeViewSet(WorkflowDocumentViewSet):
    """
    Resident intakes: authored by the facility's BHRF, decided by its BHP.
    Submitted and decided intakes are read-only.
    """
    service = IntakeService
    serializer_class = IntakeSerializer
    write_serializer_class = IntakeWriteSerializer
    filterset_class = IntakeFilter
    queryset = Intake.objects.none()
    pdf_filename = "intake"

    def base_queryset(self, actor):
        return intakes_for_actor(actor)

    def render_pdf(self, doc) -> bytes:
        return render_intake(doc)
