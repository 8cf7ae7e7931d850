from __future__ import annotations

from typing import Any, Optional

from django.utils.timezone import now
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class DefaultPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 200


def list_context(request, extra: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    # one clock reading per response, so every row's compliance status agrees
    context = {"request": request, "now": now()}
    if extra:
        context.update(extra)
    return context


def paginate(
    request,
    queryset,
    serializer_class,
    *,
    paginator: Optional[PageNumberPagination] = None,
    context: Optional[dict[str, Any]] = None,
) -> Response:
    """
    List response for GenericViewSet endpoints: {count, next, previous, results}.
    Falls back to a bare list when the paginator declines the request.
    """
    pager = paginator or DefaultPagination()
    ctx = list_context(request, context)

    rows = pager.paginate_queryset(queryset, request)
    if rows is None:
        return Response(serializer_class(queryset, many=True, context=ctx).data)
    return pager.get_paginated_response(serializer_class(rows, many=True, context=ctx).data)
