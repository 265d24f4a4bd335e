import math

from rest_framework.pagination import BasePagination
from rest_framework.response import Response

from common.config import get_config


def _positive_int(value, default, cutoff=None):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number < 1:
        return default
    if cutoff is not None:
        number = min(number, cutoff)
    return number


class PagePagination(BasePagination):
    """
    1-indexed ``?page=&limit=`` pagination.

    Out-of-range pages return an empty list rather than a 404, and the
    response always carries ``{total, page, limit, pages}``.
    """
    page_query_param = "page"
    limit_query_param = "limit"

    def paginate_queryset(self, queryset, request, view=None):
        config = get_config()
        self.page = _positive_int(request.query_params.get(self.page_query_param), 1)
        self.limit = _positive_int(
            request.query_params.get(self.limit_query_param),
            config.default_page_size,
            cutoff=config.max_page_size,
        )
        self.total = queryset.count()
        offset = (self.page - 1) * self.limit
        return list(queryset[offset:offset + self.limit])

    def get_pagination(self):
        return {
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "pages": math.ceil(self.total / self.limit),
        }

    def get_paginated_response(self, data, key="results"):
        return Response({
            "success": True,
            key: data,
            "pagination": self.get_pagination(),
        })
