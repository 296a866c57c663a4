import math

from django.conf import settings
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class StandardPagination(PageNumberPagination):
    """
    `page`/`limit` paging that returns the collection under `results_key`
    next to a `pagination` block: {page, limit, total, pages}.
    """

    page_size = settings.DEFAULT_PAGE_SIZE
    page_size_query_param = "limit"
    max_page_size = settings.MAX_PAGE_SIZE
    results_key = "results"

    def get_paginated_response(self, data):
        total = self.page.paginator.count
        limit = self.page.paginator.per_page
        return Response(
            {
                self.results_key: data,
                "pagination": {
                    "page": self.page.number,
                    "limit": limit,
                    "total": total,
                    "pages": math.ceil(total / limit) if limit else 0,
                },
            }
        )
