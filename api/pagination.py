from __future__ import annotations

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class DefaultPagination(PageNumberPagination):
    """Default pagination with client page_size and a safe cap.

    - Default page_size: 10 (matches settings)
    - Client may request `?page_size=N` up to `max_page_size`
    - Responses carry a `pagination` block with the current page, the
      number of pages and the total count next to the usual links
    """

    page_size = 10
    page_size_query_param = "page_size"
    max_page_size = 100

    def get_paginated_response(self, data):
        paginator = self.page.paginator
        return Response(
            {
                "count": paginator.count,
                "next": self.get_next_link(),
                "previous": self.get_previous_link(),
                "pagination": {
                    "current_page": self.page.number,
                    "total_pages": paginator.num_pages if paginator.count else 0,
                    "total_count": paginator.count,
                },
                "results": data,
            }
        )

    def get_paginated_response_schema(self, schema):
        schema = super().get_paginated_response_schema(schema)
        schema["properties"]["pagination"] = {
            "type": "object",
            "properties": {
                "current_page": {"type": "integer", "example": 1},
                "total_pages": {"type": "integer", "example": 3},
                "total_count": {"type": "integer", "example": 25},
            },
        }
        return schema
