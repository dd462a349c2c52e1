# backend/pagination.py

"""
Page-number pagination returning the envelope used by list endpoints:

    {"success": true, "data": {"<key>": [...], "pagination": {...}}}

`limit` overrides the page size (capped); `page` selects the page.
"""

from rest_framework.pagination import PageNumberPagination

from backend.responses import ok


class EnvelopePagination(PageNumberPagination):
    page_size = 10
    page_size_query_param = "limit"
    max_page_size = 100

    # key under which the current page's rows are returned
    results_key = "results"

    def get_paginated_response(self, data):
        page = self.page
        return ok(
            {
                self.results_key: data,
                "pagination": {
                    "current": page.number,
                    "pages": page.paginator.num_pages,
                    "total": page.paginator.count,
                    "limit": page.paginator.per_page,
                },
            }
        )

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "properties": {
                "success": {"type": "boolean"},
                "message": {"type": "string"},
                "data": {
                    "type": "object",
                    "properties": {
                        self.results_key: schema,
                        "pagination": {
                            "type": "object",
                            "properties": {
                                "current": {"type": "integer"},
                                "pages": {"type": "integer"},
                                "total": {"type": "integer"},
                                "limit": {"type": "integer"},
                            },
                        },
                    },
                },
            },
        }


def paginator_for(key: str):
    """Return a pagination class that nests rows under `key`."""
    return type(f"{key.title()}Pagination", (EnvelopePagination,), {"results_key": key})
