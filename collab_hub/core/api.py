"""DRF glue: the ``success`` envelope, pagination and the exception handler."""

from __future__ import annotations

import logging
import math
from typing import Any

from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def envelope(**data: Any) -> dict[str, Any]:
    """Wrap a successful payload as ``{"success": true, ...}``."""

    return {"success": True, **data}


def failure(message: str, detail: Any | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"success": False, "message": message}
    if detail is not None:
        payload["detail"] = detail
    return payload


def envelope_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        # Unhandled: let Django produce the 500 and log it.
        return None

    data = response.data
    if isinstance(exc, DRFValidationError) and not isinstance(data, list | str):
        message = "Invalid request data"
        detail = data
    elif isinstance(data, dict) and "detail" in data:
        message = str(data["detail"])
        detail = None
    else:
        message = str(getattr(exc, "detail", exc))
        detail = data

    if response.status_code >= 500:  # noqa: PLR2004
        logger.error("API error on %s: %s", context.get("view"), message)
    response.data = failure(message, detail)
    return response


class PageLimitPagination(PageNumberPagination):
    """``page``/``limit`` pagination (skip = (page - 1) * limit)."""

    page_size_query_param = "limit"
    max_page_size = 100
    results_key = "results"

    def get_paginated_response(self, data):
        return Response(envelope(**{self.results_key: data}, **self.get_meta()))

    def get_meta(self) -> dict[str, Any]:
        page = self.page
        total = page.paginator.count
        limit = page.paginator.per_page
        return {
            "pagination": {
                "page": page.number,
                "limit": limit,
                "total": total,
                "total_pages": math.ceil(total / limit) if limit else 0,
                "has_more": page.has_next(),
            },
        }

    def get_paginated_response_schema(self, schema):
        return {
            "type": "object",
            "required": ["success", self.results_key, "pagination"],
            "properties": {
                "success": {"type": "boolean"},
                self.results_key: schema,
                "pagination": {
                    "type": "object",
                    "properties": {
                        "page": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "total": {"type": "integer"},
                        "total_pages": {"type": "integer"},
                        "has_more": {"type": "boolean"},
                    },
                },
            },
        }
