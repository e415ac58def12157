# apps/common/pagination.py
"""
Page/limit pagination for service-level list helpers.

List endpoints accept ``?page=`` and ``?limit=`` query parameters and return:

    {
        "<items>": [...],
        "pagination": {"page": 2, "limit": 20, "total": 45, "pages": 3}
    }

The helpers live in the service layer so the same metadata is produced
whether a list is requested over HTTP or from a management command.
"""

import math

from .validators import clean_page

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def paginate_queryset(queryset, page=1, limit=DEFAULT_LIMIT):
    """
    Slice ``queryset`` for the requested page.

    Returns:
        tuple: (list of objects, pagination dict)
    """
    page, limit = clean_page(page, limit, max_limit=MAX_LIMIT)
    total = queryset.count()
    offset = (page - 1) * limit
    items = list(queryset[offset:offset + limit])
    return items, {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": math.ceil(total / limit) if total else 0,
    }


def page_params(request, default_limit=DEFAULT_LIMIT):
    """Read ``page`` and ``limit`` from a DRF request's query string."""
    return (
        request.query_params.get("page", 1),
        request.query_params.get("limit", default_limit),
    )
