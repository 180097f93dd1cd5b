"""Page/limit pagination for SQLAlchemy queries"""

import math
from typing import Any

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20


def clamp_limit(limit: int) -> int:
    return max(1, min(limit, MAX_PAGE_SIZE))


def paginate(query, page: int, limit: int) -> tuple[list[Any], int]:
    """Return (items, total) for a 1-based page; limit is capped at MAX_PAGE_SIZE"""
    limit = clamp_limit(limit)
    page = max(1, page)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, total


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / clamp_limit(limit)) if total else 0


def pagination_meta(total: int, page: int, limit: int) -> dict:
    pages = total_pages(total, limit)
    return {
        "total": total,
        "page": page,
        "limit": clamp_limit(limit),
        "totalPages": pages,
        "hasMore": page < pages,
    }
