# tourportal/services/pagination.py
import math
from typing import Any, Dict, List, Tuple

from sqlalchemy.orm import Query

from tourportal.core.config import DEFAULT_PAGE_SIZE

MAX_PAGE_SIZE = 100


def clamp(page: int, limit: int) -> Tuple[int, int]:
    page = max(page or 1, 1)
    limit = min(max(limit or DEFAULT_PAGE_SIZE, 1), MAX_PAGE_SIZE)
    return page, limit


def paginate(query: Query, page: int, limit: int) -> Tuple[List[Any], Dict[str, int]]:
    """Slice `query` for one page and report totals the way admin tables expect."""
    page, limit = clamp(page, limit)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, {
        "total": total,
        "pages": math.ceil(total / limit) if total else 0,
        "page": page,
        "limit": limit,
    }
