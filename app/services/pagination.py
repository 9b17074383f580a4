"""Page/limit slicing shared by list endpoints"""
import math
from typing import Any, Callable, Dict

from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Query


def paginate(query: Query, page: int, limit: int, items_key: str, serialize: Callable[[Any], Dict[str, Any]]) -> Dict[str, Any]:
    """Return ``{items_key: [...], "pagination": {...}}`` as JSON-ready data.

    The result is passed through ``jsonable_encoder`` so that a cached copy
    and a freshly built one are indistinguishable to callers.
    """
    total = query.count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    return jsonable_encoder({
        items_key: [serialize(row) for row in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": math.ceil(total / limit) if limit else 0,
        },
    })
