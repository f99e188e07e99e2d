# File: common/utils/pagination.py

from math import ceil
from typing import Any, List, Dict, Tuple


def clamp_pagination(page: Any, limit: Any, default_limit: int = 20, max_limit: int = 100) -> Tuple[int, int, int]:
    """
    Normalize raw page/limit values into safe integers.

    Non-numeric values fall back to the defaults, limit is clamped to
    [1, max_limit] and page is at least 1.

    Returns:
        Tuple[int, int, int]: (page, limit, skip)
    """
    try:
        limit_num = int(limit)
    except (TypeError, ValueError):
        limit_num = default_limit
    if limit_num <= 0:
        limit_num = default_limit
    limit_num = min(limit_num, max_limit)

    try:
        page_num = int(page)
    except (TypeError, ValueError):
        page_num = 1
    page_num = max(page_num, 1)

    return page_num, limit_num, (page_num - 1) * limit_num


def paginate_response(
    items: List[Any],
    total: int,
    page: int = 1,
    limit: int = 20,
    items_key: str = "items"
) -> Dict[str, Any]:
    """
    Build a standard pagination response.

    Args:
        items (List[Any]): List of results.
        total (int): Total number of items.
        page (int): Current page number.
        limit (int): Number of items per page.
        items_key (str): Key under which the items are returned.

    Returns:
        Dict[str, Any]: Standardized paginated response.
    """
    return {
        items_key: items,
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": ceil(total / limit) if limit > 0 else 0
        }
    }
