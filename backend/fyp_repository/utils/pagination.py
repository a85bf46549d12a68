"""
Pagination Utility Module

Offset pagination used by every list endpoint. Responses carry
{"items": [...], "pagination": {"total", "page", "pages", "limit"}}.
"""
import math
from typing import List, Any, Optional

from pydantic import BaseModel
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from fyp_repository.core.config import settings


class PaginationMeta(BaseModel):
    """Pagination block of a list response"""
    total: int
    page: int
    pages: int
    limit: int


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    limit: Optional[int] = None,
    count_query: Optional[Select] = None
) -> dict:
    """
    Apply pagination to a SQLAlchemy query.

    Args:
        db: Database session
        query: Base SQLAlchemy query (already ordered)
        page: Page number (1-indexed)
        limit: Items per page (defaults to PAGE_SIZE)
        count_query: Optional custom count query

    Returns:
        Dictionary with items and a pagination block
    """
    page = max(1, page)
    limit = limit or settings.PAGE_SIZE
    offset = (page - 1) * limit

    if count_query is None:
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_query)).scalar() or 0

    result = await db.execute(query.offset(offset).limit(limit))
    items = result.scalars().all()

    return create_paginated_response(list(items), total, page, limit)


def create_paginated_response(
    items: List[Any],
    total: int,
    page: int,
    limit: int
) -> dict:
    """Build the {items, pagination} payload"""
    return {
        "items": items,
        "pagination": PaginationMeta(
            total=total,
            page=page,
            pages=total_pages(total, limit),
            limit=limit,
        ),
    }
