"""
Search endpoint - Elasticsearch full-text search over listed items.
Falls back to an empty result when Elasticsearch is down.
"""

from fastapi import APIRouter, Query

from rewear.config import get_settings
from rewear.core.enums import Category
from rewear.search.elasticsearch_client import search_items

router = APIRouter()
settings = get_settings()


@router.get("/items")
async def search_items_endpoint(
    q: str = Query(..., min_length=1),
    category: Category | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=settings.max_page_size),
):
    """Full-text search on title, description, brand and tags."""
    hits = await search_items(
        query=q, category=category.value if category else None, skip=skip, limit=limit
    )
    return {"query": q, "results": hits, "count": len(hits)}
