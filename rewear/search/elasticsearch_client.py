"""
Elasticsearch client - full-text search over listed items.
Async helpers serve the API; sync helpers are used by Celery workers
(no event loop in a forked worker). Search degrades to [] when ES is down.
"""

import logging
from typing import Any
from urllib.parse import urlparse

from elasticsearch import AsyncElasticsearch, Elasticsearch

from rewear.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

ITEMS_INDEX = "items"

_es_client: AsyncElasticsearch | None = None


def _es_client_options() -> dict:
    """Build client options from settings (supports HTTPS + basic auth in URL)."""
    url = settings.elasticsearch_url
    basic_auth = None
    if "@" in url and "://" in url:
        parsed = urlparse(url)
        if parsed.username and parsed.password:
            basic_auth = (parsed.username, parsed.password)
        # The client takes credentials separately
        netloc = parsed.hostname or ""
        if parsed.port:
            netloc += f":{parsed.port}"
        url = f"{parsed.scheme}://{netloc}"
    opts = {
        "hosts": [url],
        "verify_certs": settings.elasticsearch_verify_certs,
        "request_timeout": 30,
    }
    if basic_auth:
        opts["basic_auth"] = basic_auth
    return opts


async def get_elasticsearch() -> AsyncElasticsearch:
    global _es_client
    if _es_client is None:
        _es_client = AsyncElasticsearch(**_es_client_options())
    return _es_client


async def close_elasticsearch() -> None:
    global _es_client
    if _es_client is not None:
        await _es_client.close()
        _es_client = None


def items_index_mappings() -> dict:
    """Mapping for the items index (shared by async and sync create)."""
    return {
        "properties": {
            "id": {"type": "integer"},
            "title": {"type": "text", "analyzer": "standard"},
            "description": {"type": "text", "analyzer": "standard"},
            "brand": {"type": "text", "analyzer": "standard"},
            "tags": {"type": "keyword"},
            "category": {"type": "keyword"},
            "size": {"type": "keyword"},
            "condition": {"type": "keyword"},
            "points_required": {"type": "integer"},
            "owner_id": {"type": "integer"},
            "primary_image": {"type": "keyword", "index": False},
            "created_at": {"type": "date"},
        }
    }


async def ensure_items_index() -> None:
    """Create items index if missing. Single-node: 0 replicas to avoid unassigned shards."""
    es = await get_elasticsearch()
    if not await es.indices.exists(index=ITEMS_INDEX):
        await es.indices.create(
            index=ITEMS_INDEX,
            settings={"index": {"number_of_replicas": 0}},
            mappings=items_index_mappings(),
        )


async def search_items(
    query: str, *, category: str | None = None, skip: int = 0, limit: int = 20
) -> list[dict[str, Any]]:
    """Full-text search on title, description, brand and tags. Returns source documents."""
    must: list[dict] = [
        {
            "multi_match": {
                "query": query,
                "fields": ["title^2", "description", "brand", "tags"],
                "fuzziness": "AUTO",
            }
        }
    ]
    filters: list[dict] = []
    if category:
        filters.append({"term": {"category": category}})
    try:
        es = await get_elasticsearch()
        response = await es.search(
            index=ITEMS_INDEX,
            query={"bool": {"must": must, "filter": filters}},
            from_=skip,
            size=limit,
        )
        body = getattr(response, "body", response)
        hits = body["hits"]["hits"]
        if not hits:
            logger.info("search_items: query=%r returned 0 hits", query)
        return [hit["_source"] for hit in hits]
    except Exception as e:
        logger.warning("search_items failed: query=%r error=%s", query, e)
        return []


# --- Sync API for Celery workers ---

def sync_es_client() -> Elasticsearch:
    """New sync client per call (safe in forked Celery worker)."""
    return Elasticsearch(**_es_client_options())


def ensure_items_index_sync(es: Elasticsearch) -> None:
    if not es.indices.exists(index=ITEMS_INDEX):
        es.indices.create(
            index=ITEMS_INDEX,
            settings={"index": {"number_of_replicas": 0}},
            mappings=items_index_mappings(),
        )


def index_item_sync(doc: dict[str, Any]) -> None:
    """Index one item document. ES 8 expects the id as str. Raises on failure."""
    es = sync_es_client()
    ensure_items_index_sync(es)
    payload = {k: v for k, v in doc.items() if v is not None}
    es.index(index=ITEMS_INDEX, id=str(doc["id"]), document=payload)


def remove_item_sync(item_id: int) -> None:
    """Remove an item from the index; missing documents are fine."""
    es = sync_es_client()
    es.options(ignore_status=404).delete(index=ITEMS_INDEX, id=str(item_id))
