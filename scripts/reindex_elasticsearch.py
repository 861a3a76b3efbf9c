#!/usr/bin/env python3
"""
Reindex all listed items into Elasticsearch via Celery.
Use this after fixing the worker or when the index was empty; no new data is created.
Requires: API running (to fetch items). Celery worker must be running to process the queue.

If you get 503 / no_shard_available from Elasticsearch, delete the broken index and reindex:
  python scripts/reindex_elasticsearch.py --reset-index

  python scripts/reindex_elasticsearch.py
  python scripts/reindex_elasticsearch.py --base-url http://localhost:8000/api/v1
"""

import argparse
import sys

import httpx

from rewear.queue.tasks import index_item_task
from rewear.search.elasticsearch_client import ITEMS_INDEX, sync_es_client

API_BASE = "http://localhost:8000/api/v1"
PAGE_SIZE = 50  # API max_page_size


def delete_items_index():
    """Delete the items index so Celery will recreate it with number_of_replicas=0 (single-node safe)."""
    es = sync_es_client()
    if es.indices.exists(index=ITEMS_INDEX):
        es.indices.delete(index=ITEMS_INDEX)
        print(f"Deleted index '{ITEMS_INDEX}'. Celery will recreate it when processing the first task.")
    else:
        print(f"Index '{ITEMS_INDEX}' does not exist (already deleted or never created).")


def to_doc(item: dict) -> dict:
    """Same fields the API queues on approval (see item_to_doc)."""
    return {
        "id": item["id"],
        "title": item["title"],
        "description": item["description"],
        "brand": item.get("brand"),
        "tags": item.get("tags", []),
        "category": item["category"],
        "size": item["size"],
        "condition": item["condition"],
        "points_required": item["points_required"],
        "owner_id": item["owner_id"],
        "primary_image": item.get("primary_image"),
        "created_at": item.get("created_at"),  # keep as-is (string from API)
    }


def main():
    ap = argparse.ArgumentParser(description="Enqueue all listed items for Elasticsearch reindex")
    ap.add_argument("--base-url", default=API_BASE, help="API base URL")
    ap.add_argument("--reset-index", action="store_true", help="Delete the items index first (fixes 503 / no_shard_available), then enqueue")
    args = ap.parse_args()

    if args.reset_index:
        delete_items_index()
        print()

    all_items = []
    with httpx.Client(base_url=args.base_url, timeout=30.0) as client:
        page = 1
        while True:
            r = client.get("/items", params={"page": page, "limit": PAGE_SIZE})
            if r.status_code != 200:
                print(f"Failed to fetch items: {r.status_code} {r.text[:200]}")
                sys.exit(1)
            body = r.json()
            all_items.extend(body["items"])
            if not body["pagination"]["has_next"]:
                break
            page += 1

    if not all_items:
        print("No listed items. Run seed_data.py first or approve pending listings.")
        return

    for it in all_items:
        index_item_task.delay(to_doc(it))

    print(f"Enqueued {len(all_items)} items for Elasticsearch reindex. Ensure Celery worker is running.")
    print("Wait a few seconds, then try: curl -s 'http://localhost:9200/items/_count?pretty'")


if __name__ == "__main__":
    main()
