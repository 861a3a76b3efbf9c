#!/usr/bin/env python3
"""
Seed script: creates users and clothing listings via the API (no direct DB).
Listings are uploaded as multipart with a placeholder image, so the media host
must be configured. Pass an admin account to approve the new listings as well.
Run: API must be running with RATE_LIMIT_ENABLED=false (login and registration
are limited per client). For ES indexing, run Celery worker as well.
  python scripts/seed_data.py
  python scripts/seed_data.py --users 20 --items-per-user 5 --admin-email admin@example.com --admin-password secret
"""

import argparse
import base64
import json
import random

import httpx

API_BASE = "http://localhost:8000/api/v1"

# 1x1 transparent PNG
PLACEHOLDER_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

GARMENTS = {
    "Tops": ["Linen shirt", "Striped tee", "Silk blouse", "Wool sweater"],
    "Bottoms": ["Slim jeans", "Cargo pants", "Pleated skirt", "Chino shorts"],
    "Dresses": ["Summer dress", "Wrap dress", "Maxi dress"],
    "Outerwear": ["Denim jacket", "Trench coat", "Puffer jacket", "Rain shell"],
    "Shoes": ["Leather boots", "Canvas sneakers", "Running shoes"],
    "Accessories": ["Wool scarf", "Leather belt", "Tote bag", "Beanie"],
    "Sportswear": ["Yoga leggings", "Track jacket", "Cycling jersey"],
}
BRANDS = ["Levi's", "Patagonia", "Uniqlo", "Zara", "H&M", "Nike", "Adidas", None]
COLORS = ["Black", "White", "Navy", "Olive", "Beige", "Red", "Grey"]
SIZES = ["XS", "S", "M", "L", "XL", "XXL"]
CONDITIONS = ["New", "Like New", "Good", "Fair"]
DESCRIPTIONS = [
    "Worn a handful of times, no stains or tears. Looking for a new home.",
    "Great everyday piece, still in excellent shape after a couple of seasons.",
    "Bought the wrong size and never wore it. Tags removed but otherwise new.",
    "Comfortable and durable. Some light wear on the cuffs, see photos.",
]


def random_listing() -> dict:
    category = random.choice(list(GARMENTS))
    data = {
        "title": random.choice(GARMENTS[category]),
        "description": random.choice(DESCRIPTIONS),
        "category": category,
        "size": "One Size" if category == "Accessories" else random.choice(SIZES),
        "condition": random.choice(CONDITIONS),
        "points_required": str(random.choice([5, 8, 10, 15, 20, 30])),
        "color": random.choice(COLORS),
        "tags": json.dumps(random.sample(["vintage", "casual", "summer", "winter", "eco", "workwear"], 2)),
        "swap_type": random.choice(["direct", "points", "both"]),
    }
    brand = random.choice(BRANDS)
    if brand:
        data["brand"] = brand
    return data


def login(client: httpx.Client, email: str, password: str) -> dict | None:
    r = client.post("/auth/login", json={"email": email, "password": password})
    if r.status_code != 200:
        return None
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


def main():
    ap = argparse.ArgumentParser(description="Seed users and listings via API")
    ap.add_argument("--users", type=int, default=10, help="Number of users to create")
    ap.add_argument("--items-per-user", type=int, default=4, help="Listings per user")
    ap.add_argument("--base-url", default=API_BASE, help="API base URL")
    ap.add_argument("--admin-email", help="Admin account used to approve the new listings")
    ap.add_argument("--admin-password")
    args = ap.parse_args()

    created_users = []
    created_items: list[int] = []
    errors = []

    with httpx.Client(base_url=args.base_url, timeout=30.0) as client:
        # 1) Create users
        print(f"Creating {args.users} users...")
        for i in range(args.users):
            email = f"swapper{i+1}@example.com"
            password = "password123"
            try:
                r = client.post("/auth/register", json={"email": email, "password": password, "name": f"Swapper {i+1}"})
                if r.status_code in (201, 409):
                    created_users.append({"email": email, "password": password})
                else:
                    errors.append(f"Register {email}: {r.status_code} {r.text[:80]}")
            except httpx.HTTPError as e:
                errors.append(f"Register {email}: {e}")

        # 2) Login and create listings per user
        print(f"Creating ~{len(created_users) * args.items_per_user} listings (login + multipart POST)...")
        for u in created_users:
            headers = login(client, u["email"], u["password"])
            if not headers:
                errors.append(f"Login {u['email']} failed")
                continue
            for _ in range(args.items_per_user):
                try:
                    r = client.post(
                        "/items",
                        headers=headers,
                        data=random_listing(),
                        files=[("images", ("placeholder.png", PLACEHOLDER_PNG, "image/png"))],
                    )
                    if r.status_code == 201:
                        created_items.append(r.json()["id"])
                    else:
                        errors.append(f"Item {u['email']}: {r.status_code} {r.text[:80]}")
                except httpx.HTTPError as e:
                    errors.append(str(e))

        # 3) Optionally approve everything that was created
        if args.admin_email and created_items:
            admin_headers = login(client, args.admin_email, args.admin_password or "")
            if not admin_headers:
                errors.append("Admin login failed; listings stay pending")
            else:
                approved = 0
                for item_id in created_items:
                    r = client.put(f"/admin/items/{item_id}/approve", headers=admin_headers)
                    if r.status_code == 200:
                        approved += 1
                    else:
                        errors.append(f"Approve {item_id}: {r.status_code}")
                print(f"Approved {approved} listings")

    print(f"\nDone. Users: {len(created_users)}, Listings created: {len(created_items)}")
    if errors:
        print(f"Errors ({len(errors)}):")
        for e in errors[:15]:
            print("  ", e)
        if len(errors) > 15:
            print("  ... and", len(errors) - 15, "more")
    print("\nTip: Run Celery worker so approved listings are indexed in Elasticsearch.")


if __name__ == "__main__":
    main()
