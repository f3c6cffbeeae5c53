#!/usr/bin/env python3
"""
Seed script: creates users and a catalog of items via the API (no direct DB).
Every write goes through the ledger endpoints, so valuations come out consistent.
Run: API must be running.
  python scripts/seed_data.py
  python scripts/seed_data.py --users 20 --items-per-user 10 --price-updates 15
"""

import argparse
import random

import httpx

API_BASE = "http://localhost:8000/api/v1"

NAMES = [
    "Charizard Base Set", "Black Lotus", "Pikachu Illustrator", "Mox Sapphire",
    "Blue-Eyes White Dragon", "Lugia Neo Genesis", "LEGO Millennium Falcon 75192",
    "LEGO Death Star 10188", "Funko Pop Freddy", "Amiibo Gold Mario",
    "Game Boy Color Atomic Purple", "Nintendo 64 Funtastic", "Sealed Pokemon Booster Box",
    "Time Walk", "Umbreon VMAX Alt Art", "Rolex Submariner 16610",
]


def random_price() -> int:
    return random.choice([499, 999, 1999, 4999, 9999, 19999, 49999, 99999])


def main():
    ap = argparse.ArgumentParser(description="Seed users, items and price history via API")
    ap.add_argument("--users", type=int, default=10, help="Number of users to create")
    ap.add_argument("--items-per-user", type=int, default=5, help="Items submitted per user")
    ap.add_argument("--price-updates", type=int, default=10, help="Random price updates per user")
    ap.add_argument("--base-url", default=API_BASE, help="API base URL")
    args = ap.parse_args()

    errors = []
    submitted = 0

    with httpx.Client(base_url=args.base_url, timeout=30.0) as client:
        print(f"Creating {args.users} users...")
        tokens = []
        for i in range(args.users):
            email = f"collector{i+1}@example.com"
            password = "password123"
            r = client.post("/users/register", json={
                "email": email,
                "password": password,
                "full_name": f"Collector {i+1}",
            })
            if r.status_code not in (201, 409):
                errors.append(f"Register {email}: {r.status_code} {r.text[:80]}")
                continue
            r = client.post("/users/login", json={"email": email, "password": password})
            if r.status_code != 200:
                errors.append(f"Login {email}: {r.status_code}")
                continue
            tokens.append(r.json()["access_token"])

        print(f"Submitting ~{len(tokens) * args.items_per_user} items...")
        for token in tokens:
            headers = {"Authorization": f"Bearer {token}"}
            item_ids = []
            for _ in range(args.items_per_user):
                r = client.put("/collection", headers=headers, json={
                    "name": random.choice(NAMES),
                    "image": "https://example.com/placeholder.png",
                    "url": "https://example.com/item",
                    "price_cents": random_price(),
                    "count": random.randint(1, 3),
                })
                if r.status_code == 201:
                    submitted += 1
                    item_ids.append(r.json()["id"])
                else:
                    errors.append(f"Submit: {r.status_code} {r.text[:80]}")

            for _ in range(args.price_updates if item_ids else 0):
                r = client.patch("/collection/price", headers=headers, json={
                    "item_id": random.choice(item_ids),
                    "price_cents": random_price(),
                })
                if r.status_code != 200:
                    errors.append(f"Price update: {r.status_code} {r.text[:80]}")

    print(f"\nDone. Users: {len(tokens)}, Items submitted: {submitted}")
    if errors:
        print(f"Errors ({len(errors)}):")
        for e in errors[:15]:
            print("  ", e)
        if len(errors) > 15:
            print("  ... and", len(errors) - 15, "more")


if __name__ == "__main__":
    main()
