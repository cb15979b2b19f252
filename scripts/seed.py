#!/usr/bin/env python3
"""Seed database with sample data.

Creates:
- Members (password "password" for all of them)
- Stores around central Toronto with tags
- Reviews, so that /top has something to rank

The script goes through the repositories, so slugs, e-mail normalisation and
validation behave exactly as in the app. It is idempotent: existing members
and stores (by e-mail / slug) are skipped.

Usage:
    python -m scripts.seed
"""

import asyncio
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import create_async_engine

from storefinder.errors import DuplicateEmailError, NotFoundError
from storefinder.models import Store, User
from storefinder.services.review_repository import ReviewRepository
from storefinder.services.slugs import slugify
from storefinder.services.store_repository import StoreRepository
from storefinder.services.user_repository import UserRepository
from storefinder.settings import Settings
from storefinder.stores.postgres import build_session_factory

load_dotenv()

SEED_PASSWORD = "password"

USERS = [
    {"email": "wes@example.com", "name": "Wes"},
    {"email": "debbie@example.com", "name": "Debbie"},
    {"email": "beau@example.com", "name": "Beau"},
]

STORES = [
    {
        "author": "wes@example.com",
        "name": "Cafe Blue",
        "description": "Pour-over coffee and fresh croissants in a small blue room.",
        "tags": ["Wifi", "Open Late", "Family Friendly"],
        "address": "120 King St W, Toronto, ON",
        "lng": -79.3832,
        "lat": 43.6487,
    },
    {
        "author": "wes@example.com",
        "name": "Kensington Bakery",
        "description": "Sourdough, rye and cinnamon buns baked every morning.",
        "tags": ["Family Friendly", "Vegetarian"],
        "address": "181 Baldwin St, Toronto, ON",
        "lng": -79.4003,
        "lat": 43.6547,
    },
    {
        "author": "debbie@example.com",
        "name": "The Night Owl",
        "description": "Cocktails, board games and a late kitchen.",
        "tags": ["Open Late", "Licensed"],
        "address": "1 Dundas St W, Toronto, ON",
        "lng": -79.3807,
        "lat": 43.6561,
    },
    {
        "author": "debbie@example.com",
        "name": "Green Bowl",
        "description": "Salads and grain bowls with a vegan menu.",
        "tags": ["Vegetarian", "Wifi"],
        "address": "250 Front St W, Toronto, ON",
        "lng": -79.3871,
        "lat": 43.6447,
    },
    {
        "author": "beau@example.com",
        "name": "Harbour Fish & Chips",
        "description": "Haddock, halibut and hand-cut chips by the lake.",
        "tags": ["Licensed", "Family Friendly"],
        "address": "207 Queens Quay W, Toronto, ON",
        "lng": -79.3822,
        "lat": 43.6390,
    },
]

# (reviewer, store name, rating, text)
REVIEWS = [
    ("debbie@example.com", "Cafe Blue", 5, "Best flat white downtown."),
    ("beau@example.com", "Cafe Blue", 4, "Great coffee, gets busy at lunch."),
    ("wes@example.com", "The Night Owl", 4, "Good cocktails and a huge game shelf."),
    ("beau@example.com", "The Night Owl", 3, "Fun but loud on Fridays."),
    ("debbie@example.com", "Kensington Bakery", 5, "The rye is worth the line."),
    ("wes@example.com", "Harbour Fish & Chips", 2, "Chips were soggy."),
]


async def seed_database() -> None:
    """Seed database with sample data."""
    engine = create_async_engine(Settings().async_database_url, echo=False)
    sessions = build_session_factory(engine)

    users = UserRepository(sessions)
    stores = StoreRepository(sessions)
    reviews = ReviewRepository(sessions)

    print("Seeding database...")

    print("\nCreating members...")
    members = await seed_users(users)

    print("\nCreating stores...")
    created = await seed_stores(stores, members)

    print("\nCreating reviews...")
    await seed_reviews(reviews, members, created)

    print("\nDatabase seeded successfully!")
    await engine.dispose()


async def seed_users(users: UserRepository) -> dict[str, User]:
    """Register USERS and return mapping of email -> user."""
    members: dict[str, User] = {}
    for u in USERS:
        try:
            members[u["email"]] = await users.register(u["email"], u["name"], SEED_PASSWORD)
            print(f"  + {u['email']}")
        except DuplicateEmailError:
            members[u["email"]] = await users.authenticate(u["email"], SEED_PASSWORD)
            print(f"  = {u['email']} (exists)")
    return members


async def seed_stores(stores: StoreRepository, members: dict[str, User]) -> dict[str, Store]:
    """Create STORES (skipping existing slugs) and return mapping of name -> store."""
    created: dict[str, Store] = {}
    for s in STORES:
        data = {k: v for k, v in s.items() if k != "author"}
        try:
            created[s["name"]] = await stores.find_by_slug(slugify(s["name"]))
            print(f"  = {s['name']} (exists)")
            continue
        except NotFoundError:
            pass
        created[s["name"]] = await stores.create_store(data, author_id=members[s["author"]].id)
        print(f"  + {s['name']} -> /store/{created[s['name']].slug}")
    return created


async def seed_reviews(
    reviews: ReviewRepository,
    members: dict[str, User],
    created: dict[str, Store],
) -> None:
    for email, store_name, rating, text in REVIEWS:
        store = created[store_name]
        existing = await reviews.reviews_for_store(store.id)
        if any(r.author_id == members[email].id and r.text == text for r in existing):
            print(f"  = {store_name} by {email} (exists)")
            continue
        await reviews.add_review(store.id, members[email].id, rating, text)
        print(f"  + {store_name}: {rating}/5 by {email}")


if __name__ == "__main__":
    asyncio.run(seed_database())
