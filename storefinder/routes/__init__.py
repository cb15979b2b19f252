"""HTTP routes."""

from fastapi import APIRouter

from storefinder.routes import api, auth, reviews, stores

api_router = APIRouter()

# Browser pages (view payloads, redirects + flashes)
api_router.include_router(stores.router, tags=["stores"])
api_router.include_router(reviews.router, tags=["reviews"])
api_router.include_router(auth.router, tags=["auth"])

# JSON API (search, map, hearts)
api_router.include_router(api.router, prefix="/api", tags=["api"])
