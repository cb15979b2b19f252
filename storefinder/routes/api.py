"""JSON API used by the search box, the map and the heart buttons.

GET  /api/search?q=              - text search (top 5)
GET  /api/stores/near?lng=&lat=  - stores within the configured radius (top 10)
POST /api/stores/{id}/heart      - toggle a heart, returns the member
"""

from fastapi import APIRouter, Query

from storefinder.routes.deps import LoggedInUser, SettingsDep, StoreRepo, UserRepo
from storefinder.schemas import NearStore, SearchHit, UserOut

router = APIRouter()


@router.get("/search", response_model=list[SearchHit])
async def search_stores(
    stores: StoreRepo,
    q: str = Query(default="", max_length=200, description="Search text"),
) -> list[SearchHit]:
    return await stores.search(q)


@router.get("/stores/near", response_model=list[NearStore])
async def stores_near(
    stores: StoreRepo,
    settings: SettingsDep,
    lng: float = Query(ge=-180, le=180, description="Longitude"),
    lat: float = Query(ge=-90, le=90, description="Latitude"),
) -> list[NearStore]:
    return await stores.find_near(lng, lat, max_distance=settings.near_max_distance_m)


@router.post("/stores/{store_id}/heart", response_model=UserOut)
async def heart_store(store_id: int, user: LoggedInUser, users: UserRepo) -> UserOut:
    hearts = await users.toggle_heart(user.id, store_id)
    return UserOut.from_model(user, hearts)
