"""Store pages.

GET  /, /stores, /stores/page/{page} - paginated listing
GET  /add, POST /add                 - add a store (members)
GET  /stores/{id}/edit               - edit form (author only)
POST /add/{store_id}                 - save edits (author only)
GET  /store/{slug}                   - store with author and reviews
GET  /tags, /tags/{tag}              - tag cloud + tagged stores
GET  /top                            - top-rated stores
GET  /hearts                         - stores the member hearted
GET  /map                            - map page

Routers are thin: repositories do the work, handlers map results to a view
payload or a redirect plus a flash.
"""

import asyncio
from typing import Annotated

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import RedirectResponse

from storefinder.errors import AuthorizationError, UploadRejectedError, ValidationError
from storefinder.models import Store, User
from storefinder.routes.deps import (
    CurrentUser,
    LoggedInUser,
    SettingsDep,
    StoreRepo,
    UserRepo,
    redirect,
)
from storefinder.schemas import (
    EditStoreView,
    FormView,
    StoreCard,
    StoreDetail,
    StoreIn,
    StoreOut,
    StoresView,
    StoreView,
    TagCount,
    TagsView,
    TopStoresView,
    validate_input,
)
from storefinder.schemas.stores import STORE_FIELD_MESSAGES
from storefinder.services.photos import save_photo
from storefinder.services.web_session import flash, pop_flashes
from storefinder.settings import Settings

router = APIRouter()


def confirm_owner(store: Store, user: User | None) -> None:
    if user is None or store.author_id != user.id:
        raise AuthorizationError("You must own a store in order to edit it!", redirect_to="/")


def _flash_errors(request: Request, exc: ValidationError | UploadRejectedError) -> None:
    messages = exc.errors if isinstance(exc, ValidationError) else [exc.message]
    for message in messages:
        flash(request, "error", message)


async def _store_fields(
    settings: Settings,
    *,
    name: str,
    description: str,
    tags: list[str] | None,
    address: str,
    lng: str,
    lat: str,
    photo: UploadFile | None,
) -> StoreIn:
    """Validate the store form, then persist the photo (if any)."""
    fields = validate_input(
        StoreIn,
        {
            "name": name,
            "description": description,
            "tags": tags,
            "address": address,
            "lng": lng,
            "lat": lat,
        },
        STORE_FIELD_MESSAGES,
    )
    filename = await save_photo(photo, settings.uploads_dir, max_bytes=settings.max_upload_bytes)
    if filename:
        fields = fields.model_copy(update={"photo": filename})
    return fields


# ============================================================
# Listing
# ============================================================


@router.get("/", response_model=StoresView)
@router.get("/stores", response_model=StoresView)
@router.get("/stores/page/{page}", response_model=StoresView)
async def list_stores(
    request: Request,
    stores: StoreRepo,
    settings: SettingsDep,
    page: int = 1,
):
    """Newest stores first; a page past the end redirects to the last page."""
    result = await stores.list_stores(page=page, page_size=settings.stores_page_size)

    if result.out_of_range:
        flash(
            request,
            "info",
            f"Hey! You asked for page {page}. But that doesn't exist so I put you on page {result.last_page}",
        )
        return RedirectResponse(f"/stores/page/{result.last_page}", status_code=302)

    return StoresView(
        title="Stores",
        flashes=pop_flashes(request),
        stores=[StoreCard.from_model(s) for s in result.stores],
        page=result.page,
        page_count=result.page_count,
        count=result.count,
    )


@router.get("/store/{slug}", response_model=StoreView)
async def store_detail(request: Request, slug: str, stores: StoreRepo) -> StoreView:
    store = await stores.find_by_slug(slug)
    return StoreView(
        title=store.name,
        flashes=pop_flashes(request),
        store=StoreDetail.from_model(store),
    )


@router.get("/tags", response_model=TagsView)
@router.get("/tags/{tag}", response_model=TagsView)
async def stores_by_tag(request: Request, stores: StoreRepo, tag: str | None = None) -> TagsView:
    tags, tagged = await asyncio.gather(stores.tag_list(), stores.find_by_tag(tag))
    return TagsView(
        title="Tags",
        flashes=pop_flashes(request),
        tag=tag,
        tags=[TagCount(tag=t, count=c) for t, c in tags],
        stores=[StoreCard.from_model(s) for s in tagged],
    )


@router.get("/top", response_model=TopStoresView)
async def top_stores(request: Request, stores: StoreRepo) -> TopStoresView:
    return TopStoresView(
        title="Top Stores!",
        flashes=pop_flashes(request),
        stores=await stores.top_rated(),
    )


@router.get("/hearts", response_model=StoresView)
async def hearted_stores(
    request: Request,
    user: LoggedInUser,
    stores: StoreRepo,
    users: UserRepo,
) -> StoresView:
    hearted = await stores.hearted_stores(await users.hearts(user.id))
    return StoresView(
        title="Hearted Stores",
        flashes=pop_flashes(request),
        stores=[StoreCard.from_model(s) for s in hearted],
        count=len(hearted),
    )


@router.get("/map", response_model=FormView)
async def map_page(request: Request) -> FormView:
    return FormView(title="Map", flashes=pop_flashes(request))


# ============================================================
# Add / edit
# ============================================================


@router.get("/add", response_model=EditStoreView)
async def add_store_form(request: Request, user: LoggedInUser) -> EditStoreView:
    return EditStoreView(title="Add Store", flashes=pop_flashes(request))


@router.post("/add")
async def create_store(
    request: Request,
    user: LoggedInUser,
    stores: StoreRepo,
    settings: SettingsDep,
    name: Annotated[str, Form()] = "",
    description: Annotated[str, Form()] = "",
    tags: Annotated[list[str] | None, Form()] = None,
    address: Annotated[str, Form()] = "",
    lng: Annotated[str, Form()] = "",
    lat: Annotated[str, Form()] = "",
    photo: Annotated[UploadFile | None, File()] = None,
) -> RedirectResponse:
    try:
        fields = await _store_fields(
            settings,
            name=name,
            description=description,
            tags=tags,
            address=address,
            lng=lng,
            lat=lat,
            photo=photo,
        )
        store = await stores.create_store(fields, author_id=user.id)
    except (ValidationError, UploadRejectedError) as e:
        _flash_errors(request, e)
        return redirect("/add")

    flash(request, "success", f"Successfully Created {store.name}. Care to leave a review?")
    return redirect(f"/store/{store.slug}")


@router.get("/stores/{store_id}/edit", response_model=EditStoreView)
async def edit_store_form(
    request: Request,
    store_id: int,
    user: CurrentUser,
    stores: StoreRepo,
) -> EditStoreView:
    store = await stores.get_store(store_id)
    confirm_owner(store, user)
    return EditStoreView(
        title=f"Edit {store.name}",
        flashes=pop_flashes(request),
        store=StoreOut.from_model(store),
    )


@router.post("/add/{store_id}")
async def update_store(
    request: Request,
    store_id: int,
    user: CurrentUser,
    stores: StoreRepo,
    settings: SettingsDep,
    name: Annotated[str, Form()] = "",
    description: Annotated[str, Form()] = "",
    tags: Annotated[list[str] | None, Form()] = None,
    address: Annotated[str, Form()] = "",
    lng: Annotated[str, Form()] = "",
    lat: Annotated[str, Form()] = "",
    photo: Annotated[UploadFile | None, File()] = None,
) -> RedirectResponse:
    confirm_owner(await stores.get_store(store_id), user)
    edit_url = f"/stores/{store_id}/edit"

    try:
        fields = await _store_fields(
            settings,
            name=name,
            description=description,
            tags=tags,
            address=address,
            lng=lng,
            lat=lat,
            photo=photo,
        )
        store = await stores.update_store(store_id, fields)
    except (ValidationError, UploadRejectedError) as e:
        _flash_errors(request, e)
        return redirect(edit_url)

    flash(request, "success", f"Successfully updated {store.name}. View it at /store/{store.slug}")
    return redirect(edit_url)
