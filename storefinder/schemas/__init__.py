"""Pydantic schemas for request validation and response payloads."""

from storefinder.schemas.common import ErrorDetail, ErrorResponse, Flash, ViewModel, validate_input
from storefinder.schemas.reviews import ReviewIn
from storefinder.schemas.stores import (
    AuthorOut,
    EditStoreView,
    Location,
    NearStore,
    ReviewOut,
    SearchHit,
    StoreCard,
    StoreDetail,
    StoreIn,
    StoreOut,
    StoresView,
    StoreView,
    TagCount,
    TagsView,
    TopStore,
    TopStoresView,
)
from storefinder.schemas.users import AccountView, FormView, Registration, UserFields, UserOut

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "Flash",
    "ViewModel",
    "validate_input",
    "ReviewIn",
    "AuthorOut",
    "EditStoreView",
    "Location",
    "NearStore",
    "ReviewOut",
    "SearchHit",
    "StoreCard",
    "StoreDetail",
    "StoreIn",
    "StoreOut",
    "StoresView",
    "StoreView",
    "TagCount",
    "TagsView",
    "TopStore",
    "TopStoresView",
    "AccountView",
    "FormView",
    "Registration",
    "UserFields",
    "UserOut",
]
