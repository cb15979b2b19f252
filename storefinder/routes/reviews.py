"""Reviews.

POST /reviews/{store_id} - add a review (members), back to the store page.
"""

from typing import Annotated

from fastapi import APIRouter, Form, Request
from fastapi.responses import RedirectResponse

from storefinder.routes.deps import LoggedInUser, ReviewRepo, redirect_back
from storefinder.services.web_session import flash

router = APIRouter()


@router.post("/reviews/{store_id}")
async def add_review(
    request: Request,
    store_id: int,
    user: LoggedInUser,
    reviews: ReviewRepo,
    rating: Annotated[str, Form()] = "",
    text: Annotated[str, Form()] = "",
) -> RedirectResponse:
    await reviews.add_review(store_id=store_id, author_id=user.id, rating=rating, text=text)
    flash(request, "success", "Review Saved!")
    return redirect_back(request)
