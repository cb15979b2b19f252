"""Member pages: registration, login, account and password reset.

Login state lives in the server-side web session (see services.web_session).
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Form, Request
from fastapi.responses import RedirectResponse

from storefinder.errors import AuthenticationError, DuplicateEmailError, MailDeliveryError, ValidationError
from storefinder.routes.deps import LoggedInUser, SessionDep, SettingsDep, UserRepo, redirect
from storefinder.schemas import AccountView, FormView, UserOut
from storefinder.services.web_session import flash, pop_flashes

router = APIRouter()
logger = logging.getLogger("uvicorn.error")

PasswordConfirm = Annotated[str, Form(alias="password-confirm")]


def _flash_error(request: Request, exc: ValidationError | DuplicateEmailError) -> None:
    messages = exc.errors if isinstance(exc, ValidationError) else [exc.message]
    for message in messages:
        flash(request, "error", message)


# ============================================================
# Register / login / logout
# ============================================================


@router.get("/register", response_model=FormView)
async def register_form(request: Request) -> FormView:
    return FormView(title="Register", flashes=pop_flashes(request))


@router.post("/register")
async def register(
    request: Request,
    session: SessionDep,
    users: UserRepo,
    name: Annotated[str, Form()] = "",
    email: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
    password_confirm: PasswordConfirm = "",
) -> RedirectResponse:
    """Create the account, then log the new member in."""
    try:
        if not password_confirm:
            raise ValidationError("Confirmed Password cannot be blank!")
        if password != password_confirm:
            raise ValidationError("Oops! Your passwords do not match!")
        user = await users.register(email=email, name=name, password=password)
    except (ValidationError, DuplicateEmailError) as e:
        _flash_error(request, e)
        return redirect("/register")

    session.login(user.id)
    flash(request, "success", "You are now logged in!")
    return redirect("/")


@router.get("/login", response_model=FormView)
async def login_form(request: Request) -> FormView:
    return FormView(title="Login", flashes=pop_flashes(request))


@router.post("/login")
async def login(
    request: Request,
    session: SessionDep,
    users: UserRepo,
    email: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
) -> RedirectResponse:
    try:
        user = await users.authenticate(email, password)
    except AuthenticationError as e:
        flash(request, "error", e.message)
        return redirect("/login")

    session.login(user.id)
    flash(request, "success", "You are now logged in!")
    return redirect("/")


@router.get("/logout")
async def logout(request: Request, session: SessionDep) -> RedirectResponse:
    session.logout()
    flash(request, "success", "You are now logged out.")
    return redirect("/")


# ============================================================
# Account
# ============================================================


@router.get("/account", response_model=AccountView)
async def account(request: Request, user: LoggedInUser, users: UserRepo) -> AccountView:
    hearts = await users.hearts(user.id)
    return AccountView(
        title="Edit Your Account",
        flashes=pop_flashes(request),
        user=UserOut.from_model(user, hearts),
    )


@router.post("/account")
async def update_account(
    request: Request,
    user: LoggedInUser,
    users: UserRepo,
    name: Annotated[str, Form()] = "",
    email: Annotated[str, Form()] = "",
) -> RedirectResponse:
    try:
        await users.update_profile(user.id, name=name, email=email)
    except (ValidationError, DuplicateEmailError) as e:
        _flash_error(request, e)
        return redirect("/account")

    flash(request, "success", "Account successfully updated!")
    return redirect("/account")


# ============================================================
# Password reset
# ============================================================


@router.post("/account/forgot")
async def forgot_password(
    request: Request,
    users: UserRepo,
    settings: SettingsDep,
    email: Annotated[str, Form()] = "",
) -> RedirectResponse:
    """Mail a reset link. The answer is the same whether or not the e-mail is known."""
    base_url = settings.public_base_url or str(request.base_url)
    try:
        await users.request_password_reset(email, base_url)
    except MailDeliveryError:
        logger.exception("Password reset mail failed")
    flash(request, "success", "You have been emailed a password link.")
    return redirect("/login")


@router.get("/account/reset/{token}", response_model=FormView)
async def reset_form(request: Request, token: str, users: UserRepo) -> FormView:
    await users.consume_reset_token(token)
    return FormView(title="Reset Your Password", flashes=pop_flashes(request))


@router.post("/account/reset/{token}")
async def reset_password(
    request: Request,
    token: str,
    session: SessionDep,
    users: UserRepo,
    password: Annotated[str, Form()] = "",
    password_confirm: PasswordConfirm = "",
) -> RedirectResponse:
    if password != password_confirm:
        flash(request, "error", "Passwords do not match!")
        return redirect(f"/account/reset/{token}")

    user = await users.reset_password(token, password)
    session.login(user.id)
    flash(request, "success", "Your password has been reset!")
    return redirect("/")
