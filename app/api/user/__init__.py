from contextlib import ExitStack

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from pydantic import BaseModel

from app.models.user import Account
from app.services.auth import (
    REFRESH_COOKIE,
    clear_session_cookies,
    get_current_user,
    get_optional_user,
    get_services,
    set_session_cookies,
)
from app.services.container import ServiceContainer
from app.utils.base import MediaField
from app.utils.response import api_response


router = APIRouter()


@router.post("/register", status_code=201)
def register(
    full_name: str | None = Form(None),
    email: str | None = Form(None),
    username: str | None = Form(None),
    password: str | None = Form(None),
    avatar: UploadFile | None = File(None),
    cover_image: UploadFile | None = File(None),
    services: ServiceContainer = Depends(get_services),
):
    """PUBLIC: Create an account with an avatar and optional cover image."""
    # Staged files are removed when the stack unwinds, whatever register() does
    with ExitStack() as stack:
        avatar_path = stack.enter_context(services.media.staged(avatar))
        cover_path = stack.enter_context(services.media.staged(cover_image))
        user = services.sessions.register(full_name, email, username, password, avatar_path, cover_path)
    return api_response(user, "User registered Successfully", status_code=201)


class LoginBody(BaseModel):
    email: str | None = None
    username: str | None = None
    password: str | None = None

@router.post("/login")
def login(body: LoginBody, services: ServiceContainer = Depends(get_services)):
    """PUBLIC: Exchange credentials for an access/refresh token pair."""
    result = services.sessions.login(body.password, username=body.username, email=body.email)
    # Tokens go in the body too; non-browser clients cannot rely on cookies
    response = api_response(
        {"user": result.user, **result.tokens.model_dump()},
        "User logged In successfully",
    )
    set_session_cookies(response, result.tokens, services)
    return response


@router.post("/logout")
def logout(
    current_user: Account = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    """PROTECTED: Forget the stored refresh token and clear both cookies."""
    services.sessions.logout(current_user.id)
    response = api_response({}, "User logout successfully")
    clear_session_cookies(response, services)
    return response


class RefreshBody(BaseModel):
    refresh_token: str | None = None

@router.post("/refresh-token")
def refresh_token(
    request: Request,
    body: RefreshBody | None = None,
    services: ServiceContainer = Depends(get_services),
):
    """PUBLIC: Rotate the refresh token presented in the cookie or body."""
    incoming = request.cookies.get(REFRESH_COOKIE) or (body.refresh_token if body else None)
    tokens = services.sessions.refresh(incoming)
    response = api_response(tokens.model_dump(), "Access token refreshed")
    set_session_cookies(response, tokens, services)
    return response


class ChangePasswordBody(BaseModel):
    old_password: str | None = None
    new_password: str | None = None

@router.post("/change-password")
def change_password(
    body: ChangePasswordBody,
    current_user: Account = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    """PROTECTED: Replace the password after checking the old one."""
    services.sessions.change_password(current_user.id, body.old_password, body.new_password)
    return api_response({}, "Password changed successfully")


@router.get("/current-user")
def read_current_user(current_user: Account = Depends(get_current_user)):
    """PROTECTED: Return the signed-in account."""
    return api_response(current_user.to_public(), "User fetched successfully")


class UpdateAccountBody(BaseModel):
    full_name: str | None = None
    email: str | None = None

@router.patch("/update-account")
def update_account(
    body: UpdateAccountBody,
    current_user: Account = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    """PROTECTED: Update display name and email."""
    user = services.sessions.update_profile_fields(current_user.id, body.full_name, body.email)
    return api_response(user, "Account details updated successfully")


def _replace_media(upload: UploadFile | None, field: MediaField, account: Account, services: ServiceContainer) -> dict:
    with services.media.staged(upload) as local_path:
        return services.media.replace_asset(account, local_path, field)


@router.patch("/avatar")
def update_avatar(
    avatar: UploadFile | None = File(None),
    current_user: Account = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    """PROTECTED: Replace the avatar, deleting the previous remote image."""
    user = _replace_media(avatar, MediaField.AVATAR, current_user, services)
    return api_response(user, "Avatar updated successfully")


@router.patch("/cover-image")
def update_cover_image(
    cover_image: UploadFile | None = File(None),
    current_user: Account = Depends(get_current_user),
    services: ServiceContainer = Depends(get_services),
):
    """PROTECTED: Replace the cover image, deleting the previous remote image."""
    user = _replace_media(cover_image, MediaField.COVER_IMAGE, current_user, services)
    return api_response(user, "Cover image updated successfully")


@router.get("/channel/{username}")
def channel_profile(
    username: str,
    viewer: Account | None = Depends(get_optional_user),
    services: ServiceContainer = Depends(get_services),
):
    """PUBLIC: Channel view with subscriber counts; `is_subscribed` reflects the caller if signed in."""
    channel = services.channels.get_channel_profile(viewer.id if viewer else None, username)
    return api_response(channel.model_dump(), "Channel fetched successfully")
