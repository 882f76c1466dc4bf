import logging
from pathlib import Path
from typing import Any

from email_validator import EmailNotValidError, validate_email
from mongoengine import ValidationError as DocumentError
from pydantic import BaseModel

from app.models.user import PRIVATE_FIELDS, Account
from app.services.account_store import AccountStore
from app.services.media import MediaService
from app.services.password import PasswordHasher
from app.services.token import TokenPair, TokenService
from app.utils.errors import (
    ConflictError,
    InvalidInputError,
    InvalidTokenError,
    NotFoundError,
    UnauthorizedError,
    UploadError,
)


logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class LoginResult(BaseModel):
    user: dict[str, Any]
    tokens: TokenPair


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _check_email(email: str) -> None:
    try:
        validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError as exc:
        raise InvalidInputError("Invalid email format") from exc


def _check_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInputError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")


class SessionService:
    """Registration, login, logout, refresh and credential changes.

    There is no session table: an account is signed in while its stored
    `refresh_token` matches the last one issued to it.
    """

    def __init__(
        self,
        store: AccountStore,
        hasher: PasswordHasher,
        tokens: TokenService,
        media: MediaService,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.tokens = tokens
        self.media = media

    def register(
        self,
        full_name: str | None,
        email: str | None,
        username: str | None,
        password: str | None,
        avatar_path: str | Path | None,
        cover_path: str | Path | None = None,
    ) -> dict:
        if any(_blank(field) for field in (full_name, email, username, password)):
            raise InvalidInputError("All fields are required")
        _check_email(email)
        _check_password(password)

        if self.store.find_by_username_or_email(username=username, email=email):
            raise ConflictError("email /username already used.")

        if not avatar_path:
            raise InvalidInputError("Avatar file is required")

        avatar = self.media.upload_and_attach(avatar_path, resource_type="image")
        cover = self.media.upload_and_attach(cover_path, resource_type="image")
        if avatar is None or not avatar.url:
            if cover is not None:
                self.media.delete_remote(cover.url)
            raise UploadError("Avatar file is required")

        account = Account(
            full_name=full_name,
            email=email,
            username=username,
            password=self.hasher.hash(password),
            avatar=avatar.url,
            cover_image=cover.url if cover else "",
        )
        try:
            account.validate()
        except DocumentError as exc:
            self._discard_uploads(account)
            raise InvalidInputError(
                "Invalid account details",
                errors=[{"field": field, "message": str(message)} for field, message in exc.to_dict().items()],
            ) from exc

        try:
            self.store.insert_unique(account)
        except ConflictError:
            self._discard_uploads(account)
            raise
        logger.info("Registered account", extra={"account_id": str(account.id)})
        return account.to_public()

    def _discard_uploads(self, account: Account) -> None:
        self.media.delete_remote(account.avatar)
        self.media.delete_remote(account.cover_image)

    def _start_session(self, account: Account) -> TokenPair:
        pair = self.tokens.issue_pair(account)
        self.store.update_fields(account.id, {"refresh_token": pair.refresh_token})
        return pair

    def login(self, password: str | None, username: str | None = None, email: str | None = None) -> LoginResult:
        if _blank(username) and _blank(email):
            raise InvalidInputError("email/username is required")

        account = self.store.find_by_username_or_email(username=username, email=email)
        if account is None:
            raise NotFoundError("User does not exist")

        if not password or not self.hasher.verify(password, account.password):
            raise UnauthorizedError("Invalid user credentials")

        pair = self._start_session(account)
        return LoginResult(user=account.to_public(), tokens=pair)

    def logout(self, account_id: Any) -> None:
        self.store.update_fields(account_id, unset_fields=["refresh_token"])

    def refresh(self, presented_token: str | None) -> TokenPair:
        if not presented_token:
            raise UnauthorizedError("unauthorized request")

        try:
            claims = self.tokens.verify_refresh_token(presented_token)
        except InvalidTokenError as exc:
            raise UnauthorizedError(exc.message) from exc

        account = self.store.find_by_identifier(claims["sub"])
        if account is None:
            raise NotFoundError("Invalid refresh token")

        if presented_token != account.refresh_token:
            raise UnauthorizedError("Refresh token is expired or used")

        pair = self.tokens.issue_pair(account)
        if not self.store.swap_refresh_token(account.id, presented_token, pair.refresh_token):
            raise UnauthorizedError("Refresh token is expired or used")
        return pair

    def change_password(self, account_id: Any, old_password: str | None, new_password: str | None) -> None:
        account = self.store.find_by_identifier(account_id)
        if account is None:
            raise NotFoundError("User not found")

        if not old_password or not self.hasher.verify(old_password, account.password):
            raise UnauthorizedError("Invalid old password")
        if _blank(new_password):
            raise InvalidInputError("New password is required")
        _check_password(new_password)

        self.store.update_fields(account.id, {"password": self.hasher.hash(new_password)})

    def update_profile_fields(self, account_id: Any, full_name: str | None, email: str | None) -> dict:
        if _blank(full_name) or _blank(email):
            raise InvalidInputError("All fields are required.")
        _check_email(email)

        return self.store.update_fields(
            account_id,
            {"full_name": full_name.strip(), "email": email.strip().lower()},
        )

    def authenticate(self, access_token: str | None) -> Account:
        """Resolve the account behind an access token, without its private fields."""
        if not access_token:
            raise UnauthorizedError("Unauthorized request")

        claims = self.tokens.verify_access_token(access_token)
        account = self.store.find_by_identifier(claims["sub"], exclude=PRIVATE_FIELDS)
        if account is None:
            raise UnauthorizedError("Invalid access token")
        return account
