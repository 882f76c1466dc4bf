from datetime import datetime, timedelta, timezone
from uuid import uuid4

from jose import ExpiredSignatureError, JOSEError, JWTError, jwt
from pydantic import BaseModel

from app.models.user import Account
from app.utils.config import Settings
from app.utils.errors import InternalError, InvalidTokenError


ACCESS = "access"
REFRESH = "refresh"


class TokenPair(BaseModel):
    """Pair of JWT tokens used by the client for auth and refresh."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenService:
    """Issues and verifies access and refresh tokens.

    Access and refresh tokens are signed with distinct secrets and carry
    distinct lifetimes, all fixed at construction. Every token gets its own
    `jti` so two tokens issued for the same account never compare equal.
    """

    def __init__(self, config: Settings) -> None:
        self._algorithm = config.jwt_algorithm
        self._secrets = {
            ACCESS: config.access_token_secret,
            REFRESH: config.refresh_token_secret,
        }
        self._ttls = {
            ACCESS: timedelta(minutes=config.access_token_expires_minutes),
            REFRESH: timedelta(days=config.refresh_token_expires_days),
        }

    def _sign(self, claims: dict, token_type: str) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "iat": int(now.timestamp()),
            "exp": int((now + self._ttls[token_type]).timestamp()),
            "jti": uuid4().hex,
            "typ": token_type,
        }
        try:
            return jwt.encode(payload, self._secrets[token_type], algorithm=self._algorithm)
        except JOSEError as exc:
            raise InternalError("Something went wrong while generating access and refresh token") from exc

    def _verify(self, token: str, token_type: str) -> dict:
        try:
            payload = jwt.decode(token, self._secrets[token_type], algorithms=[self._algorithm])
        except ExpiredSignatureError as exc:
            raise InvalidTokenError(f"{token_type.capitalize()} token has expired") from exc
        except JWTError as exc:
            raise InvalidTokenError(f"Invalid {token_type} token") from exc
        if payload.get("typ") != token_type or not payload.get("sub"):
            raise InvalidTokenError(f"Invalid {token_type} token")
        return payload

    def issue_access_token(self, account: Account) -> str:
        claims = {
            "sub": str(account.id),
            "email": account.email,
            "username": account.username,
            "full_name": account.full_name,
        }
        return self._sign(claims, ACCESS)

    def issue_refresh_token(self, account: Account) -> str:
        return self._sign({"sub": str(account.id)}, REFRESH)

    def issue_pair(self, account: Account) -> TokenPair:
        """Create access and refresh token pair for an account."""
        return TokenPair(
            access_token=self.issue_access_token(account),
            refresh_token=self.issue_refresh_token(account),
        )

    def verify_access_token(self, token: str) -> dict:
        return self._verify(token, ACCESS)

    def verify_refresh_token(self, token: str) -> dict:
        return self._verify(token, REFRESH)
