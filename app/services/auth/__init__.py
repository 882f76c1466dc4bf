from fastapi import Depends, Request, Response
from fastapi.security import OAuth2PasswordBearer

from app.models.user import Account
from app.services.container import ServiceContainer
from app.services.token import TokenPair
from app.utils.errors import UnauthorizedError


ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/users/login", auto_error=False)


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def _cookie_options(services: ServiceContainer) -> dict:
    return {"httponly": True, "secure": services.config.cookie_secure, "path": "/"}


def set_session_cookies(response: Response, tokens: TokenPair, services: ServiceContainer) -> None:
    options = _cookie_options(services)
    response.set_cookie(ACCESS_COOKIE, tokens.access_token, **options)
    response.set_cookie(REFRESH_COOKIE, tokens.refresh_token, **options)


def clear_session_cookies(response: Response, services: ServiceContainer) -> None:
    options = _cookie_options(services)
    response.delete_cookie(ACCESS_COOKIE, **options)
    response.delete_cookie(REFRESH_COOKIE, **options)


def _presented_access_token(request: Request, bearer: str | None) -> str | None:
    return request.cookies.get(ACCESS_COOKIE) or bearer


def get_current_user(
    request: Request,
    bearer: str | None = Depends(oauth2_scheme),
    services: ServiceContainer = Depends(get_services),
) -> Account:
    """Auth dependency that validates an access token and returns the account.

    The token is read from the `accessToken` cookie, then from the
    `Authorization: Bearer` header.
    """
    return services.sessions.authenticate(_presented_access_token(request, bearer))


def get_optional_user(
    request: Request,
    bearer: str | None = Depends(oauth2_scheme),
    services: ServiceContainer = Depends(get_services),
) -> Account | None:
    """Like get_current_user, but anonymous and invalid tokens yield None."""
    token = _presented_access_token(request, bearer)
    if not token:
        return None
    try:
        return services.sessions.authenticate(token)
    except UnauthorizedError:
        return None
