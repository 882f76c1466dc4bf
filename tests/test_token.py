import pytest
from bson.objectid import ObjectId
from jose import jwt

from app.models.user import Account
from app.services.token import TokenService
from app.utils.errors import InvalidTokenError, UnauthorizedError


@pytest.fixture()
def account() -> Account:
    return Account(
        id=ObjectId(),
        username="janedoe",
        email="jane@x.com",
        full_name="Jane Doe",
        password="$2b$04$hash",
        avatar="https://store/abc.png",
    )


@pytest.fixture()
def tokens(config) -> TokenService:
    return TokenService(config)


def test_access_token_carries_profile_claims(tokens, account):
    claims = tokens.verify_access_token(tokens.issue_access_token(account))

    assert claims["sub"] == str(account.id)
    assert claims["username"] == "janedoe"
    assert claims["email"] == "jane@x.com"
    assert claims["full_name"] == "Jane Doe"
    assert claims["typ"] == "access"
    assert claims["exp"] > claims["iat"]


def test_refresh_token_carries_only_identifier(tokens, account):
    claims = tokens.verify_refresh_token(tokens.issue_refresh_token(account))

    assert claims["sub"] == str(account.id)
    assert "email" not in claims
    assert "username" not in claims


def test_tokens_are_signed_with_distinct_secrets(tokens, account, config):
    access = tokens.issue_access_token(account)
    refresh = tokens.issue_refresh_token(account)

    with pytest.raises(InvalidTokenError):
        tokens.verify_refresh_token(access)
    with pytest.raises(InvalidTokenError):
        tokens.verify_access_token(refresh)
    assert jwt.decode(refresh, config.refresh_token_secret, algorithms=["HS256"])["typ"] == "refresh"


def test_each_issue_yields_a_distinct_token(tokens, account):
    first = tokens.issue_pair(account)
    second = tokens.issue_pair(account)

    assert first.refresh_token != second.refresh_token
    assert first.access_token != second.access_token


def test_expired_token_is_invalid(config, account):
    expired = TokenService(config.model_copy(update={"access_token_expires_minutes": -1}))

    with pytest.raises(InvalidTokenError) as err:
        expired.verify_access_token(expired.issue_access_token(account))
    assert "expired" in err.value.message


def test_foreign_and_garbage_tokens_are_invalid(tokens, account):
    forged = jwt.encode({"sub": str(account.id), "typ": "refresh"}, "some-other-secret", algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        tokens.verify_refresh_token(forged)
    with pytest.raises(InvalidTokenError):
        tokens.verify_refresh_token("not.a.token")


def test_invalid_token_is_an_unauthorized_error():
    assert issubclass(InvalidTokenError, UnauthorizedError)
    assert InvalidTokenError().status_code == 401
