from typing import Any, Iterable

from bson.errors import InvalidId
from bson.objectid import ObjectId
from mongoengine import NotUniqueError, Q

from app.models.base import utcnow
from app.models.subscription import Subscription
from app.models.user import PRIVATE_FIELDS, Account
from app.utils.errors import ConflictError, NotFoundError


def to_object_id(value: Any) -> ObjectId | None:
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def _normalize(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip().lower()
    return value or None


class AccountStore:
    """Single-document access to accounts."""

    def ensure_indexes(self) -> None:
        Account.ensure_indexes()
        Subscription.ensure_indexes()

    def find_by_identifier(self, account_id: Any, exclude: Iterable[str] = ()) -> Account | None:
        """Load an account by id; fields named in `exclude` are not loaded."""
        oid = to_object_id(account_id)
        if oid is None:
            return None
        return Account.objects(id=oid).exclude(*exclude).first()

    def find_by_username_or_email(self, username: str | None = None, email: str | None = None) -> Account | None:
        query = Q()
        if _normalize(username):
            query |= Q(username=_normalize(username))
        if _normalize(email):
            query |= Q(email=_normalize(email))
        if not query:
            return None
        return Account.objects(query).first()

    def insert_unique(self, account: Account) -> Account:
        try:
            account.save(force_insert=True)
        except NotUniqueError as exc:
            raise ConflictError("email /username already used.") from exc
        return account

    def update_fields(
        self,
        account_id: Any,
        set_fields: dict[str, Any] | None = None,
        unset_fields: Iterable[str] = (),
        exclude: Iterable[str] = PRIVATE_FIELDS,
    ) -> dict[str, Any]:
        """Apply a partial update and return the updated account as an output view.

        Fields named in `exclude` are left out of the returned view.
        """
        oid = to_object_id(account_id)
        if oid is None:
            raise NotFoundError("User not found")

        update = {f"set__{field}": value for field, value in (set_fields or {}).items()}
        update.update({f"unset__{field}": True for field in unset_fields})
        try:
            account = Account.objects(id=oid).modify(new=True, set__updated_at=utcnow(), **update)
        except NotUniqueError as exc:
            raise ConflictError("email /username already used.") from exc
        if account is None:
            raise NotFoundError("User not found")
        return account.to_output(exclude=exclude)

    def swap_refresh_token(self, account_id: Any, current: str, replacement: str) -> bool:
        """Replace the stored refresh token only if it still equals `current`."""
        oid = to_object_id(account_id)
        if oid is None:
            return False
        updated = Account.objects(id=oid, refresh_token=current).update_one(
            set__refresh_token=replacement,
            set__updated_at=utcnow(),
        )
        return updated == 1
