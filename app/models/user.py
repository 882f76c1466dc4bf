from mongoengine import EmailField, ListField, ObjectIdField, StringField

from app.models.base import BaseDocument


PRIVATE_FIELDS = ("password", "refresh_token")


class Account(BaseDocument):
    """User account document.

    Fields:
    - username (str, unique): trimmed, stored lowercase
    - email (EmailStr, unique): trimmed, stored lowercase
    - full_name (str): display name
    - password (str, hashed): bcrypt digest, never the plaintext
    - avatar (str): URL in the remote asset store
    - cover_image (str): URL in the remote asset store, "" when unset
    - watch_history (list[ObjectId]): watched video ids, most recent last
    - refresh_token (str|None): the one refresh token currently honoured
    """
    username = StringField(required=True, null=False)
    email = EmailField(required=True, null=False)
    full_name = StringField(required=True, null=False)
    password = StringField(required=True, null=False)
    avatar = StringField(required=True, null=False)
    cover_image = StringField(default="")
    watch_history = ListField(ObjectIdField(), default=list)
    refresh_token = StringField(null=True)

    meta = {
        "collection": "users",
        "indexes": [
            {"fields": ["username"], "unique": True, "name": "uq_username"},
            {"fields": ["email"], "unique": True, "name": "uq_email"},
        ],
    }

    def clean(self):
        # Runs before field validation on every save
        if self.username:
            self.username = self.username.strip().lower()
        if self.email:
            self.email = self.email.strip().lower()
        if self.full_name:
            self.full_name = self.full_name.strip()

    def to_public(self) -> dict:
        """Output view with the password hash and refresh token removed."""
        return self.to_output(exclude=PRIVATE_FIELDS)
