from mongoengine import ReferenceField
from pydantic import BaseModel

from app.models.base import BaseDocument
from app.models.user import Account


class Subscription(BaseDocument):
    """Edge between two accounts.

    Fields:
    - subscriber (Account): account that follows
    - channel (Account): account being followed
    """
    subscriber = ReferenceField(Account, required=True, null=False)
    channel = ReferenceField(Account, required=True, null=False)

    meta = {
        "collection": "subscriptions",
        "indexes": ["channel", "subscriber"],
    }


class ChannelView(BaseModel):
    """Public projection of an account plus subscription statistics."""
    id: str
    username: str
    email: str
    full_name: str
    avatar: str
    cover_image: str = ""
    subscribers_count: int = 0
    channel_subscribed_to_count: int = 0
    is_subscribed: bool = False
