from typing import Any

from bson.objectid import ObjectId

from app.models.base import sanitize_value
from app.models.subscription import ChannelView, Subscription
from app.models.user import Account
from app.utils.errors import InvalidInputError, NotFoundError


def channel_pipeline(username: str, viewer_id: ObjectId | None) -> list[dict[str, Any]]:
    """Aggregation over `users` producing one channel view with subscription stats."""
    subscriptions = Subscription._get_collection_name()
    return [
        {"$match": {"username": username}},
        {"$lookup": {
            "from": subscriptions,
            "localField": "_id",
            "foreignField": "channel",
            "as": "subscribers",
        }},
        {"$lookup": {
            "from": subscriptions,
            "localField": "_id",
            "foreignField": "subscriber",
            "as": "subscribed_to",
        }},
        {"$addFields": {
            "subscribers_count": {"$size": "$subscribers"},
            "channel_subscribed_to_count": {"$size": "$subscribed_to"},
            "is_subscribed": {
                "$cond": {
                    "if": {"$in": [viewer_id, "$subscribers.subscriber"]},
                    "then": True,
                    "else": False,
                }
            },
        }},
        {"$project": {
            "username": 1,
            "email": 1,
            "full_name": 1,
            "avatar": 1,
            "cover_image": 1,
            "subscribers_count": 1,
            "channel_subscribed_to_count": 1,
            "is_subscribed": 1,
        }},
    ]


class ChannelService:
    """Read-only public channel views."""

    def get_channel_profile(self, viewer_id: ObjectId | None, username: str | None) -> ChannelView:
        if not username or not username.strip():
            raise InvalidInputError("username is missing")

        # A null viewer never matches a stored subscriber id.
        cursor = Account.objects.aggregate(channel_pipeline(username.strip().lower(), viewer_id))
        channel = next(iter(cursor), None)
        if channel is None:
            raise NotFoundError("channel does not exist")
        return ChannelView.model_validate(sanitize_value(channel))
