import pytest
from bson.objectid import ObjectId

from app.models.subscription import Subscription
from app.services.channel import channel_pipeline
from app.utils.errors import InvalidInputError, NotFoundError
from tests.helpers import PASSWORD, write_image


@pytest.fixture()
def register(services, incoming):
    def _register(username: str) -> ObjectId:
        view = services.sessions.register(
            username.title(), f"{username}@x.com", username, PASSWORD, write_image(incoming, f"{username}.png"),
        )
        return ObjectId(view["id"])
    return _register


def _subscribe(subscriber: ObjectId, channel: ObjectId) -> None:
    Subscription(subscriber=subscriber, channel=channel).save()


def test_pipeline_matches_lowercased_username():
    pipeline = channel_pipeline("janedoe", None)

    assert pipeline[0] == {"$match": {"username": "janedoe"}}
    assert [next(iter(stage)) for stage in pipeline] == ["$match", "$lookup", "$lookup", "$addFields", "$project"]
    assert "password" not in pipeline[-1]["$project"]
    assert "refresh_token" not in pipeline[-1]["$project"]


def test_channel_counts_for_unrelated_viewer(services, jane, register):
    """Scenario: one other account subscribes to janedoe; an unrelated viewer is not subscribed."""
    jane_id = ObjectId(jane["id"])
    fan = register("fan")
    stranger = register("stranger")
    _subscribe(fan, jane_id)

    view = services.channels.get_channel_profile(stranger, "JaneDoe")

    assert view.id == jane["id"]
    assert view.username == "janedoe"
    assert view.subscribers_count == 1
    assert view.channel_subscribed_to_count == 0
    assert view.is_subscribed is False


def test_channel_reflects_viewer_subscription(services, jane, register):
    jane_id = ObjectId(jane["id"])
    fan = register("fan")
    _subscribe(fan, jane_id)
    _subscribe(jane_id, fan)

    view = services.channels.get_channel_profile(fan, "janedoe")

    assert view.is_subscribed is True
    assert view.channel_subscribed_to_count == 1


def test_channel_for_anonymous_viewer(services, jane):
    view = services.channels.get_channel_profile(None, "janedoe")

    assert view.subscribers_count == 0
    assert view.is_subscribed is False
    assert view.avatar == jane["avatar"]


def test_channel_view_exposes_only_public_fields(services, jane):
    fields = services.channels.get_channel_profile(None, "janedoe").model_dump()

    assert "password" not in fields
    assert "refresh_token" not in fields
    assert "watch_history" not in fields


def test_unknown_channel(services):
    with pytest.raises(NotFoundError):
        services.channels.get_channel_profile(None, "ghost")


def test_blank_channel_name(services):
    with pytest.raises(InvalidInputError):
        services.channels.get_channel_profile(None, "  ")
