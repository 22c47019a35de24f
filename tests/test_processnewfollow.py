import json
import logging

import pytest

from twit.adapters.queue import Adapter, SQSClient
from twit.follow.domain import Follow, FollowCreatedEvent
from twit.follow.processnewfollow import (
    ProcessFollowError,
    ProcessNewFollowUseCase,
    UpdateTimelinePublisher,
)


class FakeTweetService:
    def __init__(self, tweets=None, error=None):
        self.tweets = tweets or []
        self.error = error
        self.calls = []

    def search(self, options):
        self.calls.append(options)
        if self.error is not None:
            raise self.error
        return self.tweets, ""


class FakePublisher:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def publish(self, tweet, user_id):
        self.calls.append((tweet, user_id))
        if self.error is not None:
            raise self.error


class FakeFollowService:
    def __init__(self, followers=None, following=None, error=None):
        self.followers = followers
        self.following = following
        self.error = error

    def get_followers(self, followed_id):
        if self.error:
            raise self.error
        return self.followers

    def get_following(self, follower_id):
        if self.error:
            raise self.error
        return self.following


class FakeQueueService:
    def __init__(self):
        self.sent = []

    def send_message(self, **kwargs):
        self.sent.append(kwargs)

    def receive_message(self, **kwargs):
        return {}

    def delete_message(self, **kwargs):
        return None


def make_event(follower="user-1", followed="user-2"):
    return FollowCreatedEvent(
        type="FollowCreatedEventType",
        follow=Follow(
            id="flw-123",
            follower_id=follower,
            followed_id=followed,
            created_at="2025-06-10T23:00:00Z",
        ),
    )


TWEETS = [
    {"id": "twt-1", "userId": "user-2", "content": "Hello world!",
     "createdAt": "2025-06-10T22:00:00Z"},
    {"id": "twt-2", "userId": "user-2", "content": "Another tweet",
     "createdAt": "2025-06-10T22:30:00Z"},
]


def test_success_publishes_each_tweet():
    tweets = FakeTweetService(TWEETS)
    publisher = FakePublisher()
    uc = ProcessNewFollowUseCase(FakeFollowService(), None, tweets, publisher)
    uc.process_new_follow(make_event())
    opts = tweets.calls[0]
    assert opts.filters.user_id == "user-2"
    assert opts.pagination.limit == 10
    assert opts.pagination.offset == 0
    assert publisher.calls == [(TWEETS[0], "user-2"), (TWEETS[1], "user-2")]


def test_search_error():
    publisher = FakePublisher()
    cause = RuntimeError("error searching tweets")
    uc = ProcessNewFollowUseCase(
        FakeFollowService(), None, FakeTweetService(error=cause), publisher
    )
    with pytest.raises(ProcessFollowError, match="error al buscar tweets") as info:
        uc.process_new_follow(make_event())
    assert info.value.__cause__ is cause
    assert publisher.calls == []


def test_publish_error():
    publisher = FakePublisher(error=RuntimeError("error publishing message"))
    uc = ProcessNewFollowUseCase(
        FakeFollowService(), None, FakeTweetService(TWEETS[:1]), publisher
    )
    with pytest.raises(ProcessFollowError, match="error al publicar mensaje"):
        uc.process_new_follow(make_event())
    assert publisher.calls == [(TWEETS[0], "user-2")]


def test_no_publisher_warns(caplog):
    logger = logging.getLogger("test.processnewfollow")
    tweets = FakeTweetService(TWEETS[:1])
    uc = ProcessNewFollowUseCase(FakeFollowService(), logger, tweets, None)
    with caplog.at_level(logging.WARNING, logger="test.processnewfollow"):
        uc.process_new_follow(make_event())
    assert len(tweets.calls) == 1
    assert any(
        r.getMessage().startswith(
            "No se ha configurado publicador para actualización de timeline"
        )
        for r in caplog.records
    )


def test_no_tweets():
    publisher = FakePublisher()
    tweets = FakeTweetService([])
    uc = ProcessNewFollowUseCase(FakeFollowService(), None, tweets, publisher)
    uc.process_new_follow(make_event())
    assert len(tweets.calls) == 1
    assert publisher.calls == []


def test_cancelled_search():
    publisher = FakePublisher()
    uc = ProcessNewFollowUseCase(
        FakeFollowService(), None,
        FakeTweetService(error=TimeoutError("context canceled")), publisher,
    )
    with pytest.raises(ProcessFollowError, match="error al buscar tweets"):
        uc.process_new_follow(make_event())
    assert publisher.calls == []


def test_multiple_publish_errors_stop_after_first():
    publisher = FakePublisher(error=RuntimeError("error publishing message"))
    uc = ProcessNewFollowUseCase(
        FakeFollowService(), None, FakeTweetService(TWEETS), publisher
    )
    with pytest.raises(ProcessFollowError, match="error al publicar mensaje"):
        uc.process_new_follow(make_event())
    assert len(publisher.calls) == 1


def test_empty_follower_id():
    publisher = FakePublisher()
    tweets = FakeTweetService(TWEETS[:1])
    uc = ProcessNewFollowUseCase(FakeFollowService(), None, tweets, publisher)
    uc.process_new_follow(make_event(follower=""))
    assert tweets.calls[0].filters.user_id == "user-2"
    assert publisher.calls == [(TWEETS[0], "user-2")]


def test_empty_followed_id():
    publisher = FakePublisher()
    tweets = FakeTweetService([])
    uc = ProcessNewFollowUseCase(FakeFollowService(), None, tweets, publisher)
    uc.process_new_follow(make_event(followed=""))
    assert tweets.calls[0].filters.user_id == ""
    assert publisher.calls == []


def test_update_timeline_publisher_payload():
    service = FakeQueueService()
    adapter = Adapter(SQSClient(service))
    publisher = UpdateTimelinePublisher(adapter, "update-queue", None)
    publisher.publish({"id": "twt-1"}, "user-2")
    assert service.sent[0]["QueueUrl"] == "update-queue"
    assert service.sent[0]["MessageBody"] == '{"tweet":{"id":"twt-1"},"user_id":"user-2"}'
    assert json.loads(service.sent[0]["MessageBody"])["user_id"] == "user-2"


def test_get_followers_and_following():
    uc = ProcessNewFollowUseCase(
        FakeFollowService(followers=["a", "b"], following=["c"]),
        None, FakeTweetService(), None,
    )
    assert uc.get_followers("user-1") == ["a", "b"]
    assert uc.get_following("user-1") == ["c"]


def test_get_followers_error_propagates():
    error = RuntimeError("service error")
    uc = ProcessNewFollowUseCase(
        FakeFollowService(error=error), None, FakeTweetService(), None
    )
    with pytest.raises(RuntimeError) as info:
        uc.get_followers("user-1")
    assert info.value is error
    with pytest.raises(RuntimeError):
        uc.get_following("user-1")