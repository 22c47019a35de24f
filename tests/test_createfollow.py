import logging
from datetime import datetime

import pytest

from twit.follow.createfollow import (
    CreateFollowUseCase,
    FollowAlreadyExistsError,
    SelfFollowError,
)
from twit.follow.domain import Follow
from twit.follow.repository import FollowNotFoundError


class FakeService:
    def __init__(self, create_error=None, existing=None, get_error=None):
        self.create_error = create_error
        self.existing = existing or {}
        self.get_error = get_error
        self.created = []
        self.get_calls = []

    def get(self, follow_id):
        self.get_calls.append(follow_id)
        if self.get_error is not None:
            raise self.get_error
        if follow_id in self.existing:
            return self.existing[follow_id]
        raise FollowNotFoundError(follow_id)

    def create(self, follow):
        self.created.append(follow)
        if self.create_error is not None:
            raise self.create_error


@pytest.fixture
def logger():
    return logging.getLogger("test-createfollow")


def test_create_follow_success(logger):
    service = FakeService()
    uc = CreateFollowUseCase(service, logger)
    follow = Follow(follower_id="user-1", followed_id="user-2")

    uc.create_follow(follow)

    assert len(service.created) == 1
    created = service.created[0]
    assert created.id == "flw-user-1-user-2"
    assert created.follower_id == "user-1"
    assert created.followed_id == "user-2"
    datetime.strptime(created.created_at, "%Y-%m-%dT%H:%M:%SZ")
    assert created.created_at.endswith("Z")


def test_create_follow_does_not_mutate_input(logger):
    service = FakeService()
    uc = CreateFollowUseCase(service, logger)
    follow = Follow(follower_id="user-1", followed_id="user-2")

    uc.create_follow(follow)

    assert follow.id == ""
    assert follow.created_at == ""


def test_create_follow_same_user_error(logger):
    service = FakeService()
    uc = CreateFollowUseCase(service, logger)

    with pytest.raises(SelfFollowError) as info:
        uc.create_follow(Follow(follower_id="user-1", followed_id="user-1"))

    assert "no puede seguirse a sí mismo" in str(info.value)
    assert service.created == []
    assert service.get_calls == []


def test_create_follow_service_error(logger):
    error = RuntimeError("service error")
    service = FakeService(create_error=error)
    uc = CreateFollowUseCase(service, logger)

    with pytest.raises(RuntimeError) as info:
        uc.create_follow(Follow(follower_id="user-1", followed_id="user-2"))

    assert info.value is error
    assert service.created[0].follower_id == "user-1"
    assert service.created[0].followed_id == "user-2"


def test_create_follow_with_existing_created_at(logger):
    service = FakeService()
    uc = CreateFollowUseCase(service, logger)
    existing_time = "2025-01-01T12:00:00Z"

    uc.create_follow(Follow(follower_id="user-1", followed_id="user-2", created_at=existing_time))

    assert service.created[0].created_at == existing_time


def test_create_follow_with_invalid_created_at(logger):
    service = FakeService()
    uc = CreateFollowUseCase(service, logger)
    invalid_time = "2025/01/01 12:00:00"

    uc.create_follow(Follow(follower_id="user-1", followed_id="user-2", created_at=invalid_time))

    assert service.created[0].created_at == invalid_time


def test_create_follow_canceled(logger):
    error = RuntimeError("context canceled")
    service = FakeService(create_error=error)
    uc = CreateFollowUseCase(service, logger)

    with pytest.raises(RuntimeError) as info:
        uc.create_follow(Follow(follower_id="user-1", followed_id="user-2"))

    assert info.value is error


def test_create_follow_empty_follower_id(logger):
    service = FakeService()
    uc = CreateFollowUseCase(service, logger)

    uc.create_follow(Follow(follower_id="", followed_id="user-2"))

    assert service.created[0].id == "flw--user-2"


def test_create_follow_empty_followed_id(logger):
    service = FakeService()
    uc = CreateFollowUseCase(service, logger)

    uc.create_follow(Follow(follower_id="user-1", followed_id=""))

    assert service.created[0].id == "flw-user-1-"


def test_create_follow_already_exists(logger):
    stored = Follow(id="flw-user-1-user-2", follower_id="user-1", followed_id="user-2")
    service = FakeService(existing={stored.id: stored})
    uc = CreateFollowUseCase(service, logger)

    with pytest.raises(FollowAlreadyExistsError, match="el follow ya existe"):
        uc.create_follow(Follow(follower_id="user-1", followed_id="user-2"))

    assert service.created == []
    assert service.get_calls == ["flw-user-1-user-2"]


def test_create_follow_lookup_error_propagates(logger):
    error = RuntimeError("db error")
    service = FakeService(get_error=error)
    uc = CreateFollowUseCase(service, logger)

    with pytest.raises(RuntimeError) as info:
        uc.create_follow(Follow(follower_id="user-1", followed_id="user-2"))

    assert info.value is error
    assert service.created == []


def test_create_follow_not_found_message_is_tolerated(logger):
    service = FakeService(get_error=RuntimeError("item not found"))
    uc = CreateFollowUseCase(service, logger)

    uc.create_follow(Follow(follower_id="user-1", followed_id="user-2"))

    assert [f.id for f in service.created] == ["flw-user-1-user-2"]