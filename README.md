# twit

Building blocks for the follow side of a small microblogging backend.
The package has domain models and a table repository for follow
relationships, plus services and use cases to create and read them. It
also has queue, topic and cache adapters, and a message handler for a
worker that reacts to new follows.

Every class gets its collaborators passed in: table client, queue or
topic service client, tweet search, logger. Any object with the methods
the class calls will do, so in-memory fakes work as well as real service
clients.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `twit.follow.domain`

- `Follow`: `id`, `follower_id`, `followed_id` and `created_at`, all
  strings. `to_dict()` and `from_dict()` convert to and from the JSON form,
  which has the keys `id`, `followerId`, `followedId` and `createdAt`.
  Missing fields stay empty. A field that is not a string raises
  `TypeError`.
- `EventType`: has one member, `FOLLOW_CREATED`.
- `Event`: a follow event as it is handed to a publisher. It has `type`,
  `follow` and `metadata`.
- `FollowCreatedEvent`: the event carried inside a notification. Its JSON
  keys are `Type`, `Follow` and `Metadata`.
- `RESOURCE_TYPE` is `"FOLLOW"`.

### `twit.follow.daos`

- `FollowDAO`: the stored form of a follow. `created_at` is a
  `datetime`. `to_item()` and `from_item()` convert to and from typed
  attribute maps such as `{"S": "..."}`. `table_name()` returns
  `"follows"`.
- `to_follow_model(dao)` and `to_follow_dao_model(follow)` convert
  between the two forms. When the creation time is empty or is not
  RFC 3339, the current UTC time is used instead.

### `twit.follow.repository`

`Repository(client, table_name, logger)` works with a client that has
`put_item`, `get_item` and `query` methods taking keyword arguments.

- `create(follow)` stores a follow. If the follow has no creation time,
  the current time is stamped on it.
- `get(follow_id)` takes an ID of the form `<prefix>-<follower>-<followed>`
  and looks the follow up by its follower and followed keys. An ID with
  fewer than three parts raises `ValueError`. If nothing is stored under
  the ID, it raises `FollowNotFoundError`.
- `get_followers(followed_id)` and `get_following(follower_id)` query the
  `followed_id-index` and `follower_id-index` indexes and return lists of
  user IDs.

Errors raised by the client are logged and raised again.

### `twit.follow.service`

`FollowService(repository, publisher, logger)` has these methods:

- `create(follow)` stores the follow, then publishes an `Event` of type
  `FOLLOW_CREATED`.
- `get`, `get_followers`, `get_following` and `get_all_following` pass
  the call on to the repository.

### `twit.follow.createfollow`

`CreateFollowUseCase(service, logger).create_follow(follow)` does the
following:

- It raises `SelfFollowError` when a user tries to follow themselves.
- It sets the ID to `flw-<follower>-<followed>`. When the creation time is
  empty, it fills it with the current UTC time in the form
  `YYYY-MM-DDTHH:MM:SSZ`. A creation time that is already there is kept
  as given.
- It raises `FollowAlreadyExistsError` when the service already holds a
  follow with that ID. Lookup errors are raised again, except errors
  whose message says "not found".
- Otherwise it calls `service.create(follow)`.

### `twit.follow.getfollow`

`GetFollowUseCase(service, logger)` has `get_followers(user_id)` and
`get_following(user_id)`. Both always return a list. When the service
returns `None`, they return an empty list.

### `twit.follow.processnewfollow`

- `ProcessNewFollowUseCase(service, logger, tweet_service, update_timeline_publisher)`
  has `process_new_follow(follow_event)`. It calls `tweet_service.search(options)`
  for the followed user's tweets. The options have `filters.user_id` set
  to that user, `pagination.limit` set to 10 and `pagination.offset` set
  to 0. The call must return a `(tweets, cursor)` pair. The use case then
  publishes every tweet it got back. A failing search or publish raises
  `ProcessFollowError`. When no publisher is configured, it logs a
  warning and returns. The use case also has `get_followers` and
  `get_following`.
- `UpdateTimelinePublisher(client, queue_url, logger)` sends
  `{"tweet": ..., "user_id": ...}` through the client's `send` method.

### `twit.adapters.queue`

- `SQSClient(client, logger)` wraps a service client that has
  `send_message`, `receive_message` and `delete_message` methods. Its own
  methods are `publish`/`send`, `receive_messages` and `delete_message`.
  Payloads are sent as compact JSON. Objects that have `to_dict()` and
  dataclasses are encoded as well. Failures raise `QueueError`.
  `encode_payload(payload)` does the JSON encoding.
- `Adapter(client, orchestrate_queue, update_queue, process_queue, populate_queue, rebuild_queue)`
  holds an `SQSClient` and the queue URLs.
- `Consumer(adapter, queue_url, handler, logger)` has two methods:
  - `poll_once()` receives one batch of up to 10 messages, waiting up to
    20 seconds. It hands the batch to the handler. If the handler
    succeeds, it deletes the messages and returns how many were accepted.
    If the handler raises, it logs the error and returns 0.
  - `start(stop_event)` polls until the `threading.Event` is set. It
    waits 5 seconds after each receive failure.
- `PopulateTimelineCachePublisher(adapter, queue_url, logger).publish(timeline)`
  queues a timeline.
- `RebuildTimelinePublisher(adapter, queue_url, logger).publish(user_id)`
  queues `{"user_id": ...}`. That document is encoded as a JSON string.

### `twit.adapters.sns`

- `SNSClient(client, logger).publish_message(topic_arn, message, message_attributes)`
  publishes JSON with string-typed message attributes. Failures raise
  `PublishError`.
- `SNSMessage` is the envelope a topic puts around a message it delivers
  to a queue. `from_dict()` and `from_json()` match keys without regard
  to case.
- `FollowSNSPublisher(client, topic_arn, logger).publish(event)`
  publishes a `FollowCreatedEvent`. It sets the attributes
  `event_type=FOLLOW_CREATED` and `resource_type=FOLLOW`.

### `twit.adapters.cache`

`CacheClient` wraps a Redis client. Its methods are:

- `CacheClient.connect(host, port, password, logger)` opens database 0
  and checks the connection with a ping.
- `get(key)` returns bytes, or `None` when the key is missing.
- `set(key, value, ttl)` stores a value. `ttl` defaults to one hour. A
  zero or `None` ttl means the value never expires.
- `delete(*keys)` removes keys.

### `twit.workers`

- `parse_follow_message(body)` unwraps a `FollowCreatedEvent` from a
  topic envelope delivered through a queue. Malformed input raises
  `ValueError`.
- `make_follow_handler(use_case, logger)` builds a batch handler for
  `Consumer`. The handler passes each message to
  `use_case.process_new_follow`. When a message fails to parse or to
  process, the handler logs it and goes on to the next.

## Examples

Creating a follow:

```python
from twit.follow.createfollow import CreateFollowUseCase
from twit.follow.domain import Follow

use_case = CreateFollowUseCase(service, logger)
use_case.create_follow(Follow(follower_id="user-1", followed_id="user-2"))
```

Running the new-follow worker loop:

```python
import threading

from twit.adapters.queue import Adapter, Consumer, SQSClient
from twit.follow.processnewfollow import ProcessNewFollowUseCase, UpdateTimelinePublisher
from twit.workers import make_follow_handler

adapter = Adapter(
    SQSClient(sqs_service_client, logger),
    update_queue="update-timeline-queue",
    process_queue="process-follow-queue",
)
publisher = UpdateTimelinePublisher(adapter, adapter.update_queue, logger)
use_case = ProcessNewFollowUseCase(follow_service, logger, tweet_search, publisher)

consumer = Consumer(adapter, adapter.process_queue, make_follow_handler(use_case, logger))
stop = threading.Event()
consumer.start(stop)  # set `stop` from another thread to end the loop
```

## What the package does not do

- It has no HTTP server and no command-line entry points. Building and
  running workers, and handling signals, is left to the application.
- It does not create AWS or other cloud clients, and it does not load
  configuration. You pass in table, queue and topic clients that are
  already set up.
- It does not store or search tweets and it does not build timelines. The
  tweet search and the timeline objects it queues come from the caller.