"""
Redis Object Registry Implementation

Concrete Redis-based implementation of the ObjectRegistry interface.

Key layout (under the repository prefix):
    object:{id}          hash of record fields including access_count
    object:{id}:events   list of JSON access events
    expiry               zset of ids scored by expires_at epoch
    owner:{owner_id}     zset of ids scored by created_at epoch
    created              zset of ids scored by created_at epoch
    locators             set of storage locators referenced by live records

Every multi-key mutation runs as a single Lua script so records and their
index entries never diverge.
"""

import json
import logging
from datetime import datetime
from typing import Dict, Iterator, List, Optional

from tempshare.domain.errors import IdCollisionError, ObjectNotFoundError
from tempshare.domain.sharing.entities import AccessEvent, ShareObject
from tempshare.domain.sharing.repositories import ObjectRegistry

logger = logging.getLogger(__name__)

_CREATE_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 1 then
    return 0
end
redis.call('HSET', KEYS[1], unpack(ARGV, 5))
redis.call('ZADD', KEYS[2], ARGV[2], ARGV[1])
redis.call('ZADD', KEYS[3], ARGV[3], ARGV[1])
redis.call('ZADD', KEYS[4], ARGV[3], ARGV[1])
redis.call('SADD', KEYS[5], ARGV[4])
return 1
"""

_INCREMENT_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return -1
end
return redis.call('HINCRBY', KEYS[1], 'access_count', 1)
"""

_APPEND_EVENT_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return -1
end
return redis.call('RPUSH', KEYS[2], ARGV[1])
"""

_DELETE_SCRIPT = """
local fields = redis.call('HMGET', KEYS[1], 'owner_id', 'storage_locator')
local removed = redis.call('DEL', KEYS[1])
redis.call('DEL', KEYS[2])
redis.call('ZREM', KEYS[3], ARGV[1])
redis.call('ZREM', KEYS[4], ARGV[1])
if fields[1] then
    redis.call('ZREM', ARGV[2] .. fields[1], ARGV[1])
end
if fields[2] then
    redis.call('SREM', KEYS[5], fields[2])
end
return removed
"""


def _decode(value) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


def _decode_hash(raw: Dict) -> Dict[str, str]:
    return {_decode(k): _decode(v) for k, v in raw.items()}


class RedisObjectRegistry(ObjectRegistry):
    """
    Redis-based implementation of ObjectRegistry.

    The access counter lives in the record hash and is bumped with HINCRBY,
    so concurrent serves never lose an update.
    """

    def __init__(self, redis_repository, page_size: int = 200):
        """
        Initialize with Redis repository.

        Args:
            redis_repository: RedisRepository instance from infrastructure layer
            page_size: Batch size for paged index scans
        """
        self.redis_repo = redis_repository
        self.redis = redis_repository.redis
        self.page_size = page_size

        self._create = redis_repository.register_script(_CREATE_SCRIPT)
        self._increment = redis_repository.register_script(_INCREMENT_SCRIPT)
        self._append_event = redis_repository.register_script(_APPEND_EVENT_SCRIPT)
        self._delete = redis_repository.register_script(_DELETE_SCRIPT)

    # Key helpers

    def _object_key(self, object_id: str) -> str:
        return self.redis_repo.make_key(f"object:{object_id}")

    def _events_key(self, object_id: str) -> str:
        return self.redis_repo.make_key(f"object:{object_id}:events")

    def _owner_key(self, owner_id: str) -> str:
        return self.redis_repo.make_key(f"owner:{owner_id}")

    @property
    def _expiry_key(self) -> str:
        return self.redis_repo.make_key("expiry")

    @property
    def _created_key(self) -> str:
        return self.redis_repo.make_key("created")

    @property
    def _locators_key(self) -> str:
        return self.redis_repo.make_key("locators")

    # ObjectRegistry interface

    def create(self, record: ShareObject) -> str:
        fields = []
        for name, value in record.to_dict().items():
            fields.extend([name, value])

        created = self._create(
            keys=[
                self._object_key(record.object_id),
                self._expiry_key,
                self._owner_key(record.owner_id),
                self._created_key,
                self._locators_key,
            ],
            args=[
                record.object_id,
                record.expires_at.timestamp(),
                record.created_at.timestamp(),
                record.storage_locator,
                *fields,
            ],
        )

        if int(created) != 1:
            raise IdCollisionError(f"Object id already exists: {record.object_id[:8]}")

        return record.object_id

    def get(self, object_id: str) -> ShareObject:
        raw = self.redis.hgetall(self._object_key(object_id))
        if not raw:
            raise ObjectNotFoundError(f"Object not found: {object_id[:8]}")
        return ShareObject.from_dict(_decode_hash(raw))

    def increment_access_count(self, object_id: str) -> int:
        result = int(self._increment(keys=[self._object_key(object_id)]))
        if result < 0:
            raise ObjectNotFoundError(f"Object vanished before counting: {object_id[:8]}")
        return result

    def append_access_event(self, event: AccessEvent) -> None:
        result = int(self._append_event(
            keys=[self._object_key(event.object_id), self._events_key(event.object_id)],
            args=[json.dumps(event.to_dict())],
        ))
        if result < 0:
            raise ObjectNotFoundError(
                f"Object vanished before logging access: {event.object_id[:8]}"
            )

    def delete(self, object_id: str) -> bool:
        removed = self._delete(
            keys=[
                self._object_key(object_id),
                self._events_key(object_id),
                self._expiry_key,
                self._created_key,
                self._locators_key,
            ],
            args=[object_id, self.redis_repo.make_key("owner:")],
        )
        return int(removed) > 0

    def list_expired(self, now: datetime) -> Iterator[str]:
        """
        Page through the expiry index in ascending score order.

        The cursor is the last score seen plus the ids already yielded at that
        score, so records deleted by the caller between pages never cause
        others to be skipped.
        """
        max_score = f"({now.timestamp()}"
        min_score = "-inf"
        seen_at_cursor = set()

        while True:
            requested = self.page_size + len(seen_at_cursor)
            page = self.redis.zrangebyscore(
                self._expiry_key, min_score, max_score,
                start=0, num=requested, withscores=True,
            )

            fresh = [
                (_decode(member), score) for member, score in page
                if _decode(member) not in seen_at_cursor
            ]
            if not fresh:
                return

            for object_id, _ in fresh:
                yield object_id

            last_score = fresh[-1][1]
            at_last = {object_id for object_id, score in fresh if score == last_score}
            if min_score == last_score:
                seen_at_cursor |= at_last
            else:
                seen_at_cursor = at_last
            min_score = last_score

            if len(page) < requested:
                return

    def list_by_owner(self, owner_id: str) -> List[ShareObject]:
        ids = [_decode(m) for m in self.redis.zrevrange(self._owner_key(owner_id), 0, -1)]
        return self._load_many(ids)

    def iter_all(self) -> Iterator[ShareObject]:
        start = 0
        while True:
            ids = [
                _decode(m) for m in
                self.redis.zrevrange(self._created_key, start, start + self.page_size - 1)
            ]
            if not ids:
                return
            yield from self._load_many(ids)
            if len(ids) < self.page_size:
                return
            start += self.page_size

    def count_access_events(self, object_id: str) -> int:
        return int(self.redis.llen(self._events_key(object_id)))

    def count_access_events_since(self, object_id: str, since: datetime) -> int:
        count = 0
        for raw in self.redis.lrange(self._events_key(object_id), 0, -1):
            try:
                event = AccessEvent.from_dict(json.loads(raw))
            except (ValueError, KeyError, TypeError) as e:
                logger.warning(f"Skipping malformed access event for {object_id[:8]}: {e}")
                continue
            if event.occurred_at >= since:
                count += 1
        return count

    def locator_exists(self, storage_locator: str) -> bool:
        return bool(self.redis.sismember(self._locators_key, storage_locator))

    def _load_many(self, ids: List[str]) -> List[ShareObject]:
        if not ids:
            return []

        pipe = self.redis.pipeline(transaction=False)
        for object_id in ids:
            pipe.hgetall(self._object_key(object_id))

        records = []
        for object_id, raw in zip(ids, pipe.execute()):
            record = self._parse(object_id, raw)
            if record is not None:
                records.append(record)
        return records

    @staticmethod
    def _parse(object_id: str, raw: Dict) -> Optional[ShareObject]:
        # Index entries may briefly outlive a record deleted concurrently
        if not raw:
            return None
        try:
            return ShareObject.from_dict(_decode_hash(raw))
        except (KeyError, ValueError) as e:
            logger.error(f"Corrupt record {object_id[:8]} in registry: {e}")
            return None
