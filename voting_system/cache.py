from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any

from redis.asyncio import Redis as RedisClient
from redis.exceptions import RedisError

from voting_system.schemas.votes import CacheStats
from voting_system.settings import DEFAULT_CACHE_PREFIX, get_settings

logger = logging.getLogger(__name__)

_DEFAULT_TTL_SECONDS = 3600
_ITEM_VOTES_PREFIX = "votes:item"
_COLLECTION_PREFIX = "votes:collection"
_DELETE_BATCH_SIZE = 500

_redis_client: RedisClient | None = None
_client_lock = asyncio.Lock()
# Monotonic deadline before which reconnect attempts are skipped. ``None`` means
# no failure is pending.
_redis_disabled: float | None = None


def item_votes_key(item_id: int | str) -> str:
    return f"{_ITEM_VOTES_PREFIX}:{item_id}"


def collection_key(order_by: str, direction: str) -> str:
    return f"{_COLLECTION_PREFIX}:{order_by.strip().lower()}:{direction.strip().lower()}"


def collection_pattern() -> str:
    return f"{_COLLECTION_PREFIX}:*"


def _load_redis_class() -> type[RedisClient]:
    """Return the client class used to open connections (patched in tests)."""

    return RedisClient


def _is_redis_error(exc: BaseException) -> bool:
    """Return ``True`` when ``exc`` originates from the Redis client library."""

    return isinstance(exc, RedisError)


def _backoff_remaining() -> float:
    if _redis_disabled is None:
        return 0.0
    return max(0.0, _redis_disabled - time.monotonic())


async def get_redis() -> RedisClient | None:
    """Get the shared Redis client, returning ``None`` while Redis is unreachable.

    A failed connection attempt opens a cool-down window during which no new
    attempts are made; the first call after the window elapses tries again.
    """
    global _redis_client, _redis_disabled

    if _redis_client is not None:
        return _redis_client

    if _backoff_remaining() > 0:
        logger.debug(
            "Redis connection disabled for another %.1fs; skipping attempt.",
            _backoff_remaining(),
        )
        return None

    async with _client_lock:
        # Double-check inside the lock, another task may have connected already.
        if _redis_client is not None:
            return _redis_client

        if _backoff_remaining() > 0:
            return None

        settings = get_settings()
        redis_class = _load_redis_class()
        try:
            client = redis_class.from_url(
                settings.redis_url,
                decode_responses=True,
                encoding="utf-8",
                socket_timeout=settings.redis_socket_timeout_seconds,
                socket_connect_timeout=settings.redis_socket_timeout_seconds,
            )
            await client.ping()
        except Exception as exc:  # type: ignore[broad-except]
            if not _is_redis_error(exc):
                raise
            backoff = settings.redis_retry_backoff_seconds
            _redis_disabled = time.monotonic() + backoff
            logger.warning(
                "Redis connection failed: %s. Retrying after %.0fs; votes are served "
                "from the database meanwhile.",
                exc,
                backoff,
            )
            return None

        _redis_client = client
        _redis_disabled = None
        logger.info("Redis connection established successfully")
        return _redis_client


class CacheClient:
    """Best-effort JSON cache bound to a single key namespace.

    Keys handed to the public methods are relative; the configured prefix is
    applied internally so ``flush`` can remove everything this system wrote
    without touching unrelated data in the same Redis database. Redis failures
    are logged and reported as misses (``None``) or ``False``; they never
    propagate to callers.
    """

    def __init__(
        self,
        redis: RedisClient | None,
        *,
        prefix: str = DEFAULT_CACHE_PREFIX,
        default_ttl: int = _DEFAULT_TTL_SECONDS,
    ) -> None:
        self._redis = redis
        self._prefix = prefix
        self._default_ttl = default_ttl

    @property
    def prefix(self) -> str:
        return self._prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def available(self) -> bool:
        if self._redis is None:
            return False
        try:
            return bool(await self._redis.ping())
        except Exception as exc:  # type: ignore[broad-except]
            if _is_redis_error(exc):
                logger.debug(f"Redis ping failed: {exc}")
                return False
            raise

    async def get_json(self, key: str) -> Any:
        if self._redis is None:
            return None
        try:
            payload = await self._redis.get(self._key(key))
        except Exception as exc:  # type: ignore[broad-except]
            if _is_redis_error(exc):
                logger.debug(f"Redis get failed for key {key}: {exc}")
                return None
            raise
        if payload is None:
            return None
        try:
            return json.loads(payload)
        except json.JSONDecodeError:
            logger.warning("Discarding undecodable cache payload for key %s", key)
            return None

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> bool:
        if self._redis is None:
            return False
        if ttl is None or ttl <= 0:
            ttl = self._default_ttl
        encoded = json.dumps(value, default=str)
        try:
            await self._redis.set(self._key(key), encoded, ex=ttl)
        except Exception as exc:  # type: ignore[broad-except]
            if _is_redis_error(exc):
                logger.debug(f"Redis set failed for key {key}: {exc}")
                return False
            raise
        return True

    async def delete(self, *keys: str) -> bool:
        if self._redis is None:
            return False
        if not keys:
            return True
        try:
            await self._redis.delete(*(self._key(key) for key in keys))
        except Exception as exc:  # type: ignore[broad-except]
            if _is_redis_error(exc):
                logger.warning("Redis delete failed for %s: %s", ", ".join(keys), exc)
                return False
            raise
        return True

    async def delete_pattern(self, pattern: str) -> bool:
        if self._redis is None:
            return False
        try:
            batch: list[str] = []
            async for key in self._redis.scan_iter(match=self._key(pattern)):
                batch.append(key)
                if len(batch) >= _DELETE_BATCH_SIZE:
                    await self._redis.delete(*batch)
                    batch = []
            if batch:
                await self._redis.delete(*batch)
        except Exception as exc:  # type: ignore[broad-except]
            if _is_redis_error(exc):
                logger.warning(f"Redis delete_pattern failed for {pattern}: {exc}")
                return False
            raise
        return True

    async def flush(self) -> bool:
        """Delete every key under this client's namespace."""

        return await self.delete_pattern("*")

    async def stats(self) -> CacheStats:
        if self._redis is None:
            return CacheStats(available=False)
        try:
            info = await self._redis.info()
            namespace_keys = 0
            async for _ in self._redis.scan_iter(match=self._key("*")):
                namespace_keys += 1
        except Exception as exc:  # type: ignore[broad-except]
            if _is_redis_error(exc):
                logger.debug(f"Redis stats collection failed: {exc}")
                return CacheStats(available=False)
            raise
        return CacheStats(
            available=True,
            redis_version=str(info.get("redis_version", "Unknown")),
            connected_clients=int(info.get("connected_clients", 0)),
            used_memory_human=str(info.get("used_memory_human", "0B")),
            namespace_keys=namespace_keys,
        )


async def get_cache_client() -> CacheClient:
    settings = get_settings()
    redis = await get_redis()
    return CacheClient(
        redis,
        prefix=settings.cache_prefix,
        default_ttl=settings.vote_cache_ttl_seconds,
    )


async def close_redis() -> None:
    """Close the global Redis connection and clear any pending backoff."""
    global _redis_client, _redis_disabled
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
    _redis_disabled = None


async def invalidate_item(cache: CacheClient, item_id: int | str) -> bool:
    """Drop the cached aggregate for ``item_id`` and every listing snapshot."""

    item_deleted = await cache.delete(item_votes_key(item_id))
    collections_deleted = await invalidate_collections(cache)
    return item_deleted and collections_deleted


async def invalidate_collections(cache: CacheClient) -> bool:
    return await cache.delete_pattern(collection_pattern())


__all__ = [
    "CacheClient",
    "close_redis",
    "collection_key",
    "collection_pattern",
    "get_cache_client",
    "get_redis",
    "invalidate_collections",
    "invalidate_item",
    "item_votes_key",
]
