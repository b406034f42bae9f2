"""
Redis cache for generated question sets
Lookups miss and writes are skipped whenever Redis is disabled or unreachable
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.core.config import settings

logger = logging.getLogger(__name__)

QuestionSet = List[Dict[str, Any]]

KEY_PREFIX = "quizboard:questions"


def question_set_key(subject: str, sub_category: str, difficulty: str) -> str:
    """``quizboard:questions:<subject>:<sub_category>:<difficulty>``"""
    return ":".join([KEY_PREFIX, subject, sub_category, difficulty])


class QuestionCache:
    """
    Question sets keyed by subject, sub-category and difficulty

    A failed Redis call drops the connection; the service keeps answering by
    generating questions until the next restart reconnects.
    """

    def __init__(self, ttl: Optional[int] = None, connect_attempts: int = 3):
        self.ttl = ttl or settings.QUESTION_CACHE_TTL
        self.connect_attempts = connect_attempts
        self.client: Optional[redis.Redis] = None

    @property
    def connected(self) -> bool:
        return self.client is not None

    async def connect(self) -> bool:
        """
        Open the Redis connection pool when caching is enabled

        Returns:
            True once Redis answered a ping
        """
        if not settings.REDIS_ENABLED:
            logger.info("Question cache disabled")
            return False
        if self.client is not None:
            return True

        for attempt in range(1, self.connect_attempts + 1):
            client = redis.from_url(
                settings.get_redis_url(),
                max_connections=settings.REDIS_POOL_MAX_CONNECTIONS,
                decode_responses=True,
            )
            try:
                await client.ping()
            except RedisError as e:
                await client.aclose()
                logger.warning(f"Redis unavailable (attempt {attempt}/{self.connect_attempts}): {e}")
                if attempt < self.connect_attempts:
                    await asyncio.sleep(attempt)
                continue

            self.client = client
            logger.info("Question cache connected to Redis")
            return True

        logger.error("Question cache unavailable; question sets will be generated per request")
        return False

    async def close(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None
            logger.info("Question cache disconnected")

    async def load(self, key: str) -> Optional[QuestionSet]:
        """Cached question set, or None on a miss or an unreadable entry"""
        if self.client is None:
            return None

        try:
            raw = await self.client.get(key)
        except RedisError as e:
            await self._disconnect_after(e, "read")
            return None
        if raw is None:
            return None

        try:
            questions = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring unreadable question set at {key}")
            return None
        return questions if isinstance(questions, list) else None

    async def save(self, key: str, questions: QuestionSet) -> bool:
        if self.client is None:
            return False

        try:
            await self.client.setex(key, self.ttl, json.dumps(questions))
        except RedisError as e:
            await self._disconnect_after(e, "write")
            return False
        return True

    async def _disconnect_after(self, error: RedisError, action: str) -> None:
        logger.error(f"Question cache {action} failed, disabling cache: {error}")
        client, self.client = self.client, None
        try:
            await client.aclose()
        except RedisError as e:
            logger.warning(f"Error closing Redis connection: {e}")


question_cache = QuestionCache()
