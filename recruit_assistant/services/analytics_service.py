import logging
from typing import Any, Dict, List, Optional

from redis import Redis
from redis.exceptions import RedisError

from recruit_assistant.config import config
from recruit_assistant.errors import AnalyticsFailure
from recruit_assistant.services.question_classifier import categorize, category_by_name, is_question
from recruit_assistant.services.text_utils import normalize

logger = logging.getLogger(__name__)

QUESTION_KEY_LENGTH = 100


def question_key(message: str) -> str:
    return normalize(message)[:QUESTION_KEY_LENGTH]


class AnalyticsService:
    """
    Question frequency counters in Redis:
      - "{prefix}:question_counts": hash question -> count
      - "{prefix}:popular_questions": sorted set question -> count, for top-N reads
      - "{prefix}:question_categories": hash question -> category name
    """

    def __init__(self, redis_client: Redis, prefix: str = None):
        self.r = redis_client
        prefix = prefix or config.ANALYTICS_PREFIX
        self.counts_key = f"{prefix}:question_counts"
        self.ranking_key = f"{prefix}:popular_questions"
        self.categories_key = f"{prefix}:question_categories"

    @classmethod
    def from_url(cls, redis_url: str, token: Optional[str] = None, prefix: str = None,
                 socket_timeout: float = None, connect_timeout: float = None) -> "AnalyticsService":
        client = Redis.from_url(
            redis_url,
            password=token,
            decode_responses=True,
            socket_timeout=socket_timeout or config.REDIS_SOCKET_TIMEOUT_SECONDS,
            socket_connect_timeout=connect_timeout or config.REDIS_CONNECT_TIMEOUT_SECONDS,
        )
        return cls(client, prefix=prefix)

    def record(self, message: str) -> bool:
        """Count ``message`` if it is a question. Returns whether it was counted."""
        if not is_question(message):
            logger.debug("Skipping analytics for non-question: %r", message)
            return False

        key = question_key(message)
        category = categorize(message)
        try:
            pipe = self.r.pipeline(transaction=True)
            pipe.hincrby(self.counts_key, key, 1)
            pipe.zincrby(self.ranking_key, 1, key)
            pipe.hset(self.categories_key, key, category.name)
            pipe.execute()
        except RedisError as e:
            raise AnalyticsFailure(f"Could not record question: {e}") from e

        logger.info("Recorded question under %s: %s", category.name, key)
        return True

    def top_questions(self, limit: int = None) -> List[Dict[str, Any]]:
        limit = limit or config.ANALYTICS_TOP_N
        try:
            ranked = self.r.zrevrange(self.ranking_key, 0, limit - 1, withscores=True)
            names = self.r.hmget(self.categories_key, [q for q, _ in ranked]) if ranked else []
        except RedisError as e:
            raise AnalyticsFailure(f"Could not read question ranking: {e}") from e

        questions = []
        for (question, score), name in zip(ranked, names):
            category = category_by_name(name)
            questions.append({
                "question": question,
                "count": int(score),
                "category": category.name,
                "icon": category.icon,
            })
        return questions

    def stats(self) -> Dict[str, Any]:
        try:
            counts = self.r.hgetall(self.counts_key)
            categories = self.r.hgetall(self.categories_key)
            unique_questions = self.r.zcard(self.ranking_key)
            top = self.r.zrevrange(self.ranking_key, 0, 0, withscores=True)
        except RedisError as e:
            raise AnalyticsFailure(f"Could not read question stats: {e}") from e

        by_category: Dict[str, int] = {}
        for question, count in counts.items():
            name = category_by_name(categories.get(question)).name
            by_category[name] = by_category.get(name, 0) + int(count)

        return {
            "totalQuestions": sum(int(c) for c in counts.values()),
            "uniqueQuestions": unique_questions,
            "mostPopularCount": int(top[0][1]) if top else 0,
            "categories": by_category,
        }

    def clear(self) -> int:
        """Drop counters, ranking and categories in a single DEL."""
        try:
            return self.r.delete(self.counts_key, self.ranking_key, self.categories_key)
        except RedisError as e:
            raise AnalyticsFailure(f"Could not clear analytics: {e}") from e
