"""
Pytest fixtures: in-memory stand-ins for Redis and the OpenAI Assistants client.
"""

import threading
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError


class FakePipeline:
    def __init__(self, redis):
        self.redis = redis
        self.ops = []

    def hincrby(self, *args):
        self.ops.append(("hincrby", args))

    def zincrby(self, *args):
        self.ops.append(("zincrby", args))

    def hset(self, *args):
        self.ops.append(("hset", args))

    def execute(self):
        with self.redis.lock:
            return [getattr(self.redis, name)(*args) for name, args in self.ops]


class FakeRedis:
    """Just the hash / sorted set commands the analytics service uses."""

    def __init__(self, fail=False):
        self.hashes = {}
        self.zsets = {}
        self.fail = fail
        self.lock = threading.Lock()

    def _check(self):
        if self.fail:
            raise RedisConnectionError("redis is down")

    def pipeline(self, transaction=True):
        self._check()
        return FakePipeline(self)

    def hincrby(self, name, key, amount=1):
        h = self.hashes.setdefault(name, {})
        h[key] = str(int(h.get(key, 0)) + amount)
        return int(h[key])

    def hset(self, name, key, value):
        self.hashes.setdefault(name, {})[key] = value
        return 1

    def hgetall(self, name):
        self._check()
        return dict(self.hashes.get(name, {}))

    def hmget(self, name, keys):
        self._check()
        h = self.hashes.get(name, {})
        return [h.get(k) for k in keys]

    def zincrby(self, name, amount, member):
        z = self.zsets.setdefault(name, {})
        z[member] = z.get(member, 0.0) + amount
        return z[member]

    def zcard(self, name):
        self._check()
        return len(self.zsets.get(name, {}))

    def zrevrange(self, name, start, end, withscores=False):
        self._check()
        items = sorted(self.zsets.get(name, {}).items(), key=lambda kv: -kv[1])
        items = items[start:end + 1] if end >= 0 else items[start:]
        return items if withscores else [m for m, _ in items]

    def delete(self, *names):
        self._check()
        removed = 0
        for name in names:
            if self.hashes.pop(name, None) is not None:
                removed += 1
            if self.zsets.pop(name, None) is not None:
                removed += 1
        return removed


def make_run(status, run_id="run_1"):
    return SimpleNamespace(id=run_id, status=status)


def make_openai_client(reply="Hello from the assistant.", statuses=("completed",)):
    """Fake AsyncOpenAI: the run goes through ``statuses`` then stays on the last one."""
    statuses = list(statuses)

    def retrieve(run_id, thread_id=None):
        status = statuses.pop(0) if len(statuses) > 1 else statuses[0]
        return make_run(status, run_id)

    first = statuses.pop(0) if len(statuses) > 1 else statuses[0]
    message = SimpleNamespace(content=[SimpleNamespace(type="text", text=SimpleNamespace(value=reply))])

    threads = SimpleNamespace(
        create=AsyncMock(return_value=SimpleNamespace(id="thread_new")),
        messages=SimpleNamespace(
            create=AsyncMock(),
            list=AsyncMock(return_value=SimpleNamespace(data=[message])),
        ),
        runs=SimpleNamespace(
            create=AsyncMock(return_value=make_run(first)),
            retrieve=AsyncMock(side_effect=retrieve),
            cancel=AsyncMock(),
        ),
    )
    assistants = SimpleNamespace(create=AsyncMock(return_value=SimpleNamespace(id="asst_123")))
    return SimpleNamespace(beta=SimpleNamespace(assistants=assistants, threads=threads))


async def no_sleep(seconds):
    return None


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def failing_redis():
    return FakeRedis(fail=True)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def openai_factory():
    return make_openai_client


@pytest.fixture
def fast_sleep():
    return no_sleep
