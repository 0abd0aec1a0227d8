"""
音频缓存和 single-flight 登记表 - 单元测试
"""

import asyncio

import pytest

from ipa_backend.models.word_models import Accent
from ipa_backend.services.word_lookup.audio_cache import AudioCache, InFlightRegistry, make_audio_key


def test_audio_key_normalizes_text():
    assert make_audio_key(Accent.US, " Hello ") == (Accent.US, "hello")
    assert make_audio_key("UK", "HELLO") == (Accent.UK, "hello")


def test_audio_cache_differently_cased_input_shares_entry():
    cache = AudioCache()
    cache.put(Accent.US, "Hello", "AAA")
    cache.put(Accent.US, "hello", "BBB")

    assert cache.size() == 1
    assert cache.get(Accent.US, "HELLO") == "BBB"


def test_audio_cache_separates_accents():
    cache = AudioCache()
    cache.put(Accent.US, "hello", "us")
    cache.put(Accent.UK, "hello", "uk")

    assert cache.get(Accent.US, "hello") == "us"
    assert cache.get(Accent.UK, "hello") == "uk"
    assert cache.get(Accent.US, "world") is None


def test_audio_cache_unbounded_by_default():
    cache = AudioCache()
    for i in range(500):
        cache.put(Accent.US, f"word{i}", "x")

    assert cache.size() == 500


def test_audio_cache_lru_bound():
    """有上限时淘汰最近最少使用的条目"""
    cache = AudioCache(max_entries=2)
    cache.put(Accent.US, "a", "1")
    cache.put(Accent.US, "b", "2")
    cache.get(Accent.US, "a")
    cache.put(Accent.US, "c", "3")

    assert cache.contains(Accent.US, "a")
    assert not cache.contains(Accent.US, "b")
    assert cache.contains(Accent.US, "c")


@pytest.mark.asyncio
async def test_in_flight_registry_shares_single_call():
    """并发相同请求只执行一次"""
    registry = InFlightRegistry()
    gate = asyncio.Event()
    calls = []

    async def work():
        calls.append(1)
        await gate.wait()
        return "result"

    tasks = [asyncio.ensure_future(registry.run("key", work)) for _ in range(3)]
    await asyncio.sleep(0)
    assert registry.is_in_flight("key")

    gate.set()
    results = await asyncio.gather(*tasks)

    assert results == ["result"] * 3
    assert len(calls) == 1
    assert registry.joined == 2
    assert not registry.is_in_flight("key")


@pytest.mark.asyncio
async def test_in_flight_registry_shares_failure_then_retries():
    """所有等待者收到同一个异常，之后的调用重新发起"""
    registry = InFlightRegistry()
    gate = asyncio.Event()
    calls = []

    async def failing():
        calls.append(1)
        await gate.wait()
        raise RuntimeError("boom")

    tasks = [asyncio.ensure_future(registry.run("key", failing)) for _ in range(2)]
    await asyncio.sleep(0)
    gate.set()
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert all(isinstance(r, RuntimeError) for r in results)
    assert results[0] is results[1]
    assert len(calls) == 1
    assert registry.size() == 0

    async def succeeding():
        calls.append(1)
        return "ok"

    assert await registry.run("key", succeeding) == "ok"
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_shared_call():
    registry = InFlightRegistry()
    gate = asyncio.Event()

    async def work():
        await gate.wait()
        return 42

    first = asyncio.ensure_future(registry.run("key", work))
    second = asyncio.ensure_future(registry.run("key", work))
    await asyncio.sleep(0)

    first.cancel()
    gate.set()

    assert await second == 42
    with pytest.raises(asyncio.CancelledError):
        await first
