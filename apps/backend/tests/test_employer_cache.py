"""
Tests for the run-scoped employer profile cache.
"""
import asyncio

import pytest

from crawler.employer_cache import EmployerDetailCache


def test_first_write_wins():
    cache = EmployerDetailCache()

    assert cache.put("42", {"Size": "10"}) == {"Size": "10"}
    assert cache.put("42", {"Size": "99"}) == {"Size": "10"}
    assert cache.get("42") == {"Size": "10"}
    assert "42" in cache
    assert len(cache) == 1


def test_unknown_key():
    cache = EmployerDetailCache()
    assert cache.get("missing") is None
    assert "missing" not in cache


@pytest.mark.asyncio
async def test_concurrent_loads_run_once():
    cache = EmployerDetailCache()
    calls = []

    async def loader():
        calls.append(1)
        await asyncio.sleep(0.01)
        return {"Website": "www.acme.com"}

    results = await asyncio.gather(*(cache.get_or_load("42", loader) for _ in range(5)))

    assert len(calls) == 1
    assert all(result == {"Website": "www.acme.com"} for result in results)
    assert cache.misses == 1
    assert cache.hits == 4


@pytest.mark.asyncio
async def test_empty_profile_is_cached():
    cache = EmployerDetailCache()
    calls = []

    async def loader():
        calls.append(1)
        return {}

    await cache.get_or_load("42", loader)
    await cache.get_or_load("42", loader)

    assert len(calls) == 1


@pytest.mark.asyncio
async def test_failed_load_is_not_cached():
    cache = EmployerDetailCache()

    async def failing():
        raise RuntimeError("overview unavailable")

    async def working():
        return {"Size": "10"}

    with pytest.raises(RuntimeError):
        await cache.get_or_load("42", failing)

    assert "42" not in cache
    assert await cache.get_or_load("42", working) == {"Size": "10"}
