"""Connection registry tests."""

import asyncio

import pytest

from eventrelay.errors import DuplicateConnectionError
from eventrelay.realtime.registry import new_connection_id


@pytest.mark.asyncio
async def test_register_and_unregister(registry):
    assert await registry.register("a") == 1
    assert await registry.register("b") == 2
    assert await registry.ids() == {"a", "b"}

    assert await registry.unregister("a") == 1
    assert await registry.count() == 1
    assert await registry.ids() == {"b"}


@pytest.mark.asyncio
async def test_unregister_unknown_is_noop(registry):
    await registry.register("a")
    assert await registry.unregister("missing") == 1
    assert await registry.unregister("a") == 0
    assert await registry.unregister("a") == 0


@pytest.mark.asyncio
async def test_duplicate_register_rejected(registry):
    await registry.register("a")
    with pytest.raises(DuplicateConnectionError):
        await registry.register("a")
    assert await registry.count() == 1


@pytest.mark.asyncio
async def test_snapshot_is_consistent_under_churn(registry):
    ids = [new_connection_id() for _ in range(200)]

    async def churn(connection_id):
        await registry.register(connection_id)
        await asyncio.sleep(0)
        await registry.unregister(connection_id)

    async def observe():
        for _ in range(50):
            snapshot = await registry.snapshot()
            assert snapshot.count == len(snapshot.ids)
            await asyncio.sleep(0)

    await asyncio.gather(observe(), *(churn(i) for i in ids))
    assert await registry.count() == 0


def test_connection_ids_are_unique():
    ids = {new_connection_id() for _ in range(10_000)}
    assert len(ids) == 10_000
