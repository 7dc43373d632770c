from __future__ import annotations

import asyncio

from rover_service.services.locks import KeyedLock


async def test_same_key_is_serialized_and_released():
    locks = KeyedLock()
    order: list[str] = []

    async def worker(name: str, key: int) -> None:
        async with locks.hold(key):
            order.append(f"{name}:start")
            await asyncio.sleep(0.01)
            order.append(f"{name}:end")

    await asyncio.gather(worker("a", 1), worker("b", 1))

    assert order == ["a:start", "a:end", "b:start", "b:end"]
    assert len(locks) == 0


async def test_different_keys_run_concurrently():
    locks = KeyedLock()
    both_inside = asyncio.Event()
    inside = 0

    async def worker(key: int) -> None:
        nonlocal inside
        async with locks.hold(key):
            inside += 1
            if inside == 2:
                both_inside.set()
            await asyncio.wait_for(both_inside.wait(), timeout=1)

    await asyncio.gather(worker(1), worker(2))
    assert len(locks) == 0


async def test_lock_released_on_error():
    locks = KeyedLock()

    try:
        async with locks.hold("x"):
            assert locks.locked("x")
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    assert not locks.locked("x")
    assert len(locks) == 0
