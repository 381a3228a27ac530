"""
Tests for per-address spend locks.
"""

import asyncio

import pytest

from vrscwallet.wallet.locks import SpendLockRegistry


@pytest.mark.asyncio
async def test_same_address_is_serialized():
    registry = SpendLockRegistry()
    events: list[str] = []

    async def spend(name: str) -> None:
        async with registry.hold("Raddr"):
            events.append(f"{name}-start")
            await asyncio.sleep(0.01)
            events.append(f"{name}-end")

    await asyncio.gather(spend("a"), spend("b"))

    assert events == ["a-start", "a-end", "b-start", "b-end"]


@pytest.mark.asyncio
async def test_different_addresses_run_concurrently():
    registry = SpendLockRegistry()
    inside = asyncio.Event()
    release = asyncio.Event()

    async def first() -> None:
        async with registry.hold("Raddr1"):
            inside.set()
            await release.wait()

    task = asyncio.create_task(first())
    await inside.wait()

    assert registry.is_locked("Raddr1")
    async with registry.hold("Raddr2"):
        assert registry.is_locked("Raddr2")

    release.set()
    await task


@pytest.mark.asyncio
async def test_released_on_failure():
    registry = SpendLockRegistry()

    with pytest.raises(RuntimeError):
        async with registry.hold("Raddr"):
            raise RuntimeError("broadcast failed")

    assert not registry.is_locked("Raddr")


def test_same_lock_per_address():
    registry = SpendLockRegistry()
    assert registry.get_lock("Raddr") is registry.get_lock("Raddr")
    assert registry.get_lock("Raddr") is not registry.get_lock("Rother")
    assert not registry.is_locked("Runknown")
