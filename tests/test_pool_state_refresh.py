"""Tests for the periodic adapter state refresh run by the service."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from dexfeeds.main import refresh_pool_state


def make_adapter(dex_key, side_effect=None):
    adapter = MagicMock()
    adapter.dex_key = dex_key
    adapter.update_pool_state = AsyncMock(side_effect=side_effect)
    return adapter


class TestRefreshPoolState:
    @pytest.mark.asyncio
    async def test_every_adapter_refreshed_each_round(self):
        failing = make_adapter("native", side_effect=RuntimeError("cache down"))
        healthy = make_adapter("renegade")
        task = asyncio.create_task(refresh_pool_state([failing, healthy], 0.01))

        try:
            for _ in range(200):
                if healthy.update_pool_state.await_count >= 2:
                    break
                await asyncio.sleep(0.01)
        finally:
            task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert failing.update_pool_state.await_count >= 2
        assert healthy.update_pool_state.await_count >= 2

    @pytest.mark.asyncio
    async def test_waits_one_interval_before_first_refresh(self):
        adapter = make_adapter("renegade")
        task = asyncio.create_task(refresh_pool_state([adapter], 60.0))

        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        adapter.update_pool_state.assert_not_awaited()
