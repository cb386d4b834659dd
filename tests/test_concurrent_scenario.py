"""
Three overlapping top-level transactions on the in-memory client.

Reads see committed data plus the reader's own writes, so a transaction
that commits while another is still running becomes visible to it.
"""
import asyncio

import pytest


class PostService:
    def __init__(self, client, executor):
        self.client = client
        self.executor = executor

    async def create_many(self, count, prefix="Post"):
        return [await self.client.write(f"{prefix} {i}") for i in range(count)]

    async def read_all_and_create_summary(self):
        posts = await self.client.read()
        return await self.client.write("Summary: " + "".join(f"{p};" for p in posts))

    async def create_five_wait_and_summarize(self, events):
        async def work():
            self.executor.on_success(lambda: events.append("summarize committed"))
            await self.create_many(5)
            await asyncio.sleep(0.05)
            await self.read_all_and_create_summary()
            return await self.client.read()

        return await self.executor.execute(work)

    async def create_thirty_and_throw(self, events):
        async def work():
            self.executor.on_success(lambda: events.append("thirty committed"))
            await self.create_many(30, prefix="Doomed")
            await asyncio.sleep(0.01)
            raise RuntimeError("Test error")

        return await self.executor.execute(work)

    async def read_all_and_create_one_with_count(self, events):
        async def work():
            self.executor.on_success(lambda: events.append("count committed"))
            posts = await self.client.read()
            await asyncio.sleep(0.005)
            return await self.client.write(f"Count: {len(posts)}")

        return await self.executor.execute(work)


async def test_three_interleaved_transactions(fake_proxy, fake_client, tx_executor):
    service = PostService(fake_proxy, tx_executor)
    events = []

    summarize = asyncio.create_task(service.create_five_wait_and_summarize(events))
    await asyncio.sleep(0.001)
    failed, counted = await asyncio.gather(
        service.create_thirty_and_throw(events),
        service.read_all_and_create_one_with_count(events),
        return_exceptions=True,
    )
    inside = await summarize

    assert isinstance(failed, RuntimeError)
    assert counted == "Count: 0"
    # 5 own posts, the concurrently committed count post, and the summary
    assert len(inside) == 7
    assert "Count: 0" in inside
    assert [p for p in fake_client.committed if p.startswith("Doomed")] == []
    assert len(fake_client.committed) == 7
    assert sorted(events) == ["count committed", "summarize committed"]
    assert fake_client.events.index("commit:3") < fake_client.events.index("commit:1")


async def test_failed_transaction_leaves_nothing_behind(fake_proxy, fake_client, tx_executor):
    service = PostService(fake_proxy, tx_executor)
    events = []

    with pytest.raises(RuntimeError, match="Test error"):
        await service.create_thirty_and_throw(events)
    assert fake_client.committed == []
    assert events == []
