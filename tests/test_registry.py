import asyncio

import pytest

from server.core import BroadcastRegistry


class FakeSink:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.closing = False
        self.received = []
        self._pending = b""

    def write(self, data: bytes) -> None:
        self._pending += data

    async def drain(self) -> None:
        if self.fail:
            raise ConnectionResetError("peer went away")
        self.received.append(self._pending)
        self._pending = b""

    def is_closing(self) -> bool:
        return self.closing


def test_broadcast_prunes_failing_sink():
    async def scenario():
        registry = BroadcastRegistry()
        good_a, dead, good_b = FakeSink(), FakeSink(fail=True), FakeSink()
        for sink in (good_a, dead, good_b):
            await registry.register(sink)
        delivered = await registry.broadcast(b"frame")
        return registry, delivered, good_a, dead, good_b

    registry, delivered, good_a, dead, good_b = asyncio.run(scenario())
    assert delivered == 2
    assert good_a.received == [b"frame"]
    assert good_b.received == [b"frame"]
    assert dead not in registry
    assert len(registry) == 2


def test_closing_sink_is_pruned_without_write():
    async def scenario():
        registry = BroadcastRegistry()
        sink = FakeSink()
        sink.closing = True
        await registry.register(sink)
        delivered = await registry.broadcast(b"frame")
        return registry, sink, delivered

    registry, sink, delivered = asyncio.run(scenario())
    assert delivered == 0
    assert sink not in registry
    assert sink.received == []


def test_register_is_idempotent_and_deregister_is_safe():
    async def scenario():
        registry = BroadcastRegistry()
        sink = FakeSink()
        await registry.register(sink)
        await registry.register(sink)
        assert len(registry) == 1
        await registry.deregister(sink)
        await registry.deregister(sink)
        return registry

    assert len(asyncio.run(scenario())) == 0


def test_broadcasts_arrive_in_call_order():
    async def scenario():
        registry = BroadcastRegistry()
        sinks = [FakeSink() for _ in range(3)]
        for sink in sinks:
            await registry.register(sink)
        for i in range(5):
            await registry.broadcast(bytes([i]))
        return sinks

    for sink in asyncio.run(scenario()):
        assert sink.received == [bytes([i]) for i in range(5)]


def test_send_to_propagates_errors():
    async def scenario():
        registry = BroadcastRegistry()
        sink = FakeSink(fail=True)
        await registry.register(sink)
        with pytest.raises(ConnectionResetError):
            await registry.send_to(sink, b"private")
        # private failures leave pruning to the owning handler
        assert sink in registry

    asyncio.run(scenario())
