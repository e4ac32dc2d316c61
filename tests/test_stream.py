import asyncio

from shared.protocol import encode_frame, read_exact, read_frame


class TrickleReader:
    """Stream stand-in that hands out at most `chunk` bytes per read."""

    def __init__(self, data: bytes, chunk: int = 1) -> None:
        self.data = data
        self.chunk = chunk
        self.reads = 0

    async def read(self, n: int) -> bytes:
        self.reads += 1
        piece, self.data = self.data[: min(n, self.chunk)], self.data[min(n, self.chunk) :]
        return piece


def _reader(data: bytes, eof: bool = True) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    reader.feed_data(data)
    if eof:
        reader.feed_eof()
    return reader


def test_read_exact_loops_over_partial_reads():
    async def scenario():
        reader = TrickleReader(b"abcdefgh", chunk=3)
        assert await read_exact(reader, 8) == b"abcdefgh"
        assert reader.reads == 3

    asyncio.run(scenario())


def test_read_exact_returns_none_when_stream_closes_early():
    async def scenario():
        assert await read_exact(_reader(b"abc"), 5) is None

    asyncio.run(scenario())


def test_read_exact_zero_bytes():
    async def scenario():
        assert await read_exact(_reader(b""), 0) == b""

    asyncio.run(scenario())


def test_read_frame_from_trickling_stream():
    async def scenario():
        data = encode_frame("MSG", "hello".encode("utf-8")) + encode_frame("QUIT", b"")
        reader = TrickleReader(data, chunk=2)
        first = await read_frame(reader)
        second = await read_frame(reader)
        assert (first.key, first.value) == ("MSG", b"hello")
        assert (second.key, second.value) == ("QUIT", b"")
        assert await read_frame(reader) is None

    asyncio.run(scenario())


def test_read_frame_end_of_stream_mid_value():
    async def scenario():
        truncated = encode_frame("MSG", b"0123456789")[:12]
        assert await read_frame(_reader(truncated)) is None

    asyncio.run(scenario())


def test_read_frame_end_of_stream_mid_header():
    async def scenario():
        assert await read_frame(_reader(b"MSG\x00\x00\x00")) is None
        assert await read_frame(_reader(b"MS")) is None

    asyncio.run(scenario())


def test_read_frame_waits_for_late_bytes():
    async def scenario():
        reader = asyncio.StreamReader()
        data = encode_frame("TIME", b"")
        reader.feed_data(data[:5])
        pending = asyncio.create_task(read_frame(reader))
        await asyncio.sleep(0)
        assert not pending.done()
        reader.feed_data(data[5:])
        frame = await asyncio.wait_for(pending, 1)
        assert frame.key == "TIME"

    asyncio.run(scenario())


def test_read_frame_replaces_non_ascii_key_bytes():
    async def scenario():
        frame = await read_frame(_reader(b"\xffBC\x00\x00\x00\x00\x02hi"))
        assert frame.key == "\ufffdBC"
        assert frame.value == b"hi"

    asyncio.run(scenario())
