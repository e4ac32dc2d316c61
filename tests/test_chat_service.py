import asyncio
import re

from server.core import CommandRouter, ConnectionContext, HistoryBuffer
from server.services import ChatService
from shared.protocol import Command, Frame, StatusCode


def _ctx(conn_id: int = 1) -> ConnectionContext:
    return ConnectionContext(conn_id=conn_id, reader=None, writer=None, peername="test")


def _dispatch(router, frame, ctx):
    return asyncio.run(router.dispatch(frame, ctx))


def _router(history=None):
    return ChatService(history if history is not None else HistoryBuffer()).register(CommandRouter())


def test_default_display_name():
    assert _ctx(7).display_name == "user7"


def test_join_sets_name():
    ctx = _ctx()
    result = _dispatch(_router(), Frame.of(Command.JOIN, "alice"), ctx)
    assert result.status == StatusCode.SUCCESS
    assert result.broadcast
    assert result.frame == Frame.of(Command.JOIN, "alice joined")
    assert ctx.display_name == "alice"


def test_join_with_empty_value_keeps_placeholder():
    ctx = _ctx(3)
    result = _dispatch(_router(), Frame.of(Command.JOIN, ""), ctx)
    assert result.frame.text == "user3 joined"
    assert ctx.display_name == "user3"


def test_name_change():
    ctx = _ctx()
    ctx.rename("alice")
    result = _dispatch(_router(), Frame.of(Command.NAME, "alicia"), ctx)
    assert result.frame == Frame.of(Command.NAME, "alice has changed their name to alicia")
    assert ctx.display_name == "alicia"


def test_msg_is_prefixed_and_recorded():
    history = HistoryBuffer()
    ctx = _ctx()
    ctx.rename("bob")
    result = _dispatch(_router(history), Frame.of(Command.MSG, "hi"), ctx)
    assert result.ok and result.broadcast
    assert result.frame.encode() == b"MSG\x00\x00\x00\x00\x07bob:\thi"
    assert asyncio.run(history.snapshot()) == ["bob:\thi"]


def test_blank_msg_is_rejected_privately():
    history = HistoryBuffer()
    result = _dispatch(_router(history), Frame.of(Command.MSG, "   "), _ctx())
    assert result.status == StatusCode.BAD_REQUEST
    assert not result.broadcast
    assert result.frame.key == "ERR"
    assert len(history) == 0


def test_time_format():
    result = _dispatch(_router(), Frame.of(Command.TIME, "ignored"), _ctx())
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", result.frame.text)
    assert result.broadcast


def test_read_empty_and_filled_history():
    history = HistoryBuffer()
    router = _router(history)
    result = _dispatch(router, Frame.of(Command.READ), _ctx())
    assert result.frame.encode() == b"READ" + (29).to_bytes(4, "big") + b"No message history available."
    assert not result.broadcast

    asyncio.run(history.append("a:\tone"))
    asyncio.run(history.append("b:\ttwo"))
    result = _dispatch(router, Frame.of(Command.READ), _ctx())
    assert result.frame.text == "a:\tone\nb:\ttwo"


def test_quit_closes():
    ctx = _ctx()
    ctx.rename("carol")
    result = _dispatch(_router(), Frame.of(Command.QUIT), ctx)
    assert result.close and result.broadcast
    assert result.frame.text == "carol has left :("


def test_unknown_command():
    result = _dispatch(_router(), Frame(key="XYZ", value=b""), _ctx())
    assert result.status == StatusCode.BAD_REQUEST
    assert not result.broadcast and not result.close
    assert result.frame == Frame.of(Command.ERR, "Unknown command: XYZ")
