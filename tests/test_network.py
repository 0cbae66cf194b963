import asyncio

import pytest

from fakes import SITE, WRAPPER_KEY, FakeConnector, settle, wait_until, wrapper_http_client
from zeroframe import ClientHooks, ProtocolError, SessionError
from zeroframe.protocol.constants import MAX_PAYLOAD_SIZE
from zeroframe.protocol.errors import ErrorCode


async def _connected(make_zeroframe, *args, **kwargs):
    zeroframe = make_zeroframe(*args, **kwargs)
    await zeroframe.connect()
    await asyncio.wait_for(zeroframe.wait_connected(), 1)
    return zeroframe


async def _sync(ws):
    """Round-trip a ping so every frame fed before it has been dispatched."""
    before = len(ws.sent)
    ws.feed({"cmd": "ping", "id": 10_000 + before})
    await wait_until(lambda: len(ws.sent) > before)


@pytest.mark.asyncio
async def test_connect_uses_wrapper_key_and_master_address(make_zeroframe, connector):
    zeroframe = await _connected(make_zeroframe, {"multiuser": {"masterAddress": "1Master"}})
    call = connector.calls[0]
    assert call["url"] == f"ws://127.0.0.1:43110/Websocket?wrapper_key={WRAPPER_KEY}"
    assert call["additional_headers"] == {"Cookie": "master_address=1Master"}
    assert zeroframe.connected
    await zeroframe.close()


@pytest.mark.asyncio
async def test_connect_without_master_address_sends_no_headers(make_zeroframe, connector):
    zeroframe = await _connected(make_zeroframe)
    assert connector.calls[0]["additional_headers"] is None
    await zeroframe.close()


@pytest.mark.asyncio
async def test_wrapper_key_failure_is_fatal(make_zeroframe, connector):
    zeroframe = make_zeroframe(http_client=wrapper_http_client(body="<html></html>"))
    with pytest.raises(SessionError):
        await zeroframe.connect()
    assert connector.calls == []


@pytest.mark.asyncio
async def test_messages_queued_before_open_flush_in_order_once(make_zeroframe, connector):
    zeroframe = make_zeroframe()
    await zeroframe.cmd("first")
    await zeroframe.cmd("second", {"a": 1})
    await zeroframe.cmd("third", [1, 2])
    assert zeroframe.network.outbox.pending_count == 3

    await zeroframe.connect()
    await zeroframe.wait_connected()

    ws = connector.latest
    assert ws.sent == [
        {"id": 1, "cmd": "first", "params": {}},
        {"id": 2, "cmd": "second", "params": {"a": 1}},
        {"id": 3, "cmd": "third", "params": [1, 2]},
    ]

    ws.drop()
    await wait_until(lambda: len(connector.sockets) == 2)
    await zeroframe.wait_connected()
    assert connector.latest.sent == []
    await zeroframe.close()


@pytest.mark.asyncio
async def test_oversized_message_does_not_block_the_queue(make_zeroframe, connector):
    zeroframe = make_zeroframe()
    results = []
    with pytest.raises(ProtocolError) as exc:
        await zeroframe.cmd("fileWrite", {"content": "x" * (MAX_PAYLOAD_SIZE + 10)}, callback=results.append)
    assert exc.value.code is ErrorCode.ENCODE_FAILED
    await zeroframe.cmd("siteInfo")
    assert zeroframe.network.outbox.pending_count == 1
    assert len(zeroframe.network.callbacks) == 0

    await zeroframe.connect()
    await asyncio.wait_for(zeroframe.wait_connected(), 1)
    assert zeroframe.connected
    assert [frame["cmd"] for frame in connector.latest.sent] == ["siteInfo"]

    await zeroframe.cmd("serverInfo")
    assert [frame["cmd"] for frame in connector.latest.sent] == ["siteInfo", "serverInfo"]
    await zeroframe.close()


@pytest.mark.asyncio
async def test_unserializable_params_fail_the_call_only(make_zeroframe, connector):
    zeroframe = await _connected(make_zeroframe)
    with pytest.raises(ProtocolError) as exc:
        await zeroframe.cmd_async("fileQuery", {"query": object()})
    assert exc.value.code is ErrorCode.ENCODE_FAILED
    assert len(zeroframe.network.callbacks) == 0
    assert connector.latest.sent == []

    await zeroframe.cmd("siteInfo")
    assert [frame["cmd"] for frame in connector.latest.sent] == ["siteInfo"]
    await zeroframe.close()


@pytest.mark.asyncio
async def test_sends_after_open_go_out_immediately(make_zeroframe, connector):
    zeroframe = await _connected(make_zeroframe)
    message = await zeroframe.cmd("siteInfo")
    assert message.id == 1
    assert connector.latest.sent == [{"id": 1, "cmd": "siteInfo", "params": {}}]
    assert len(zeroframe.network.outbox) == 0
    await zeroframe.close()


@pytest.mark.asyncio
async def test_ids_increase_from_one(make_zeroframe, connector):
    zeroframe = await _connected(make_zeroframe)
    ids = [(await zeroframe.cmd("siteInfo")).id for _ in range(3)]
    assert ids == [1, 2, 3]
    await zeroframe.close()


@pytest.mark.asyncio
async def test_ping_is_answered_without_reaching_the_application(make_zeroframe, connector):
    requests = []
    zeroframe = await _connected(make_zeroframe, hooks=ClientHooks(on_request=lambda cmd, msg: requests.append(cmd)))
    ws = connector.latest

    ws.feed({"cmd": "ping", "id": 7})
    await wait_until(lambda: ws.sent)
    assert ws.sent == [{"id": 1, "cmd": "response", "to": 7, "result": "pong"}]
    assert requests == []
    await zeroframe.close()


@pytest.mark.asyncio
async def test_callback_fires_once_for_duplicate_responses(make_zeroframe, connector):
    zeroframe = await _connected(make_zeroframe)
    results = []
    message = await zeroframe.cmd("siteInfo", callback=results.append)

    ws = connector.latest
    ws.feed({"cmd": "response", "to": message.id, "result": {"address": SITE}})
    ws.feed({"cmd": "response", "to": message.id, "result": "duplicate"})
    await _sync(ws)

    assert results == [{"address": SITE}]
    assert len(zeroframe.network.callbacks) == 0
    await zeroframe.close()


@pytest.mark.asyncio
async def test_callback_registered_while_queued(make_zeroframe, connector):
    zeroframe = make_zeroframe()
    results = []
    message = await zeroframe.cmd("siteInfo", callback=results.append)
    await zeroframe.connect()
    await zeroframe.wait_connected()

    connector.latest.feed({"cmd": "response", "to": message.id, "result": "ok"})
    await wait_until(lambda: results)
    assert results == ["ok"]
    await zeroframe.close()


@pytest.mark.asyncio
async def test_unmatched_response_is_dropped(make_zeroframe, connector):
    requests = []
    zeroframe = await _connected(make_zeroframe, hooks=ClientHooks(on_request=lambda cmd, msg: requests.append(cmd)))
    ws = connector.latest

    ws.feed({"cmd": "response", "to": 99, "result": "late"})
    await _sync(ws)
    assert requests == []
    assert zeroframe.connected
    await zeroframe.close()


@pytest.mark.asyncio
async def test_application_commands_reach_handlers(make_zeroframe, connector):
    requests = []
    zeroframe = await _connected(make_zeroframe, hooks=ClientHooks(on_request=lambda cmd, msg: requests.append((cmd, msg))))
    handled = []

    async def on_set_site_info(message):
        handled.append(message["params"])

    zeroframe.register_handler("setSiteInfo", on_set_site_info)
    ws = connector.latest
    ws.feed({"cmd": "setSiteInfo", "id": 3, "params": {"address": SITE}})
    ws.feed({"cmd": "helloWorld", "id": 4, "params": {}})
    await _sync(ws)

    assert handled == [{"address": SITE}]
    assert requests == [("helloWorld", {"cmd": "helloWorld", "id": 4, "params": {}})]
    await zeroframe.close()


@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_dispatcher(make_zeroframe, connector):
    zeroframe = await _connected(make_zeroframe)

    async def broken(message):
        raise RuntimeError("handler bug")

    zeroframe.register_handler("notification", broken)
    ws = connector.latest
    ws.feed({"cmd": "notification", "id": 1, "params": ["info", "hi"]})
    await _sync(ws)
    assert zeroframe.connected
    await zeroframe.close()


@pytest.mark.asyncio
async def test_malformed_frames_are_dropped(make_zeroframe, connector):
    zeroframe = await _connected(make_zeroframe)
    ws = connector.latest
    ws.feed_raw("{not json")
    ws.feed({"id": 5, "params": {}})
    await _sync(ws)
    assert len(ws.sent) == 1
    await zeroframe.close()


@pytest.mark.asyncio
async def test_hooks_follow_the_lifecycle(make_zeroframe, connector):
    events = []

    async def on_open():
        events.append("open")

    hooks = ClientHooks(
        on_open=on_open,
        on_error=lambda exc: events.append("error"),
        on_close=lambda code, reason: events.append(("close", code)),
    )
    zeroframe = await _connected(make_zeroframe, {"reconnect": {"attempts": 0}}, hooks)
    connector.latest.drop(1011)
    await wait_until(lambda: len(events) == 2)
    assert events == ["open", ("close", 1011)]


@pytest.mark.asyncio
async def test_failed_open_reports_error_then_close(make_zeroframe):
    events = []
    hooks = ClientHooks(
        on_error=lambda exc: events.append(type(exc).__name__),
        on_close=lambda code, reason: events.append("close"),
    )
    zeroframe = make_zeroframe({"reconnect": {"attempts": 0}}, hooks, connector=FakeConnector(succeed=0))
    await zeroframe.connect()
    await wait_until(lambda: len(events) == 2)
    assert events == ["OSError", "close"]
    assert not zeroframe.connected


@pytest.mark.asyncio
async def test_superseded_transport_is_inert(make_zeroframe, connector):
    requests = []
    zeroframe = await _connected(make_zeroframe, hooks=ClientHooks(on_request=lambda cmd, msg: requests.append(cmd)))
    old = connector.latest
    old_transport = zeroframe.network.transport

    old.drop()
    await wait_until(lambda: len(connector.sockets) == 2)
    await zeroframe.wait_connected()
    assert zeroframe.network.transport is not old_transport

    await old_transport._on_message(old_transport, '{"cmd": "helloWorld", "id": 1}')
    await settle()
    assert requests == []
    await zeroframe.close()


@pytest.mark.asyncio
async def test_close_stops_reconnecting(make_zeroframe, connector):
    zeroframe = await _connected(make_zeroframe)
    await zeroframe.close()
    assert connector.latest.closed
    await settle()
    assert len(connector.calls) == 1
    assert not zeroframe.connected
