from __future__ import annotations

import asyncio

import pytest

from price_stream.common.exceptions.base import ProtocolViolationError
from price_stream.core.connection.transport import WebsocketTransport
from tests.factory_builders import (
    FakeConnector,
    FakeWebsocket,
    build_connection_policy_domain,
    build_scope_domain,
)

URL = "wss://example.invalid/ws"


class RecordingAdapter:
    """프레임을 기록하고 지정된 프레임에서 동작을 수행하는 어댑터 대역"""

    exchange_name = "huobi"

    def __init__(self, actions: dict | None = None) -> None:
        self.actions = actions or {}
        self.transport: WebsocketTransport | None = None
        self.connects = 0
        self.frames: list = []
        self.closes: list[str | None] = []

    async def on_connect(self, sender) -> None:
        self.connects += 1
        await sender.send(f"sub-{self.connects}")

    async def on_raw_frame(self, frame) -> None:
        self.frames.append(frame)
        action = self.actions.get(frame)
        if action == "disconnect":
            await self.transport.request_disconnect("done")
        elif action == "reconnect":
            await self.transport.request_reconnect("stalled")
        elif action == "violate":
            raise ProtocolViolationError(exchange_name="huobi", message="unknown")

    async def on_close(self, reason: str | None = None) -> None:
        self.closes.append(reason)

    def check_alive(self) -> bool:
        return bool(self.frames)


def _build(adapter: RecordingAdapter, sessions: list, **policy) -> tuple[WebsocketTransport, FakeConnector]:
    connector = FakeConnector(sessions)
    transport = WebsocketTransport(
        adapter=adapter,
        url=URL,
        scope=build_scope_domain(),
        policy=build_connection_policy_domain(**policy),
        connector=connector,
    )
    adapter.transport = transport
    return transport, connector


@pytest.mark.asyncio
async def test_reconnects_after_connection_loss(captured_errors) -> None:
    adapter = RecordingAdapter({"b": "disconnect"})
    first = FakeWebsocket(["a", ConnectionResetError("reset by peer")])
    second = FakeWebsocket(["b"])
    transport, connector = _build(adapter, [first, second])

    await asyncio.wait_for(transport.run(), timeout=2)

    assert connector.calls == [URL, URL]
    assert adapter.connects == 2
    assert adapter.frames == ["a", "b"]
    assert first.sent == ["sub-1"]
    assert second.sent == ["sub-2"]
    assert len(adapter.closes) == 2
    assert transport.connect_count == 2
    assert transport.stop_requested is True
    assert [event.kind for event in captured_errors] == ["ws"]


@pytest.mark.asyncio
async def test_protocol_violation_drops_connection_and_reconnects(captured_errors) -> None:
    adapter = RecordingAdapter({"bad": "violate", "ok": "disconnect"})
    transport, _ = _build(adapter, [FakeWebsocket(["bad"]), FakeWebsocket(["ok"])])

    await asyncio.wait_for(transport.run(), timeout=2)

    assert adapter.connects == 2
    assert adapter.closes[0] == "huobi: unknown"
    # 프로토콜 위반은 어댑터가 보고하므로 전송 계층은 중복 보고하지 않음
    assert captured_errors == []


@pytest.mark.asyncio
async def test_request_reconnect_reopens_without_error() -> None:
    adapter = RecordingAdapter({"a": "reconnect", "b": "disconnect"})
    first = FakeWebsocket(["a", "never-read"])
    transport, connector = _build(adapter, [first, FakeWebsocket(["b"])])

    await asyncio.wait_for(transport.run(), timeout=2)

    assert first.closed is True
    assert adapter.frames == ["a", "b"]
    assert adapter.closes[0] == "reconnect requested"
    assert len(connector.calls) == 2


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts(captured_errors) -> None:
    adapter = RecordingAdapter()
    transport, connector = _build(
        adapter,
        [OSError("refused"), OSError("refused"), OSError("refused")],
        reconnect_max_attempts=3,
    )

    await asyncio.wait_for(transport.run(), timeout=2)

    assert len(connector.calls) == 3
    assert adapter.connects == 0
    assert transport.stop_requested is True
    assert isinstance(captured_errors[-1].exc, RuntimeError)


@pytest.mark.asyncio
async def test_send_without_connection_raises() -> None:
    transport, _ = _build(RecordingAdapter(), [])

    with pytest.raises(ConnectionError):
        await transport.send("x")
