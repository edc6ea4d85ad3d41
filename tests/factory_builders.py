from __future__ import annotations

import asyncio
import gzip
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any

import orjson

from price_stream.core.dto.internal.common import ConnectionPolicyDomain, ConnectionScopeDomain
from price_stream.core.dto.internal.market import Symbol
from price_stream.core.dto.io.commands import ConnectionTargetDTO
from price_stream.core.dto.io.huobi import HuobiCandleDTO

BTC_USDT = Symbol(base="BTC", quote="USDT")
ETH_USDT = Symbol(base="ETH", quote="USDT")
ETH_BTC = Symbol(base="ETH", quote="BTC")
BTC_KRW = Symbol(base="BTC", quote="KRW")
KRW_USD = Symbol(base="KRW", quote="USD")


def build_scope_domain(**overrides: Any) -> ConnectionScopeDomain:
    payload: dict[str, Any] = {"exchange": "huobi", "region": "asia"}
    payload.update(overrides)
    return ConnectionScopeDomain(**payload)


def build_connection_policy_domain(**overrides: Any) -> ConnectionPolicyDomain:
    payload: dict[str, Any] = {
        "initial_backoff": 0.0,
        "max_backoff": 0.0,
        "backoff_multiplier": 2.0,
        "jitter": 0.0,
        "reconnect_max_attempts": 5,
        "receive_timeout": 1.0,
    }
    payload.update(overrides)
    return ConnectionPolicyDomain(**payload)


def build_target(**overrides: Any) -> ConnectionTargetDTO:
    payload: dict[str, Any] = {"exchange": "huobi", "region": "asia"}
    payload.update(overrides)
    return ConnectionTargetDTO(**payload)


def build_candle_payload(
    bucket_id: int, close: str, amount: str = "1", vol: str = "1", **overrides: Any
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": bucket_id,
        "open": close,
        "close": close,
        "low": close,
        "high": close,
        "amount": amount,
        "vol": vol,
        "count": 1,
    }
    payload.update(overrides)
    return payload


def build_candles(*rows: dict[str, Any]) -> list[HuobiCandleDTO]:
    return [HuobiCandleDTO.model_validate(row) for row in rows]


def build_kline_response(
    data: Any = None, status: str = "ok", **overrides: Any
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "ch": "market.btcusdt.kline.1min",
        "status": status,
        "ts": 1700000000000,
        "data": [] if data is None else data,
    }
    payload.update(overrides)
    return payload


def build_kline_message(
    market: str = "btcusdt",
    bucket_id: int = 1700000040,
    close: Any = 50000,
    amount: Any = 2,
    period: str = "1min",
) -> dict[str, Any]:
    return {
        "ch": f"market.{market}.kline.{period}",
        "ts": bucket_id * 1000 + 123,
        "tick": {
            "id": bucket_id,
            "open": close,
            "close": close,
            "low": close,
            "high": close,
            "amount": amount,
            "vol": 1,
            "count": 1,
        },
    }


def build_subscription_ack(
    channel: str = "market.btcusdt.kline.1min", status: str = "ok"
) -> dict[str, Any]:
    return {"id": "id1", "status": status, "subbed": channel, "ts": 1489474081631}


def gzip_frame(payload: Any) -> bytes:
    return gzip.compress(orjson.dumps(payload))


class StubRateProvider:
    def __init__(self, rates: dict[Symbol, Decimal] | None = None) -> None:
        self.rates = dict(rates or {})

    def get_rate(self, symbol: Symbol) -> Decimal | None:
        return self.rates.get(symbol)


class FakeSender:
    def __init__(self) -> None:
        self.sent: list[str | bytes] = []

    async def send(self, message: str | bytes) -> None:
        self.sent.append(message)

    def decoded(self) -> list[dict[str, Any]]:
        return [orjson.loads(message) for message in self.sent]


class FakeCandleSource:
    """심볼별 캔들 목록 또는 예외를 돌려주는 REST 대역"""

    def __init__(self, responses: dict[Symbol, Any] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[tuple[Symbol, str, int]] = []

    async def fetch_candles(
        self, symbol: Symbol, period: str, size: int
    ) -> list[HuobiCandleDTO]:
        self.calls.append((symbol, period, size))
        response = self.responses.get(symbol, [])
        if isinstance(response, BaseException):
            raise response
        return response


class FakeWebsocket:
    """스크립트된 프레임/예외를 순서대로 돌려주는 웹소켓 대역"""

    def __init__(self, script: list[Any]) -> None:
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        for item in script:
            self._queue.put_nowait(item)
        self.sent: list[str | bytes] = []
        self.closed = False

    async def send(self, message: str | bytes) -> None:
        self.sent.append(message)

    async def recv(self) -> Any:
        if self.closed:
            raise ConnectionResetError("closed")
        item = await self._queue.get()
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self) -> None:
        self.closed = True
        self._queue.put_nowait(ConnectionResetError("closed"))


class FakeConnector:
    """websockets.connect 대역. 세션 목록의 예외는 연결 실패로 취급"""

    def __init__(self, sessions: list[Any]) -> None:
        self._sessions = list(sessions)
        self.calls: list[str] = []

    def __call__(self, url: str, **kwargs: Any):
        self.calls.append(url)
        return self._open()

    @asynccontextmanager
    async def _open(self):
        if not self._sessions:
            raise ConnectionRefusedError("no more sessions")
        session = self._sessions.pop(0)
        if isinstance(session, BaseException):
            raise session
        yield session
