"""Huobi(HTX) 스트림 메시지 헬퍼.

메시지 형태:
- ping:  {"ping": 1492420473027}
- ack:   {"id": ..., "status": "ok", "subbed": "market.btcusdt.kline.1min", "ts": ...}
- data:  {"ch": "market.btcusdt.kline.1min", "ts": ..., "tick": {"id": ..., "close": ..., ...}}
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import orjson

from price_stream.core.dto.internal.market import Symbol
from price_stream.core.types import JsonPayload, MessageKind

CHANNEL_PREFIX = "market."


def channel_suffix(period: str) -> str:
    return f".kline.{period}"


def subscription_channel(symbol: Symbol, period: str) -> str:
    """ "BTC/USDT" → "market.btcusdt.kline.1min" """
    return f"{CHANNEL_PREFIX}{symbol.compact().lower()}{channel_suffix(period)}"


def subscribe_message(symbol: Symbol, period: str) -> bytes:
    return orjson.dumps({"sub": subscription_channel(symbol, period)})


def pong_message(ping_value: Any) -> bytes:
    """서버가 보낸 ping 값을 그대로 되돌려 보냄 (int는 int, str은 str)."""
    return orjson.dumps({"pong": ping_value})


def classify_message(payload: JsonPayload) -> MessageKind:
    if "ping" in payload:
        return MessageKind.PING
    if "subbed" in payload:
        return MessageKind.SUBSCRIPTION_ACK
    ch = payload.get("ch")
    if isinstance(ch, str) and ch.startswith(CHANNEL_PREFIX):
        return MessageKind.MARKET_DATA
    return MessageKind.UNKNOWN


def channel_to_compact(ch: str, period: str) -> str:
    """ "market.btcusdt.kline.1min" → "BTCUSDT" """
    return ch.replace(CHANNEL_PREFIX, "", 1).replace(channel_suffix(period), "").upper()


def resolve_symbol(ch: str, symbols: Iterable[Symbol], period: str) -> Symbol | None:
    """채널 이름을 설정된 심볼로 역매핑. 일치하는 심볼이 없으면 None."""
    compact = channel_to_compact(ch, period)
    return next((symbol for symbol in symbols if symbol.compact() == compact), None)
