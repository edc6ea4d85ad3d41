"""공통 타입 정의 (Literal / Enum / TypeAlias)."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal, TypeAlias

ExchangeName: TypeAlias = Literal["huobi"]
Region: TypeAlias = Literal["asia"]

# 디코딩된 프레임 (JSON object)
JsonPayload: TypeAlias = dict[str, Any]


class ConnectionState(StrEnum):
    """스트림 프로토콜 상태"""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    SUBSCRIBING = "subscribing"
    STREAMING = "streaming"


class MessageKind(StrEnum):
    """수신 메시지 분류"""

    PING = "ping"
    SUBSCRIPTION_ACK = "subscription_ack"
    MARKET_DATA = "market_data"
    UNKNOWN = "unknown"
