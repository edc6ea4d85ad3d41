"""어댑터와 외부 협력자 사이의 구조적 계약 (typing.Protocol).

거래소 어댑터는 상속 대신 이 계약을 만족하는 일반 클래스로 구현합니다.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol, runtime_checkable

from price_stream.core.dto.internal.market import Symbol, Trade


class PriceStore(Protocol):
    """프로세스 공유 시세/체결 저장소 (심볼 키, last-write-wins)."""

    def set_trades(self, symbol: Symbol, trades: list[Trade]) -> None: ...

    def get_trades(self, symbol: Symbol) -> list[Trade] | None: ...

    def set_price(self, symbol: Symbol, price: Decimal) -> None: ...

    def get_price(self, symbol: Symbol) -> Decimal | None: ...


class RateProvider(Protocol):
    """환율 제공자. 환율이 없거나 오래되었으면 None."""

    def get_rate(self, symbol: Symbol) -> Decimal | None: ...


class FrameSender(Protocol):
    """송신 가능한 전송 계층 (웹소켓 연결)."""

    async def send(self, message: str | bytes) -> None: ...


@runtime_checkable
class QuoteAdapter(Protocol):
    """거래소 스트림 어댑터 계약.

    - on_connect: 전송 계층 연결 직후 (구독 전송)
    - on_raw_frame: 원본 프레임 1개 처리
    - on_close: 연결 종료/오류
    - check_alive: 마지막 확인 이후 새 데이터 수신 여부
    - idle_seconds: 마지막 데이터 반영 이후 경과 시간 (없으면 None)
    """

    exchange_name: str

    async def on_connect(self, sender: FrameSender) -> None: ...

    async def on_raw_frame(self, frame: str | bytes) -> None: ...

    async def on_close(self, reason: str | None = None) -> None: ...

    def check_alive(self) -> bool: ...

    def idle_seconds(self) -> float | None: ...
