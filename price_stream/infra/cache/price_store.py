from __future__ import annotations

from decimal import Decimal

from price_stream.core.dto.internal.market import Symbol, Trade


class InMemoryPriceStore:
    """프로세스 전역 시세/체결 저장소 (in-memory).

    - 심볼 키, last-write-wins
    - 단일 이벤트 루프에서만 쓰기 (심볼별 단일 작성자 규약)
    - get_trades는 복사본을 반환하므로 호출자가 수정해도 저장소는 변하지 않습니다
    """

    def __init__(self) -> None:
        self._trades: dict[Symbol, list[Trade]] = {}
        self._prices: dict[Symbol, Decimal] = {}

    def set_trades(self, symbol: Symbol, trades: list[Trade]) -> None:
        self._trades[symbol] = list(trades)

    def get_trades(self, symbol: Symbol) -> list[Trade] | None:
        trades = self._trades.get(symbol)
        return list(trades) if trades is not None else None

    def set_price(self, symbol: Symbol, price: Decimal) -> None:
        self._prices[symbol] = price

    def get_price(self, symbol: Symbol) -> Decimal | None:
        return self._prices.get(symbol)

    def symbols(self) -> list[Symbol]:
        """가격 또는 체결이 기록된 모든 심볼"""
        return sorted(set(self._trades) | set(self._prices))

