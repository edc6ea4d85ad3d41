from __future__ import annotations

from bisect import bisect_left
from decimal import Decimal

from price_stream.core.connection.contracts import PriceStore
from price_stream.core.connection.services.currency_synthesis import CurrencySynthesizer
from price_stream.core.connection.services.liveness import LivenessMonitor
from price_stream.core.dto.internal.market import Symbol, Trade


def bucket_to_ms(bucket_id: int) -> int:
    """버킷 식별자(epoch seconds) → epoch milliseconds"""
    return int(bucket_id) * 1000


class TradeNormalizer:
    """거래소 캔들 틱 → 표준 Trade 윈도우 반영

    처리 순서:
    1. 버킷 id(초) → 타임스탬프(ms)
    2. 같은 타임스탬프가 있으면 가격/거래량 교체, 없으면 시간순 위치에 삽입 (윈도우 크기 유지)
    3. 윈도우와 최신 버킷 가격을 저장소에 기록
    4. 통화 합성 트리거
    5. 생존 플래그 설정
    """

    def __init__(
        self,
        store: PriceStore,
        synthesizer: CurrencySynthesizer,
        liveness: LivenessMonitor,
        window_size: int | None = None,
    ) -> None:
        self._store = store
        self._synthesizer = synthesizer
        self._liveness = liveness
        self._window_size = window_size

    def apply_tick(
        self, symbol: Symbol, bucket_id: int, price: Decimal, volume: Decimal
    ) -> Trade:
        trade = Trade(timestamp=bucket_to_ms(bucket_id), price=price, volume=volume)
        trades = merge_trade(
            self._store.get_trades(symbol) or [], trade, self._window_size
        )

        self._store.set_trades(symbol, trades)
        # 늦게 도착한 과거 버킷은 최신 가격을 되돌리지 않음
        if trades and trades[-1] is trade:
            self._store.set_price(symbol, trade.price)
        self._synthesizer.synthesize(symbol, trades)
        self._liveness.mark_updated()
        return trade


def merge_trade(
    trades: list[Trade], trade: Trade, window_size: int | None = None
) -> list[Trade]:
    """같은 버킷이면 제자리 교체, 새 버킷이면 시간순 위치에 삽입 후 최근 window_size개만 유지

    입력 윈도우는 타임스탬프 오름차순이어야 하며 결과도 오름차순을 유지합니다.
    """
    merged = list(trades)
    index = bisect_left(merged, trade.timestamp, key=lambda current: current.timestamp)
    if index < len(merged) and merged[index].timestamp == trade.timestamp:
        merged[index] = trade
    else:
        merged.insert(index, trade)

    if window_size is not None and len(merged) > window_size:
        merged = merged[-window_size:]
    return merged
