from __future__ import annotations

from price_stream.common.logger import PipelineLogger
from price_stream.core.connection.contracts import PriceStore, RateProvider
from price_stream.core.connection.utils.logging.log_phases import PHASE_SYNTHESIS
from price_stream.core.dto.internal.market import Symbol, Trade

logger = PipelineLogger.get_logger("currency_synthesis", "connection")


class CurrencySynthesizer:
    """환율을 적용해 직접 피드가 없는 합성 심볼의 체결을 생성.

    예: BTC/USDT 체결 + KRW/USD 환율 → BTC/KRW 체결
    - 가격: 원본 가격 / 환율
    - 거래량, 타임스탬프: 원본 그대로
    - 합성 윈도우는 매번 원본 윈도우로부터 재계산해 통째로 덮어씀
    - 환율이 없거나(미조회, 만료) 0이면 해당 호출은 건너뜀
    """

    def __init__(
        self,
        store: PriceStore,
        rate_provider: RateProvider,
        source_quote: str = "USDT",
        target_quote: str = "KRW",
        rate_symbol: Symbol | None = None,
        enabled: bool = True,
    ) -> None:
        self._store = store
        self._rate_provider = rate_provider
        self._source_quote = source_quote.upper()
        self._target_quote = target_quote.upper()
        self._rate_symbol = rate_symbol or Symbol(base=self._target_quote, quote="USD")
        self._enabled = enabled

    @property
    def rate_symbol(self) -> Symbol:
        return self._rate_symbol

    def applies_to(self, symbol: Symbol) -> bool:
        return self._enabled and symbol.quote == self._source_quote

    def derived_symbol(self, symbol: Symbol) -> Symbol | None:
        """합성 대상이면 BASE/<target> 심볼, 아니면 None"""
        if not self.applies_to(symbol):
            return None
        return symbol.with_quote(self._target_quote)

    def synthesize(self, symbol: Symbol, trades: list[Trade]) -> Symbol | None:
        """합성 윈도우/가격을 저장소에 기록하고 합성 심볼을 반환 (건너뛰면 None)"""
        derived = self.derived_symbol(symbol)
        if derived is None or not trades:
            return None

        rate = self._rate_provider.get_rate(self._rate_symbol)
        if not rate:
            return None

        converted = [
            Trade(
                timestamp=trade.timestamp,
                price=trade.price / rate,
                volume=trade.volume,
            )
            for trade in trades
        ]

        self._store.set_trades(derived, converted)
        self._store.set_price(derived, converted[-1].price)
        logger.debug(
            f"synthesized {derived} from {symbol}",
            extra={"phase": PHASE_SYNTHESIS, "rate": str(rate), "trades": len(converted)},
        )
        return derived
