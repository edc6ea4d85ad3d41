from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Protocol

from price_stream.common.exceptions.error_dispatcher import dispatch_error
from price_stream.common.logger import PipelineLogger
from price_stream.core.connection.contracts import PriceStore
from price_stream.core.connection.services.currency_synthesis import CurrencySynthesizer
from price_stream.core.connection.services.liveness import LivenessMonitor
from price_stream.core.connection.services.trade_normalizer import bucket_to_ms
from price_stream.core.connection.utils.logging.log_phases import (
    PHASE_BOOTSTRAP,
    PHASE_BOOTSTRAP_SYMBOL,
)
from price_stream.core.dto.internal.common import ConnectionScopeDomain
from price_stream.core.dto.internal.market import Symbol, Trade
from price_stream.core.dto.io.commands import ConnectionTargetDTO
from price_stream.core.dto.io.huobi import HuobiCandleDTO

logger = PipelineLogger.get_logger("bootstrap", "connection")


class CandleSource(Protocol):
    async def fetch_candles(
        self, symbol: Symbol, period: str, size: int
    ) -> list[HuobiCandleDTO]: ...


def candles_to_trades(candles: Sequence[HuobiCandleDTO]) -> list[Trade]:
    """캔들 → Trade 윈도우 (타임스탬프 오름차순)

    거래대금(vol)이 0 이하인 캔들은 체결이 없던 버킷이므로 제외합니다.
    같은 id가 반복되면 마지막 레코드를 사용합니다.
    """
    by_timestamp: dict[int, Trade] = {}
    for candle in candles:
        if candle.vol <= 0:
            continue
        timestamp = bucket_to_ms(candle.id)
        by_timestamp[timestamp] = Trade(
            timestamp=timestamp, price=candle.close, volume=candle.amount
        )
    return sorted(by_timestamp.values(), key=lambda trade: trade.timestamp)


class BootstrapLoader:
    """스트림 시작 전 심볼별 최근 캔들로 윈도우를 채움

    - 심볼별 조회는 동시에 실행되며 한 심볼의 실패가 다른 심볼에 영향을 주지 않음
    - 실패는 에러 채널(kind="bootstrap")로 보고되고 해당 심볼 윈도우는 그대로 유지
    - 전체 완료 후 생존 플래그 설정
    """

    def __init__(
        self,
        source: CandleSource,
        store: PriceStore,
        synthesizer: CurrencySynthesizer,
        liveness: LivenessMonitor,
        scope: ConnectionScopeDomain,
        period: str = "1min",
        size: int = 10,
    ) -> None:
        self._source = source
        self._store = store
        self._synthesizer = synthesizer
        self._liveness = liveness
        self.scope = scope
        self._period = period
        self._size = size

    async def load(self, symbols: Sequence[Symbol]) -> dict[Symbol, bool]:
        """모든 심볼 부트스트랩. 심볼별 성공 여부를 반환"""
        results = await asyncio.gather(*(self._load_symbol(symbol) for symbol in symbols))
        outcome = dict(zip(symbols, results))

        self._liveness.mark_updated()
        logger.info(
            f"{self.scope.exchange}: bootstrap finished "
            f"({sum(outcome.values())}/{len(outcome)} symbols)",
            extra={"phase": PHASE_BOOTSTRAP, "exchange": self.scope.exchange},
        )
        return outcome

    async def _load_symbol(self, symbol: Symbol) -> bool:
        try:
            candles = await self._source.fetch_candles(symbol, self._period, self._size)
            trades = candles_to_trades(candles)
            if not trades:
                logger.warning(
                    f"{self.scope.exchange}: no traded candles for {symbol}",
                    extra={"phase": PHASE_BOOTSTRAP_SYMBOL, "symbol": str(symbol)},
                )
                return False

            self._store.set_trades(symbol, trades)
            self._store.set_price(symbol, trades[-1].price)
            self._synthesizer.synthesize(symbol, trades)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            await dispatch_error(
                exc=e,
                kind="bootstrap",
                target=ConnectionTargetDTO(
                    exchange=self.scope.exchange,
                    region=self.scope.region,
                    symbol=str(symbol),
                ),
                context={"phase": PHASE_BOOTSTRAP_SYMBOL, "period": self._period},
            )
            return False

        logger.debug(
            f"{self.scope.exchange}: bootstrapped {symbol} with {len(trades)} trades",
            extra={"phase": PHASE_BOOTSTRAP_SYMBOL, "symbol": str(symbol)},
        )
        return True
