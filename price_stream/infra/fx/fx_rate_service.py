from __future__ import annotations

import asyncio
import time
from decimal import Decimal

from forex_python.converter import CurrencyRates

from price_stream.common.logger import PipelineLogger
from price_stream.core.dto.internal.market import Symbol

logger = PipelineLogger.get_logger("fx_rate_service", "infra")


class FxRateService:
    """환율 조회 + 캐시 서비스 (RateProvider 구현).

    - refresh(): forex-python으로 등록된 환율 쌍을 조회해 캐시 갱신
    - get_rate(): 캐시 조회 전용 (동기). 없거나 max_age보다 오래되면 None
    - 조회 실패 시 이전 값은 유지되고 max_age가 지나면 자연스럽게 무효화됨

    Symbol(base="KRW", quote="USD")의 환율은 1 KRW의 USD 가격입니다.
    """

    def __init__(
        self,
        symbols: list[Symbol] | None = None,
        enabled: bool = True,
        max_age_sec: float = 600.0,
        timeout_sec: float = 2.5,
    ) -> None:
        self._symbols = list(symbols or [])
        self._enabled = enabled
        self._max_age_sec = max(1.0, max_age_sec)
        self._timeout_sec = max(0.1, timeout_sec)

        self._currency_rates = CurrencyRates(force_decimal=True)
        self._rates: dict[Symbol, tuple[Decimal, float]] = {}
        self._lock = asyncio.Lock()

    @property
    def symbols(self) -> list[Symbol]:
        return list(self._symbols)

    def get_rate(self, symbol: Symbol) -> Decimal | None:
        cached = self._rates.get(symbol)
        if cached is None:
            return None
        rate, fetched_at = cached
        if not rate or time.time() - fetched_at > self._max_age_sec:
            return None
        return rate

    def set_rate(self, symbol: Symbol, rate: Decimal, fetched_at: float | None = None) -> None:
        """수동 환율 주입 (고정 환율 운영/테스트)"""
        self._rates[symbol] = (Decimal(rate), time.time() if fetched_at is None else fetched_at)

    async def refresh(self) -> int:
        """추적 중인 모든 환율 쌍을 갱신하고 성공한 개수를 반환"""
        if not self._enabled:
            return 0

        refreshed = 0
        async with self._lock:
            for symbol in self._symbols:
                try:
                    rate = await asyncio.wait_for(
                        asyncio.to_thread(self._fetch_rate_sync, symbol),
                        timeout=self._timeout_sec,
                    )
                except Exception as exc:
                    logger.warning(
                        f"{symbol} fetch failed",
                        extra={"error": str(exc), "error_type": type(exc).__name__},
                    )
                    continue

                if rate <= 0:
                    logger.warning(f"{symbol} invalid fx rate: {rate}")
                    continue

                self.set_rate(symbol, rate)
                refreshed += 1

        logger.debug(f"fx refreshed {refreshed}/{len(self._symbols)}")
        return refreshed

    async def run_refresh_loop(self, interval_sec: float) -> None:
        """취소될 때까지 interval_sec마다 refresh 실행 (첫 조회는 호출자 몫)"""
        while True:
            await asyncio.sleep(interval_sec)
            await self.refresh()

    def _fetch_rate_sync(self, symbol: Symbol) -> Decimal:
        return Decimal(self._currency_rates.get_rate(symbol.base, symbol.quote))
