"""Huobi(HTX) REST 캔들 조회 클라이언트

Reference:
    https://huobiapi.github.io/docs/spot/v1/en/#get-klines-candles
"""

from __future__ import annotations

from typing import Any

import aiohttp
import orjson
from pydantic import ValidationError

from price_stream.common.exceptions.base import BootstrapError
from price_stream.common.logger import PipelineLogger
from price_stream.core.dto.internal.market import Symbol
from price_stream.core.dto.io.huobi import HuobiCandleDTO, HuobiKlineResponseDTO

logger = PipelineLogger.get_logger("huobi_client", "infra")

EXCHANGE_NAME = "huobi"


class HuobiCandleClient:
    """
    과거 캔들 조회 클라이언트

    세션은 첫 요청 시 생성되어 재사용됩니다. 요청 타임아웃은 세션 기본값입니다.
    """

    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> HuobiCandleClient:
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """HTTP 세션을 생성하거나 재사용합니다."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={"Accept": "application/json"},
            )
        return self._session

    async def close(self) -> None:
        """HTTP 세션을 종료합니다."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _get_json(self, params: dict[str, Any]) -> Any:
        session = await self._ensure_session()
        async with session.get(self.base_url, params=params) as response:
            body = await response.read()
            if response.status >= 400:
                raise aiohttp.ClientResponseError(
                    response.request_info,
                    response.history,
                    status=response.status,
                    message=f"HTTP {response.status}",
                )
            return orjson.loads(body) if body else None

    async def fetch_candles(
        self, symbol: Symbol, period: str, size: int
    ) -> list[HuobiCandleDTO]:
        """심볼의 최근 캔들 조회 (거래소 응답 순서 그대로).

        Raises:
            BootstrapError: 응답이 비었거나 status가 ok가 아니거나 data가 비어있는 배열이 아닌 경우
            aiohttp.ClientError, asyncio.TimeoutError: 네트워크 오류
        """
        params = {
            "symbol": symbol.compact().lower(),
            "period": period,
            "size": size,
        }
        response = await self._get_json(params)
        return parse_kline_response(symbol, response)


def parse_kline_response(symbol: Symbol, response: Any) -> list[HuobiCandleDTO]:
    """REST 응답 검증 및 캔들 DTO 변환"""
    if (
        not isinstance(response, dict)
        or response.get("status") != "ok"
        or not isinstance(response.get("data"), list)
        or len(response["data"]) < 1
    ):
        raw = orjson.dumps(response).decode("utf-8") if response else "empty"
        logger.error(
            f"{EXCHANGE_NAME}: invalid api response",
            extra={"symbol": str(symbol), "response": raw[:500]},
        )
        raise BootstrapError(
            exchange_name=EXCHANGE_NAME,
            message="invalid response from Huobi",
            symbol=str(symbol),
        )

    try:
        return HuobiKlineResponseDTO.model_validate(response).data
    except ValidationError as e:
        raise BootstrapError(
            exchange_name=EXCHANGE_NAME,
            message=f"malformed candle payload: {e.error_count()} errors",
            original_exception=e,
            symbol=str(symbol),
        ) from e
