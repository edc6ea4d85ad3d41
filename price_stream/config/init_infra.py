from contextlib import asynccontextmanager
from typing import AsyncIterator

from price_stream.infra.rest.huobi_client import HuobiCandleClient


@asynccontextmanager
async def init_candle_client(
    base_url: str, timeout: float
) -> AsyncIterator[HuobiCandleClient]:
    """HuobiCandleClient 초기화 및 세션 정리"""
    async with HuobiCandleClient(base_url=base_url, timeout=timeout) as client:
        yield client
