"""Huobi(HTX) 와이어 포맷 DTO.

거래소 원본 필드를 그대로 받되, 가격/수량은 Decimal로 검증합니다.
알 수 없는 필드는 무시합니다 (거래소 스키마 확장 대비).

Reference:
    https://huobiapi.github.io/docs/spot/v1/en/#get-klines-candles
    https://huobiapi.github.io/docs/spot/v1/en/#market-candlestick
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

VENDOR_CONFIG = ConfigDict(extra="ignore", frozen=True)


class HuobiCandleDTO(BaseModel):
    """캔들 1개 (REST 응답 data[] 원소 / 스트림 tick 공통).

    id: 버킷 시작 시각 (epoch seconds)
    close: 종가
    amount: 누적 거래량 (base 통화)
    vol: 누적 거래대금 (quote 통화)
    """

    id: int
    close: Decimal
    amount: Decimal
    vol: Decimal = Decimal("0")
    open: Decimal | None = None
    high: Decimal | None = None
    low: Decimal | None = None
    count: int | None = None

    model_config = VENDOR_CONFIG


class HuobiKlineMessageDTO(BaseModel):
    """스트림 kline 메시지: {"ch": "market.btcusdt.kline.1min", "ts": ..., "tick": {...}}"""

    ch: str
    ts: int | None = None
    tick: HuobiCandleDTO

    model_config = VENDOR_CONFIG


class HuobiKlineResponseDTO(BaseModel):
    """REST /market/history/kline 응답.

    data는 배열이어야 하며, 검증은 클라이언트에서 수행합니다.
    """

    status: str | None = None
    ch: str | None = None
    ts: int | None = None
    data: list[HuobiCandleDTO] = Field(default_factory=list)
    err_code: str | None = Field(default=None, alias="err-code")
    err_msg: str | None = Field(default=None, alias="err-msg")

    model_config = VENDOR_CONFIG
