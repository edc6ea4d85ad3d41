from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from price_stream.core.types import ExchangeName, Region


class ConnectionTargetDTO(BaseModel):
    """이벤트 대상(Target) Pydantic v2 모델."""

    exchange: ExchangeName
    region: Region
    symbol: str | None = None

    model_config = ConfigDict(use_enum_values=True, extra="forbid", frozen=True)

    def observed_key(self) -> str:
        base = f"{self.exchange}/{self.region}"
        return f"{base}/{self.symbol}" if self.symbol else base
