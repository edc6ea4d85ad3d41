from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class PydanticFilter(BaseModel):
    """Drop None values from a log payload and coerce models/decimals to plain data."""

    model_config = ConfigDict(extra="allow")

    @classmethod
    def filter_dict(cls, payload: dict[str, Any]) -> dict[str, Any]:
        present = {key: value for key, value in payload.items() if value is not None}
        return cls(**present).model_dump(mode="json")
