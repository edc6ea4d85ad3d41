from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class AckDecision:
    should_skip_message: bool
    should_emit_ack: bool
    status: str | None = None
    reason: str | None = None
    channel: str | None = None

    @property
    def is_rejected(self) -> bool:
        return self.should_skip_message and not self.should_emit_ack


def decide_huobi_subscription_ack(message: dict[str, Any]) -> AckDecision:
    match message.get("subbed"), message.get("status"):
        case None, _:
            return AckDecision(should_skip_message=False, should_emit_ack=False)
        case str() as channel, "ok":
            return AckDecision(
                should_skip_message=True,
                should_emit_ack=True,
                status="subscribed",
                reason="status=ok",
                channel=channel,
            )
        case channel, status:
            return AckDecision(
                should_skip_message=True,
                should_emit_ack=False,
                status="rejected",
                reason=f"status={status}",
                channel=str(channel),
            )
