from __future__ import annotations

import random

from price_stream.core.dto.internal.common import ConnectionPolicyDomain


def compute_next_backoff(policy: ConnectionPolicyDomain, attempt: int) -> float:
    """재접속 대기 시간 계산 (지수 증가, 상한, +/- 지터).

    Args:
        policy: 백오프 파라미터
        attempt: 0부터 시작하는 재시도 인덱스

    Returns:
        다음 대기 시간(초), 0 이상
    """
    base = min(
        policy.initial_backoff * (policy.backoff_multiplier ** max(0, attempt)),
        policy.max_backoff,
    )
    spread = base * policy.jitter
    return max(0.0, base + random.uniform(-spread, spread))
