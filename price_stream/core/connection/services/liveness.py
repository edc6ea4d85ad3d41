from __future__ import annotations

import time


class LivenessMonitor:
    """수신 활동 감시 (스톨 감지용)

    책임:
    - 정규화된 업데이트가 반영될 때마다 플래그/카운터 갱신
    - 주기적 확인(check) 시 플래그를 읽고 초기화

    재접속 여부는 판단하지 않으며, 관측된 활동만 보고합니다.
    """

    def __init__(self) -> None:
        self._updated: bool = False
        self._update_count: int = 0
        self._last_update_ts: float | None = None

    def mark_updated(self) -> None:
        """새 데이터 반영 시점에 호출"""
        self._updated = True
        self._update_count += 1
        self._last_update_ts = time.monotonic()

    def check(self) -> bool:
        """마지막 확인 이후 새 데이터가 있었는지 반환하고 플래그를 초기화"""
        if self._updated:
            self._updated = False
            return True
        return False

    @property
    def update_count(self) -> int:
        """누적 업데이트 횟수"""
        return self._update_count

    def idle_seconds(self, now: float | None = None) -> float | None:
        """마지막 업데이트 이후 경과 시간 (time.monotonic 기준). 업데이트가 없었으면 None"""
        if self._last_update_ts is None:
            return None
        return (now if now is not None else time.monotonic()) - self._last_update_ts
