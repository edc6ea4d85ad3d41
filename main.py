"""애플리케이션 진입점 (DI Container 기반)

시세 스트림 어댑터
- 과거 캔들 부트스트랩 후 거래소 웹소켓 스트림 구독
- 환율 기반 합성 시세 (BTC/USDT → BTC/KRW)
- Event Bus 기반 에러 처리

Usage:
    python main.py
    HUOBI_SYMBOLS='["BTC/USDT"]' LOG_LEVEL=DEBUG python main.py
"""

import asyncio
import contextlib
import inspect
import signal

from price_stream.common.exceptions.error_dispatcher import ErrorDispatcher
from price_stream.common.logger import PipelineLogger
from price_stream.config.containers import ApplicationContainer
from price_stream.config.settings import app_settings

logger = PipelineLogger.get_logger("main", "app")


class Application:
    """애플리케이션 메인 클래스

    책임:
    - DI Container 관리
    - Event Bus 리스너 등록
    - Orchestrator 실행
    - Graceful Shutdown (SIGINT/SIGTERM)
    """

    def __init__(self) -> None:
        self.container = ApplicationContainer()
        self.orchestrator = None
        self.error_dispatcher = ErrorDispatcher()
        self._stop_event = asyncio.Event()

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            # Windows 이벤트 루프는 add_signal_handler 미지원
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, self._stop_event.set)

    async def initialize(self) -> None:
        """애플리케이션 초기화

        Flow:
        1. Resource 초기화 (HTTP 세션)
        2. Event Bus 리스너 등록
        3. Orchestrator 가져오기
        """
        logger.info(f"시세 스트림 어댑터 시작 (env={app_settings.environment})")

        init = self.container.init_resources()
        if init is not None:
            await init
        logger.info("✅ 모든 Resource 초기화 완료")

        self.error_dispatcher.register()
        logger.info("✅ Event Bus 리스너 등록 완료")

        orchestrator = self.container.orchestrator()
        if inspect.isawaitable(orchestrator):
            orchestrator = await orchestrator
        self.orchestrator = orchestrator
        logger.info("✅ Orchestrator 준비 완료")

    async def run(self) -> None:
        """스트림 태스크 실행 후 종료 신호 대기"""
        self._install_signal_handlers()
        await self.orchestrator.startup()
        await self._stop_event.wait()
        logger.info("종료 신호 수신")

    async def shutdown(self) -> None:
        """Graceful Shutdown

        Flow:
        1. Orchestrator 정리 (연결 해제, 태스크 취소)
        2. Resource 정리 (HTTP 세션)
        """
        logger.info("정리 작업 시작...")

        if self.orchestrator:
            await self.orchestrator.shutdown()

        shutdown = self.container.shutdown_resources()
        if shutdown is not None:
            await shutdown
        logger.info("✅ 프로그램 종료 완료")


async def main() -> None:
    """메인 실행 함수"""
    app = Application()

    try:
        await app.initialize()
        await app.run()
    finally:
        await app.shutdown()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n프로그램이 종료되었습니다.")
