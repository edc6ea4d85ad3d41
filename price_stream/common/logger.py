from __future__ import annotations

import logging
import queue
import sys
from datetime import datetime
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Any

from price_stream.config.settings import logging_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(component)s/%(exchange)s] %(message)s"


class PipelineLogger:
    """
    스트림 어댑터용 로거
    큐 기반 출력(QueueHandler → QueueListener), 컴포넌트별 파일, 구조화된 extra 병합

    레벨/출력 대상/디렉토리는 LoggingSettings(LOG_*)에서 읽습니다.
    """

    @classmethod
    def get_logger(cls, name: str, component: str | None = None) -> PipelineLogger:
        """표준 logging.getLogger가 이름 단위 싱글톤이므로 별도 레지스트리 없이 생성"""
        return cls(name, component)

    def __init__(self, name: str, component: str | None = None) -> None:
        self.name = name
        self.component = component
        level = logging.getLevelName(logging_settings.level.upper())
        self.level = level if isinstance(level, int) else logging.INFO

        # 무제한 버퍼로 설정해 queue.Full 예외 방지
        self.log_queue: queue.Queue = queue.Queue()
        self._setup_logger()

    def _setup_logger(self) -> None:
        logger_name = f"{self.name}.{self.component}" if self.component else self.name
        self.logger = logging.getLogger(logger_name)
        self.logger.setLevel(self.level)

        # 같은 이름으로 다시 생성되면 기존 핸들러 제거
        if self.logger.hasHandlers():
            self.logger.handlers.clear()

        formatter = logging.Formatter(LOG_FORMAT)
        handlers: list[logging.Handler] = []

        if logging_settings.to_console:
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(formatter)
            handlers.append(console)

        if logging_settings.to_file:
            log_filename = self._log_filename()
            Path(log_filename).parent.mkdir(parents=True, exist_ok=True)
            file_handler = TimedRotatingFileHandler(
                filename=log_filename, when="midnight", backupCount=7
            )
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)

        self.logger.addHandler(QueueHandler(self.log_queue))
        self.listener = QueueListener(self.log_queue, *handlers, respect_handler_level=True)
        self.listener.start()

    def _log_filename(self) -> str:
        today = datetime.now().strftime("%Y-%m-%d")
        component_part = f"{self.component}/" if self.component else ""
        return f"{logging_settings.directory}/{component_part}{self.name}_{today}.log"

    def _process_message(self, level: int, msg: str, extra: dict[str, Any]) -> None:
        """
        extra 병합 규칙
        - 기본 키: component, exchange("global")
        - extra={"..."} 로 전달된 dict는 풀어서 병합
        - exc_info/stack_info는 logger.log() 인자로 분리
        """
        log_extra: dict[str, Any] = {"component": self.component or "main", "exchange": "global"}

        exc_info = extra.pop("exc_info", None)
        stack_info = bool(extra.pop("stack_info", False))
        nested = extra.pop("extra", None)
        if isinstance(nested, dict):
            log_extra.update(nested)
        log_extra.update(extra)

        self.logger.log(level, msg, exc_info=exc_info, stack_info=stack_info, extra=log_extra)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._process_message(logging.DEBUG, msg, kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._process_message(logging.INFO, msg, kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self._process_message(logging.WARNING, msg, kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self._process_message(logging.ERROR, msg, kwargs)

    def critical(self, msg: str, **kwargs: Any) -> None:
        self._process_message(logging.CRITICAL, msg, kwargs)
