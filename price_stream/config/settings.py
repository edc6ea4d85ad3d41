"""통합 Settings 모듈 - 환경변수 기반

이 모듈의 역할:
    1. 코드에 합리적인 기본값 제공
    2. 환경변수로 오버라이드 (우선순위 높음)
    3. 타입 안전성 보장 (Pydantic 자동 검증)

설정 우선순위:
    1. 환경변수 (최우선) - export HUOBI_WS_URL=...
    2. .env 파일 - config/.env
    3. 코드 기본값 (settings.py 내부)

사용 예시:
    # 개발 환경 (기본값 사용)
    python main.py

    # 구독 심볼 변경 (JSON 배열)
    export HUOBI_SYMBOLS='["BTC/USDT", "ETH/USDT", "ETH/BTC"]'
    python main.py
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# 설정 파일 경로
config_dir = Path(__file__).parent.parent.parent / "config"


def yaml_settings(prefix: str) -> SettingsConfigDict:
    """환경변수 + .env 통합 설정

    Args:
        prefix: 환경변수 접두사 (예: HUOBI_, FX_)

    Returns:
        Pydantic 설정 딕셔너리
    """
    return SettingsConfigDict(
        env_prefix=prefix,
        env_file=config_dir / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class AppSettings(BaseSettings):
    """애플리케이션 일반 설정

    환경변수 오버라이드:
        APP_ENVIRONMENT: 실행 환경 (dev, prod, test) (기본: dev)
        APP_DEBUG: 디버그 모드 (기본: false)
    """

    environment: str = "dev"
    debug: bool = False

    model_config = yaml_settings("APP_")


class LoggingSettings(BaseSettings):
    """로깅 설정

    환경변수 오버라이드:
        LOG_LEVEL: 로깅 레벨 (기본: INFO)
        LOG_TO_FILE: 파일 로깅 여부 (기본: true)
        LOG_TO_CONSOLE: 콘솔 로깅 여부 (기본: true)
        LOG_DIRECTORY: 로그 디렉토리 (기본: logs)
    """

    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    to_file: bool = True
    to_console: bool = True
    directory: str = "logs"

    model_config = yaml_settings("LOG_")


class WebsocketSettings(BaseSettings):
    """WebSocket 연결/감시 설정 (모든 타이밍 설정은 초 단위)

    환경변수 오버라이드:
        WS_INITIAL_BACKOFF: 첫 재접속 대기 (기본: 1초)
        WS_MAX_BACKOFF: 최대 재접속 대기 (기본: 30초)
        WS_BACKOFF_MULTIPLIER: 지수 백오프 배수 (기본: 2.0)
        WS_JITTER: 백오프 지터 비율 (기본: 0.2)
        WS_RECONNECT_MAX_ATTEMPTS: 재연결 최대 시도 횟수 (기본: 1000회)
        WS_RECEIVE_TIMEOUT: 수신 대기 타임아웃 (기본: 60초)
        WS_LIVENESS_POLL_INTERVAL: 생존 확인 주기 (기본: 60초)
        WS_LIVENESS_MAX_IDLE_POLLS: 연속 무응답 허용 횟수 (기본: 3회)
    """

    initial_backoff: float = 1.0
    max_backoff: float = 30.0
    backoff_multiplier: float = 2.0
    jitter: float = Field(default=0.2, ge=0.0, le=1.0)
    reconnect_max_attempts: int = 1000  # 사실상 무한 재접속
    receive_timeout: float = 60.0
    liveness_poll_interval: float = 60.0
    liveness_max_idle_polls: int = Field(default=3, ge=1)

    model_config = yaml_settings("WS_")


class HuobiSettings(BaseSettings):
    """Huobi(HTX) 어댑터 설정

    환경변수 오버라이드:
        HUOBI_WS_URL: 스트림 주소 (기본: wss://api.huobi.pro/ws)
        HUOBI_REST_URL: 캔들 조회 주소 (기본: https://api.huobi.pro/market/history/kline)
        HUOBI_KLINE_PERIOD: 캔들 주기 (기본: 1min)
        HUOBI_BOOTSTRAP_SIZE: 부트스트랩 캔들 개수 = 윈도우 크기 (기본: 10)
        HUOBI_SYMBOLS: 구독 심볼 목록 (JSON 배열)
        HUOBI_REQUEST_TIMEOUT: REST 요청 타임아웃 (기본: 10초)
    """

    ws_url: str = "wss://api.huobi.pro/ws"
    rest_url: str = "https://api.huobi.pro/market/history/kline"
    kline_period: str = "1min"
    bootstrap_size: int = Field(default=10, ge=1, le=2000)
    symbols: list[str] = Field(default_factory=lambda: ["BTC/USDT", "ETH/USDT"])
    request_timeout: float = 10.0

    model_config = yaml_settings("HUOBI_")


class FxSettings(BaseSettings):
    """환율(FX) 설정

    환경변수 오버라이드:
        FX_ENABLED: 환율 기능 활성화 여부 (기본: true)
        FX_REFRESH_INTERVAL_SEC: 환율 갱신 주기 (기본: 60초)
        FX_MAX_AGE_SEC: 이 시간보다 오래된 환율은 무효 (기본: 600초)
        FX_TIMEOUT_SEC: 환율 조회 타임아웃 (기본: 2.5초)
        FX_SOURCE_QUOTE: 합성 대상 원본 호가 통화 (기본: USDT)
        FX_TARGET_QUOTE: 합성 결과 호가 통화 (기본: KRW)
        FX_RATE_SYMBOL: 합성에 쓰는 환율 쌍 (기본: KRW/USD)
    """

    enabled: bool = True
    refresh_interval_sec: float = 60.0
    max_age_sec: float = 600.0
    timeout_sec: float = 2.5
    source_quote: str = "USDT"
    target_quote: str = "KRW"
    rate_symbol: str = "KRW/USD"

    model_config = yaml_settings("FX_")


# ========================================
# 설정 인스턴스 (싱글톤)
# ========================================

app_settings = AppSettings()
logging_settings = LoggingSettings()
websocket_settings = WebsocketSettings()
huobi_settings = HuobiSettings()
fx_settings = FxSettings()
