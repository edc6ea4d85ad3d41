"""구조화 로그의 phase 상수 (인라인 문자열 대신 사용)."""

PHASE_CONNECT = "connect"
PHASE_SUBSCRIBE = "subscribe"
PHASE_DECODE = "decode"
PHASE_PING = "ping"
PHASE_SUBSCRIPTION_ACK = "subscription_ack"
PHASE_MARKET_DATA = "market_data"
PHASE_PROTOCOL_VIOLATION = "protocol_violation"
PHASE_CLOSE = "close"
PHASE_BOOTSTRAP = "bootstrap"
PHASE_BOOTSTRAP_SYMBOL = "bootstrap_symbol"
PHASE_SYNTHESIS = "synthesis"
PHASE_LIVENESS = "liveness"
PHASE_RECONNECT = "reconnect"
PHASE_MESSAGE_LOOP_STOP = "message_loop_stop"
