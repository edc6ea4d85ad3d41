from price_stream.core.types._common_types import (
    ConnectionState,
    ExchangeName,
    JsonPayload,
    MessageKind,
    Region,
)
from price_stream.core.types._exception_types import (
    ErrorCategory,
    ErrorCode,
    ErrorDomain,
    ExceptionGroup,
    RuleKind,
)

__all__ = [
    "ConnectionState",
    "ErrorCategory",
    "ErrorCode",
    "ErrorDomain",
    "ExceptionGroup",
    "ExchangeName",
    "JsonPayload",
    "MessageKind",
    "Region",
    "RuleKind",
]
