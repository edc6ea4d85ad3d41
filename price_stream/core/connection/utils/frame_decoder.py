"""원본 프레임 → JSON object 디코더.

Huobi 스트림은 모든 프레임을 GZIP으로 압축해 binary로 전송합니다.
텍스트 프레임(str)과 비압축 bytes는 그대로 UTF-8 JSON으로 파싱합니다.
"""

from __future__ import annotations

import gzip
import zlib

import orjson

from price_stream.common.exceptions.base import FrameDecodeError
from price_stream.core.types import JsonPayload

GZIP_MAGIC = b"\x1f\x8b"


def decompress_frame(frame: str | bytes) -> str:
    """프레임을 텍스트로 변환 (GZIP 매직 넘버가 있으면 압축 해제).

    Raises:
        gzip.BadGzipFile, EOFError, zlib.error, UnicodeDecodeError
    """
    if isinstance(frame, str):
        return frame

    data = bytes(frame)
    if data[:2] == GZIP_MAGIC:
        data = gzip.decompress(data)
    return data.decode("utf-8")


def decode_frame(frame: str | bytes, exchange_name: str = "unknown") -> JsonPayload:
    """프레임 1개를 JSON object로 디코딩.

    Args:
        frame: 웹소켓에서 수신한 원본 프레임
        exchange_name: 에러 메시지용 거래소 이름

    Returns:
        파싱된 dict

    Raises:
        FrameDecodeError: 압축 해제, UTF-8 디코딩, JSON 파싱 실패 또는 object가 아닌 경우
    """
    try:
        text = decompress_frame(frame)
        parsed = orjson.loads(text)
    except (gzip.BadGzipFile, EOFError, zlib.error, UnicodeDecodeError, orjson.JSONDecodeError) as e:
        raise FrameDecodeError(
            exchange_name=exchange_name,
            message=f"failed to decode frame: {e}",
            original_exception=e,
        ) from e

    match parsed:
        case dict() as payload:
            return payload
        case _:
            raise FrameDecodeError(
                exchange_name=exchange_name,
                message=f"unexpected frame payload type: {type(parsed).__name__}",
            )
