"""이미지 로더 모듈 — 매직 바이트로 포맷을 판별하고 RGBA 버퍼로 디코딩한다.

파일 확장자는 보지 않는다. 지원 포맷: JPEG, PNG, GIF (첫 프레임만).
"""

import os
import struct
from dataclasses import dataclass
from io import BytesIO

from PIL import Image

from .canvas import PixelBuffer
from .errors import DecodeError, UnsupportedFormat

# 포맷 판별에 쓰는 앞부분 길이
SNIFF_LEN = 512

# (매직 바이트, 포맷 태그)
_SIGNATURES = [
    (b"\xff\xd8\xff", "jpeg"),
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
]

# 포맷 태그 → Pillow 플러그인 이름
_PIL_FORMATS = {
    "jpeg": "JPEG",
    "png": "PNG",
    "gif": "GIF",
}


@dataclass
class DecodedImage:
    """디코딩 결과."""
    buffer: PixelBuffer
    format: str           # "jpeg" | "png" | "gif"


def sniff_format(prefix: bytes) -> str | None:
    """앞부분 바이트로 포맷 태그를 판별한다. 짧은 입력도 그대로 판별한다."""
    for magic, tag in _SIGNATURES:
        if prefix.startswith(magic):
            return tag
    return None


def _read_prefix(stream) -> bytes:
    """스트림에서 최대 SNIFF_LEN 바이트를 읽는다 (EOF면 있는 만큼)."""
    chunks = []
    remaining = SNIFF_LEN
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _decode(stream, prefix: bytes) -> DecodedImage:
    tag = sniff_format(prefix)
    if tag is None:
        raise UnsupportedFormat(f"알 수 없는 이미지 포맷 (앞부분: {prefix[:8].hex()})")

    data = prefix + stream.read()
    try:
        img = Image.open(BytesIO(data), formats=[_PIL_FORMATS[tag]])
        # GIF는 현재(첫) 프레임만 디코딩된다
        img.load()
        buffer = PixelBuffer.from_image(img)
    except (OSError, SyntaxError, ValueError, EOFError, struct.error,
            Image.DecompressionBombError) as e:
        raise DecodeError(f"{tag} 디코딩 실패: {e}") from e
    return DecodedImage(buffer=buffer, format=tag)


def decode_image(data: bytes) -> DecodedImage:
    """메모리의 이미지 바이트를 디코딩한다."""
    stream = BytesIO(data)
    return _decode(stream, _read_prefix(stream))


def load_image(source) -> DecodedImage:
    """경로, bytes 또는 읽기 가능한 바이너리 스트림에서 이미지를 로드한다.

    Raises:
        OSError: 파일을 열거나 읽을 수 없음
        UnsupportedFormat: 지원하지 않는 매직 바이트
        DecodeError: 코덱이 스트림을 거부함
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        return decode_image(bytes(source))
    if isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as f:
            return _decode(f, _read_prefix(f))
    return _decode(source, _read_prefix(source))
