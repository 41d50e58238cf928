"""인코더 모듈 — 완성된 캔버스를 출력 래스터 포맷으로 저장한다."""

import os
from io import BytesIO

from .canvas import flatten_rgb
from .errors import EncodeError

# 알파 채널을 담을 수 없는 포맷
_OPAQUE_FORMATS = {"JPEG"}


def encode_image(canvas, format: str = "JPEG", quality: int | None = None) -> bytes:
    """캔버스(또는 PixelBuffer)를 지정 포맷 바이트로 인코딩한다.

    JPEG은 불투명 검정 위에 합성해 RGB로 저장하며, quality를 생략하면 Pillow 기본값(75)을 쓴다.

    Raises:
        EncodeError: 인코더 내부 실패 또는 지원하지 않는 포맷
    """
    fmt = format.upper()
    if fmt == "JPG":
        fmt = "JPEG"
    img = canvas.image
    if fmt in _OPAQUE_FORMATS:
        img = flatten_rgb(img)

    params = {}
    if quality is not None:
        params["quality"] = quality

    buf = BytesIO()
    try:
        img.save(buf, format=fmt, **params)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(f"{fmt} 인코딩 실패: {e}") from e
    data = buf.getvalue()
    return data


def save_image(canvas, target, format: str = "JPEG", quality: int | None = None) -> None:
    """캔버스를 인코딩해 경로 또는 쓰기 가능한 바이너리 스트림에 쓴다.

    쓰기는 원자적이지 않다 — 도중에 중단되면 일부만 쓰인 파일이 남을 수 있다.
    파일 생성/쓰기 실패는 OSError로 전파된다.
    """
    data = encode_image(canvas, format=format, quality=quality)
    if isinstance(target, (str, os.PathLike)):
        with open(target, "wb") as f:
            f.write(data)
    else:
        target.write(data)
