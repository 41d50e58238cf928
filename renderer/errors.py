"""렌더링 파이프라인 예외 모듈.

파일 열기/읽기/쓰기 실패는 별도 타입 없이 내장 OSError 그대로 전파한다.
"""


class RenderError(Exception):
    """파이프라인 단계가 발생시키는 모든 예외의 기반 클래스."""


class UnsupportedFormat(RenderError):
    """매직 바이트가 JPEG/PNG/GIF 어느 것과도 일치하지 않음."""


class DecodeError(RenderError):
    """코덱이 손상되거나 잘린 스트림을 거부함."""


class InvalidGeometry(RenderError, ValueError):
    """오프셋·크기 인자가 허용 범위를 벗어남."""


class InvalidDimensions(InvalidGeometry):
    """너비 또는 높이가 0 이하."""


class FontParseError(RenderError):
    """아웃라인 폰트 데이터를 해석할 수 없음."""


class EncodeError(RenderError):
    """출력 포맷 인코딩 실패."""
