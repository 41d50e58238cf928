"""RGBA 픽셀 버퍼와 캔버스 관리 모듈."""

from PIL import Image

from .errors import InvalidDimensions
from .layout import Placement

CHANNELS = 4
TRANSPARENT = (0, 0, 0, 0)
# 16비트 정수 샘플 모드 (16비트 그레이스케일 PNG)
_WIDE_MODES = {"I", "I;16", "I;16B", "I;16L", "I;16N"}


class _Surface:
    """RGBA 이미지를 감싸는 공통 접근자."""

    _image: Image.Image

    @property
    def image(self) -> Image.Image:
        return self._image

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def size(self) -> tuple[int, int]:
        return self._image.size

    def getpixel(self, xy: tuple[int, int]) -> tuple[int, int, int, int]:
        return self._image.getpixel(xy)

    def pixels(self) -> bytes:
        """행 우선 RGBA 바이트열 (길이 = width * height * 4)."""
        return self._image.tobytes()


class PixelBuffer(_Surface):
    """디코더/리샘플러가 만드는 RGBA 8비트 픽셀 버퍼.

    하위 단계로 넘길 때는 참조 대신 복사본을 넘긴다.
    """

    def __init__(self, image: Image.Image):
        self._image = _to_rgba(image)

    @classmethod
    def from_image(cls, image: Image.Image) -> "PixelBuffer":
        """임의 모드의 이미지를 RGBA 복사본으로 변환한다."""
        if image.mode == "RGBA":
            return cls(image.copy())
        return cls(image)

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> "PixelBuffer":
        """행 우선 RGBA 바이트열로 버퍼를 만든다."""
        if width <= 0 or height <= 0:
            raise InvalidDimensions(f"버퍼 크기가 잘못됨: {width}x{height}")
        expected = width * height * CHANNELS
        if len(data) != expected:
            raise InvalidDimensions(
                f"픽셀 데이터 길이 {len(data)} != {width}x{height}x{CHANNELS} ({expected})"
            )
        return cls(Image.frombytes("RGBA", (width, height), bytes(data)))

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self._image.copy())


class Canvas(_Surface):
    """모든 합성과 텍스트 그리기가 누적되는 단일 가변 캔버스."""

    def __init__(self, width: int, height: int, color: tuple = TRANSPARENT):
        if width <= 0 or height <= 0:
            raise InvalidDimensions(f"캔버스 크기가 잘못됨: {width}x{height}")
        self._image = Image.new("RGBA", (width, height), color)

    def clear(self, color: tuple = TRANSPARENT) -> None:
        """캔버스를 지정 색상으로 초기화한다."""
        self._image = Image.new("RGBA", self._image.size, color)

    def blend(self, layer, position: tuple[int, int] = (0, 0)) -> None:
        """레이어를 캔버스 위에 over 합성한다 (제자리 변경).

        캔버스 밖으로 나가는 영역은 잘라내고, 완전히 벗어나면 아무것도 하지 않는다.
        """
        src = _as_rgba(layer)
        x, y = position
        dest = Placement(x, y, src.width, src.height).clip(self.width, self.height)
        if dest is None:
            return
        sx, sy = dest.x - x, dest.y - y
        self._image.alpha_composite(
            src,
            dest=(dest.x, dest.y),
            source=(sx, sy, sx + dest.width, sy + dest.height),
        )

    def snapshot(self) -> PixelBuffer:
        """현재 캔버스 내용의 복사본."""
        return PixelBuffer(self._image.copy())

    def to_rgb(self) -> Image.Image:
        """불투명 검정 위에 합성한 RGB 이미지를 반환한다 (JPEG 인코딩용)."""
        return flatten_rgb(self._image)


def flatten_rgb(image: Image.Image) -> Image.Image:
    """RGBA 이미지를 불투명 검정 위에 over 합성해 RGB로 만든다.

    알파 0인 영역은 검정이 되고, 반투명 픽셀은 알파만큼 어두워진다.
    """
    image = _to_rgba(image)
    backdrop = Image.new("RGBA", image.size, (0, 0, 0, 255))
    return Image.alpha_composite(backdrop, image).convert("RGB")


def _as_rgba(layer) -> Image.Image:
    """PixelBuffer / Canvas / PIL 이미지를 RGBA 이미지로 맞춘다."""
    img = layer.image if isinstance(layer, _Surface) else layer
    return _to_rgba(img)


def _to_rgba(image: Image.Image) -> Image.Image:
    """임의 모드의 이미지를 8비트 RGBA로 변환한다."""
    if image.mode in _WIDE_MODES:
        # 16비트 샘플은 상위 바이트만 남긴다
        image = image.convert("I").point(lambda v: v * (1 / 256)).convert("L")
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    return image
