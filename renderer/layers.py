"""레이어 합성 모듈 — 베이스 이미지 + 리사이즈한 오버레이(로고)."""

from .canvas import Canvas, PixelBuffer
from .errors import InvalidGeometry
from .layout import overlay_placement
from .resample import resample


class LayerCompositor:
    """베이스 위에 레이어들을 over 합성하여 새 캔버스를 만든다."""

    def compose(
        self,
        base: PixelBuffer,
        layers: list[tuple[PixelBuffer, tuple[int, int]]] | None = None,
    ) -> Canvas:
        """베이스 크기의 캔버스를 만들고 레이어들을 순서대로 합성한다.

        Args:
            base: 캔버스 크기를 결정하는 베이스 이미지
            layers: [(버퍼, (x, y))] 형태의 레이어 리스트. 캔버스 밖 영역은 잘린다.

        Returns:
            합성된 캔버스 (입력 버퍼는 변경하지 않음)
        """
        canvas = Canvas(base.width, base.height)

        # 베이스 레이어: 투명 캔버스 전체에 over
        canvas.blend(base, (0, 0))

        if layers:
            for layer, position in layers:
                canvas.blend(layer, position)

        return canvas


def merge_new(base: PixelBuffer, overlay: PixelBuffer, padding_x: int, padding_y: int,
              overlay_width: int, overlay_height: int) -> Canvas:
    """오버레이를 지정 크기로 리샘플링해 베이스 왼쪽 아래 영역에 합성한다.

    오버레이 위치: left = padding_x, top = 캔버스 높이 - padding_y - overlay_height.

    Raises:
        InvalidGeometry: padding_x가 음수
        InvalidDimensions: 오버레이 크기가 0 이하 (리샘플러에서 발생)
    """
    if padding_x < 0:
        raise InvalidGeometry(f"padding_x는 음수일 수 없음: {padding_x}")
    resized = resample(overlay, overlay_width, overlay_height)
    placement = overlay_placement(base.size, padding_x, padding_y, resized.size)
    return LayerCompositor().compose(base, [(resized, (placement.x, placement.y))])
