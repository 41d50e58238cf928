"""화면 레이아웃 모듈 — 오버레이 사각형과 텍스트 기준선 위치를 계산한다."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Placement:
    """캔버스 위의 (x, y) 오프셋과 목적지 사각형."""
    x: int
    y: int
    width: int
    height: int

    @property
    def box(self) -> tuple[int, int, int, int]:
        """(left, top, right, bottom) — right/bottom은 제외 경계."""
        return self.x, self.y, self.x + self.width, self.y + self.height

    def clip(self, width: int, height: int) -> "Placement | None":
        """(0, 0, width, height) 경계로 잘라낸 사각형. 겹치는 영역이 없으면 None."""
        left = max(self.x, 0)
        top = max(self.y, 0)
        right = min(self.x + self.width, width)
        bottom = min(self.y + self.height, height)
        if right <= left or bottom <= top:
            return None
        return Placement(left, top, right - left, bottom - top)


def overlay_placement(canvas_size: tuple[int, int], padding_x: int, padding_y: int,
                      overlay_size: tuple[int, int]) -> Placement:
    """오버레이 목적지 사각형: 왼쪽에서 padding_x, 아래에서 padding_y 만큼 띄운다.

    top이 음수가 될 수 있다 (캔버스보다 큰 오버레이/여백). 자르기는 합성 단계에서 한다.
    """
    _, canvas_h = canvas_size
    overlay_w, overlay_h = overlay_size
    top = canvas_h - padding_y - overlay_h
    return Placement(padding_x, top, overlay_w, overlay_h)


def line_baselines(origin: tuple[int, int], line_step: int, count: int) -> list[tuple[int, int]]:
    """여러 줄 텍스트의 기준선 좌표 리스트 — 고정 픽셀 간격, 폰트 메트릭 미사용."""
    x, y = origin
    return [(x, y + line_step * i) for i in range(count)]
