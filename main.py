"""메인 — 베이스 이미지 + 로고 오버레이 + 텍스트 줄을 합성해 파일로 저장한다."""

import logging
import sys
from pathlib import Path

from config import ConfigError, PipelineConfig, load_config
from renderer.canvas import Canvas
from renderer.encoder import save_image
from renderer.errors import RenderError
from renderer.layers import merge_new
from renderer.layout import line_baselines
from renderer.loader import load_image
from renderer.text import TextRun, TextStyle, draw_runs, find_fallback_font, load_font_file

logger = logging.getLogger("main")


def compose_label(cfg: PipelineConfig) -> Canvas:
    """설정대로 합성한 캔버스를 반환한다. 어느 단계든 첫 오류에서 중단한다."""
    base = load_image(cfg.base_image)
    logger.info("베이스 로드: %s (%s, %dx%d)", cfg.base_image, base.format, *base.buffer.size)
    overlay = load_image(cfg.overlay_image)
    logger.info("오버레이 로드: %s (%s, %dx%d)", cfg.overlay_image, overlay.format, *overlay.buffer.size)

    canvas = merge_new(
        base.buffer, overlay.buffer,
        cfg.padding_x, cfg.padding_y,
        cfg.overlay_width, cfg.overlay_height,
    )

    if cfg.lines:
        font_path = cfg.font_path or find_fallback_font()
        if not font_path:
            raise FileNotFoundError("사용할 폰트 파일이 없음")
        font = load_font_file(font_path)
        style = TextStyle(font_size=cfg.font_size, fill=cfg.text_color, min_width=cfg.min_width)
        baselines = line_baselines(cfg.text_origin, cfg.line_step, len(cfg.lines))
        draw_runs(canvas, font, style, [TextRun(line, pt) for line, pt in zip(cfg.lines, baselines)])
        logger.info("텍스트 %d줄 그림 (폰트: %s)", len(cfg.lines), font.family)

    return canvas


def run(cfg: PipelineConfig) -> Path:
    """합성 후 출력 파일에 저장하고 경로를 반환한다."""
    canvas = compose_label(cfg)
    save_image(canvas, cfg.output, format=cfg.output_format)
    logger.info("저장 완료: %s", cfg.output)
    return cfg.output


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(message)s")
    args = sys.argv[1:] if argv is None else argv
    config_path = Path(args[0]) if args else None
    try:
        cfg = PipelineConfig.from_dict(load_config(config_path))
        run(cfg)
    except (RenderError, ConfigError, OSError) as e:
        logger.error("합성 실패: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
