"""설정 파일 로더 모듈.

config.json을 기본값 위에 병합하고, .env / 환경변수(BaseURL, MaskURL, TextContent)로
이미지 경로와 텍스트 줄을 덮어쓴다.
"""

import copy
import json
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import dotenv_values

# 기본 설정 경로
_CONFIG_PATH = Path(__file__).parent / "config.json"
_ENV_PATH = Path(__file__).parent / ".env"

# 기본값 — config.json에 누락된 키가 있을 때 사용
_DEFAULTS = {
    "base_image": "",
    "overlay_image": "",
    "overlay": {
        "padding_x": 150,
        "padding_y": 320,
        "width": 80,
        "height": 80,
    },
    "text": {
        "font": "assets/font.ttf",
        "size": 50,
        "color": "#8EE5EE",
        "min_width": 20,
        "origin": [450, 100],
        "line_step": 80,
        "lines": [],
    },
    "output": {
        "path": "output.jpg",
        "format": "JPEG",
    },
}


class ConfigError(ValueError):
    """설정 값이 없거나 형식이 잘못됨."""


def _deep_merge(base: dict, override: dict) -> dict:
    """base 딕셔너리에 override 값을 병합한다 (깊은 병합)."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def split_lines(value: str | None) -> list[str]:
    """쉼표로 구분된 텍스트를 줄 리스트로 나눈다 (빈 항목 유지, 공백 유지)."""
    if not value:
        return []
    return value.split(",")


def _env_overrides(env_path: Path) -> dict:
    """.env 파일과 프로세스 환경변수에서 덮어쓸 값을 모은다 (환경변수 우선)."""
    values = {}
    if env_path.exists():
        values.update({k: v for k, v in dotenv_values(env_path).items() if v is not None})
    for key in ("BaseURL", "MaskURL", "TextContent"):
        if key in os.environ:
            values[key] = os.environ[key]

    overrides: dict = {}
    if "BaseURL" in values:
        overrides["base_image"] = values["BaseURL"]
    if "MaskURL" in values:
        overrides["overlay_image"] = values["MaskURL"]
    if "TextContent" in values:
        overrides["text"] = {"lines": split_lines(values["TextContent"])}
    return overrides


def load_config(path: Path | None = None, env_path: Path | None = None) -> dict:
    """설정 파일을 읽어 딕셔너리로 반환한다.

    파일이 없으면 기본값을 사용한다.
    """
    config_path = Path(path) if path else _CONFIG_PATH
    config = copy.deepcopy(_DEFAULTS)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            try:
                user_config = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"설정 파일 형식 오류: {config_path} ({e})") from e
        config = _deep_merge(config, user_config)
    return _deep_merge(config, _env_overrides(Path(env_path) if env_path else _ENV_PATH))


def parse_color(value) -> tuple[int, int, int, int]:
    """'#RRGGBB' / '#RRGGBBAA' / [r, g, b(, a)] → RGBA 튜플."""
    if isinstance(value, str):
        hex_str = value.lstrip("#")
        if len(hex_str) not in (6, 8):
            raise ConfigError(f"색상 형식 오류: {value!r}")
        try:
            channels = [int(hex_str[i:i + 2], 16) for i in range(0, len(hex_str), 2)]
        except ValueError as e:
            raise ConfigError(f"색상 형식 오류: {value!r}") from e
    elif isinstance(value, (list, tuple)) and len(value) in (3, 4):
        channels = list(value)
    else:
        raise ConfigError(f"색상 형식 오류: {value!r}")

    if not all(isinstance(c, int) and 0 <= c <= 255 for c in channels):
        raise ConfigError(f"색상 채널은 0~255 정수: {value!r}")
    if len(channels) == 3:
        channels.append(255)
    return tuple(channels)


def _int(section: dict, key: str, where: str) -> int:
    value = section.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{where}.{key}는 정수여야 함: {value!r}")
    return value


@dataclass(frozen=True)
class PipelineConfig:
    """시작 시 한 번 만들어 파이프라인에 그대로 넘기는 설정 값."""
    base_image: Path
    overlay_image: Path
    padding_x: int
    padding_y: int
    overlay_width: int
    overlay_height: int
    font_path: str               # 빈 문자열이면 시스템 폴백 폰트
    font_size: float
    text_color: tuple[int, int, int, int]
    min_width: int
    text_origin: tuple[int, int]
    line_step: int
    lines: tuple[str, ...]
    output: Path
    output_format: str

    @classmethod
    def from_dict(cls, config: dict) -> "PipelineConfig":
        """load_config 결과를 검증해 타입이 정해진 설정으로 만든다."""
        for key in ("base_image", "overlay_image"):
            if not config.get(key):
                raise ConfigError(f"{key} 경로가 설정되지 않음")

        overlay = config["overlay"]
        text = config["text"]
        output = config["output"]

        size = text.get("size")
        if isinstance(size, bool) or not isinstance(size, (int, float)):
            raise ConfigError(f"text.size는 숫자여야 함: {size!r}")
        origin = text.get("origin")
        if not (isinstance(origin, (list, tuple)) and len(origin) == 2
                and all(isinstance(v, int) for v in origin)):
            raise ConfigError(f"text.origin은 [x, y] 정수 쌍이어야 함: {origin!r}")
        lines = text.get("lines") or []
        if isinstance(lines, str):
            lines = split_lines(lines)

        return cls(
            base_image=Path(config["base_image"]),
            overlay_image=Path(config["overlay_image"]),
            padding_x=_int(overlay, "padding_x", "overlay"),
            padding_y=_int(overlay, "padding_y", "overlay"),
            overlay_width=_int(overlay, "width", "overlay"),
            overlay_height=_int(overlay, "height", "overlay"),
            font_path=str(text.get("font") or ""),
            font_size=float(size),
            text_color=parse_color(text.get("color")),
            min_width=_int(text, "min_width", "text"),
            text_origin=(origin[0], origin[1]),
            line_step=_int(text, "line_step", "text"),
            lines=tuple(str(line) for line in lines),
            output=Path(output.get("path") or "output.jpg"),
            output_format=str(output.get("format") or "JPEG"),
        )
