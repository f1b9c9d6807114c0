from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

MAX_LINES_LIMIT = 100
SCROLL_POLICIES = ("centered", "tail")

DEFAULT_CONFIG: Dict[str, Any] = {
    "editor": {
        "max_lines": 10,
        "viewport_width": 640,
        "viewport_height": 240,
        "escape_backslash": False,
        "scroll_policy": "centered",
        "blink_frames": 30,
        "max_chars": None,
        "line_gap": 6,
    },
    "prompt": {
        "label": "Enter text:",
        "ok_label": "OK",
        "help_text": "Shift+Enter to save",
        "width_percent": 70,
        "height_percent": 50,
        "font_size": 25,
        "trim_result": False,
    },
}


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class EditorConfig:
    max_lines: int = 10
    viewport_width: int = 640
    viewport_height: int = 240
    escape_backslash: bool = False
    scroll_policy: str = "centered"
    blink_frames: int = 30
    max_chars: Optional[int] = None

    def __post_init__(self) -> None:
        if not 1 <= self.max_lines <= MAX_LINES_LIMIT:
            raise ConfigError(f"max_lines must be within 1..{MAX_LINES_LIMIT}, got {self.max_lines}")
        if self.viewport_width <= 0 or self.viewport_height <= 0:
            raise ConfigError(
                f"viewport must be positive, got {self.viewport_width}x{self.viewport_height}"
            )
        if self.blink_frames <= 0:
            raise ConfigError(f"blink_frames must be positive, got {self.blink_frames}")
        if self.scroll_policy not in SCROLL_POLICIES:
            raise ConfigError(f"unknown scroll_policy {self.scroll_policy!r}")
        if self.max_chars is not None and self.max_chars < 1:
            raise ConfigError(f"max_chars must be at least 1, got {self.max_chars}")

    @classmethod
    def from_mapping(cls, section: Optional[Mapping[str, Any]]) -> "EditorConfig":
        if section is None:
            section = {}
        if not isinstance(section, Mapping):
            raise ConfigError(f"editor config must be a mapping, got {type(section).__name__}")
        try:
            max_chars = section.get("max_chars")
            values = dict(
                max_lines=int(section.get("max_lines", cls.max_lines)),
                viewport_width=int(section.get("viewport_width", cls.viewport_width)),
                viewport_height=int(section.get("viewport_height", cls.viewport_height)),
                escape_backslash=bool(section.get("escape_backslash", cls.escape_backslash)),
                scroll_policy=str(section.get("scroll_policy", cls.scroll_policy)),
                blink_frames=int(section.get("blink_frames", cls.blink_frames)),
                max_chars=None if max_chars is None else int(max_chars),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"invalid editor config: {exc}") from exc
        return cls(**values)


def clamp_percent(value: Any, fallback: int) -> int:
    try:
        percent = int(value)
    except (TypeError, ValueError):
        return fallback
    return max(10, min(100, percent))


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if (
            key in merged
            and isinstance(merged[key], dict)
            and isinstance(value, dict)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _candidate_config_paths() -> list[Path]:
    env_path = os.environ.get("ENTRYBOX_CONFIG")
    paths = []
    if env_path:
        paths.append(Path(env_path))
    paths.extend([
        Path("config.yaml"),
        Path("/etc/entrybox/config.yaml"),
    ])
    return paths


def load_config() -> Dict[str, Any]:
    config = dict(DEFAULT_CONFIG)
    for path in _candidate_config_paths():
        if path.exists():
            with path.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
            if isinstance(data, dict):
                config = _deep_merge(config, data)
                for section, defaults in DEFAULT_CONFIG.items():
                    if not isinstance(config.get(section), dict):
                        logger.warning(f"Config section {section!r} in {path} is not a mapping, using defaults")
                        config[section] = dict(defaults)
            else:
                logger.warning(f"Config file {path} is not a mapping, ignoring")
            break
    return config
