from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from .errors import ConfigError
from .types import Vec3


def _vec3(v) -> Vec3:
    x, y, z = v
    return (float(x), float(y), float(z))


def _opt_path(v) -> Optional[Path]:
    return Path(v) if v else None


def _bool(v) -> bool:
    # JSON true/false only; bool("false") would be True
    if not isinstance(v, bool):
        raise TypeError(f"expected true or false, got {type(v).__name__}")
    return v


CONFIG_FIELDS = [
    ("total_frames", int, 1800),
    ("forward_speed", float, 0.1),
    ("frame_rate", int, 60),
    ("gait_frequency", float, 1.0),  # gait cycles per second

    # camera offset from the root: (lateral, trailing, vertical)
    ("camera_offset", _vec3, (9.0, -14.0, 3.5)),

    ("blender_path", _opt_path, None),
    ("output_dir", Path, lambda: Path("out")),
    ("script_name", str, "generated_script.py"),
    ("render_output", str, "//render_output"),
    ("audio_path", _opt_path, None),
    ("log_path", Path, lambda: Path("logs/walkrig.log")),

    ("strip_enabled", _bool, False),
    ("strip_bpm", float, None),
    ("workers", int, 1),
]


@dataclass(frozen=True)
class AnimConfig:
    total_frames: int = 1800
    forward_speed: float = 0.1
    frame_rate: int = 60
    gait_frequency: float = 1.0
    camera_offset: Vec3 = (9.0, -14.0, 3.5)
    blender_path: Optional[Path] = None
    output_dir: Path = Path("out")
    script_name: str = "generated_script.py"
    render_output: str = "//render_output"
    audio_path: Optional[Path] = None
    log_path: Path = Path("logs/walkrig.log")
    strip_enabled: bool = False
    strip_bpm: Optional[float] = None
    workers: int = 1

    def __post_init__(self) -> None:
        self.validate()

    @property
    def gait_cycle_frames(self) -> int:
        return int(round(self.frame_rate / self.gait_frequency))

    @property
    def duration_s(self) -> float:
        return self.total_frames / float(self.frame_rate)

    @property
    def script_path(self) -> Path:
        return self.output_dir / self.script_name

    def with_overrides(self, **kwargs) -> "AnimConfig":
        return replace(self, **kwargs)

    def validate(self) -> "AnimConfig":
        if self.total_frames < 0:
            raise ConfigError(f"total_frames must be >= 0 (got {self.total_frames})")
        if self.frame_rate <= 0:
            raise ConfigError(f"frame_rate must be > 0 (got {self.frame_rate})")
        if self.gait_frequency <= 0.0:
            raise ConfigError(f"gait_frequency must be > 0 (got {self.gait_frequency})")

        # the gait has to close on a whole frame so limb poses repeat exactly
        cycle = self.frame_rate / self.gait_frequency
        if cycle < 2.0 or abs(cycle - round(cycle)) > 1e-9:
            raise ConfigError(
                f"frame_rate / gait_frequency must be a whole number of frames >= 2 (got {cycle:g})"
            )
        if self.workers < 1:
            raise ConfigError(f"workers must be >= 1 (got {self.workers})")
        if self.strip_bpm is not None and self.strip_bpm <= 0.0:
            raise ConfigError(f"strip_bpm must be > 0 (got {self.strip_bpm})")
        return self


DEFAULT_CONFIG = AnimConfig()


def config_from_dict(raw: dict) -> AnimConfig:
    values = {}
    for entry in CONFIG_FIELDS:
        key = entry[0]
        cast = entry[1]
        default = entry[2] if len(entry) > 2 else None

        if key in raw:
            value = raw[key]
        else:
            value = default() if callable(default) else default

        if value is not None and cast is not None:
            try:
                value = cast(value)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid value for {key!r}: {raw.get(key)!r} ({e})") from e

        values[key] = value

    return AnimConfig(**values).validate()


def load_config(config_path: Path) -> AnimConfig:
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config is not valid JSON: {config_path} ({e})") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Config root must be an object: {config_path}")
    return config_from_dict(raw)
