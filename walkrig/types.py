from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


Vec3 = tuple[float, float, float]
Mat4 = list[list[float]]  # 4x4 row-major

ZERO3: Vec3 = (0.0, 0.0, 0.0)
ONE3: Vec3 = (1.0, 1.0, 1.0)

CHANNEL_LOCATION = "location"
CHANNEL_ROTATION = "rotation_euler"

SPACE_WORLD = "world"
SPACE_LOCAL = "local"


class MaterialClass(Enum):
    SKIN = "skin"
    PRIMARY_ACCENT = "primary_accent"
    SECONDARY_ACCENT = "secondary_accent"


@dataclass(frozen=True)
class Part:
    name: str
    bind_location: Vec3
    bind_scale: Vec3 = ONE3
    parent: Optional[str] = None
    bind_rotation: Vec3 = ZERO3

    @property
    def is_root(self) -> bool:
        return self.parent is None


@dataclass(frozen=True)
class Pose:
    name: str
    parent: Optional[str]
    location: Vec3
    rotation_euler: Vec3
    scale: Vec3


@dataclass(frozen=True)
class PoseDeclaration:
    name: str
    location: Vec3
    rotation_euler: Vec3
    scale: Vec3
    material_class: MaterialClass
    parent: Optional[str] = None


@dataclass(frozen=True)
class ParentLink:
    child: str
    parent: str


@dataclass(frozen=True)
class KeyframeEvent:
    frame: int
    part: str
    channel: str  # CHANNEL_LOCATION | CHANNEL_ROTATION
    value: Vec3
    space: str = SPACE_LOCAL


@dataclass(frozen=True)
class CameraCue:
    frame: int
    location: Vec3


@dataclass(frozen=True)
class CameraTrack:
    camera: str
    target: str


@dataclass(frozen=True)
class AudioCue:
    path: Path
    start_frame: int = 0
    channel: int = 1


@dataclass(frozen=True)
class WaveformInfo:
    path: Path
    sample_rate: int
    n_samples: int

    @property
    def duration_s(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.n_samples / float(self.sample_rate)
