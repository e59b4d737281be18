from __future__ import annotations

import math
from dataclasses import dataclass, replace

from .errors import InvalidFrame
from .rig import classify
from .types import CHANNEL_LOCATION, SPACE_WORLD, KeyframeEvent, PoseDeclaration, Vec3
from .vecmath import r4, round_vec3


@dataclass(frozen=True)
class StripConfig:
    """A row of cubes along X, bobbing on Z in a travelling sine wave."""
    count: int = 10
    spacing: float = 2.5
    amplitude: float = 3.0
    time_step: float = 0.2  # radians per frame
    offset: float = 0.5  # radians between neighbouring cubes
    origin: Vec3 = (0.0, 0.0, 0.0)
    size: float = 2.0


def beat_synced(cfg: StripConfig, bpm: float, frame_rate: int) -> StripConfig:
    """One full bob per beat."""
    step = 2.0 * math.pi * (bpm / 60.0) / float(frame_rate)
    return replace(cfg, time_step=step)


def cube_name(i: int) -> str:
    return f"StripCube_{i:02d}"


def cube_height(cfg: StripConfig, i: int, frame: int) -> float:
    return r4(cfg.origin[2] + math.sin(frame * cfg.time_step + i * cfg.offset) * cfg.amplitude)


def _cube_xy(cfg: StripConfig, i: int) -> tuple[float, float]:
    return (cfg.origin[0] + i * cfg.spacing, cfg.origin[1])


def strip_declarations(cfg: StripConfig) -> list[PoseDeclaration]:
    half = cfg.size / 2.0
    out: list[PoseDeclaration] = []
    for i in range(cfg.count):
        name = cube_name(i)
        x, y = _cube_xy(cfg, i)
        out.append(
            PoseDeclaration(
                name=name,
                location=round_vec3((x, y, cfg.origin[2])),
                rotation_euler=(0.0, 0.0, 0.0),
                scale=round_vec3((half, half, half)),
                material_class=classify(name),
                parent=None,
            )
        )
    return out


def strip_timeline(cfg: StripConfig, total_frames: int) -> list[KeyframeEvent]:
    if total_frames < 0:
        raise InvalidFrame(total_frames, total_frames)

    out: list[KeyframeEvent] = []
    for frame in range(total_frames + 1):
        for i in range(cfg.count):
            x, y = _cube_xy(cfg, i)
            out.append(
                KeyframeEvent(
                    frame=frame,
                    part=cube_name(i),
                    channel=CHANNEL_LOCATION,
                    value=round_vec3((x, y, cube_height(cfg, i, frame))),
                    space=SPACE_WORLD,
                )
            )
    return out
