from __future__ import annotations

import math
from pathlib import Path
from typing import Iterable, List, Optional

from PIL import Image, ImageDraw

from ..config import DEFAULT_CONFIG, AnimConfig
from ..rig import Rig, classify
from ..solver import TRAVEL_AXIS, solve
from ..types import MaterialClass, Vec3
from .evaluator import bone_segments, evaluate_world


CELL_W = 160
CELL_H = 200
PX_PER_UNIT = 60.0
BACKGROUND = (18, 18, 24)
GROUND = (70, 70, 80)

_CLASS_RGB = {
    MaterialClass.SKIN: (237, 194, 158),
    MaterialClass.PRIMARY_ACCENT: (60, 110, 220),
    MaterialClass.SECONDARY_ACCENT: (220, 80, 60),
}


def _project(p: Vec3, root_travel: float, cell_x: int, cell_y: int) -> tuple[float, float]:
    # side view: travel axis to the right, Z up, root kept centered
    u = (p[TRAVEL_AXIS] - root_travel) * PX_PER_UNIT + CELL_W / 2.0
    v = CELL_H - 10 - p[2] * PX_PER_UNIT
    return (cell_x + u, cell_y + v)


def render_contact_sheet(
    rig: Rig,
    frames: Iterable[int],
    out_path: Path,
    config: AnimConfig = DEFAULT_CONFIG,
    columns: int = 6,
    logger=None,
) -> Path:
    """Side-view stick figures for the given frames, one cell each."""
    frame_list: List[int] = list(frames)
    if not frame_list:
        raise ValueError("no frames to draw")

    columns = max(1, min(columns, len(frame_list)))
    rows = int(math.ceil(len(frame_list) / float(columns)))
    img = Image.new("RGB", (columns * CELL_W, rows * CELL_H), BACKGROUND)
    draw = ImageDraw.Draw(img)

    root = rig.root.name
    for n, frame in enumerate(frame_list):
        cx = (n % columns) * CELL_W
        cy = (n // columns) * CELL_H

        world = evaluate_world(rig, solve(rig, frame, config.total_frames, config))
        travel = world.origins[root][TRAVEL_AXIS]

        draw.line([(cx, cy + CELL_H - 10), (cx + CELL_W, cy + CELL_H - 10)], fill=GROUND, width=1)
        for a, b in bone_segments(rig, world):
            draw.line([_project(a, travel, cx, cy), _project(b, travel, cx, cy)], fill=(180, 180, 220), width=2)
        for name, p in world.origins.items():
            x, y = _project(p, travel, cx, cy)
            rgb = _CLASS_RGB[classify(name)]
            draw.ellipse([x - 3, y - 3, x + 3, y + 3], fill=rgb)
        draw.text((cx + 4, cy + 4), f"f{frame}", fill=(200, 200, 200))

    out_path.parent.mkdir(parents=True, exist_ok=True)
    img.save(out_path)
    if logger:
        logger.info("Wrote contact sheet: %s (%d frames)", out_path, len(frame_list))
    return out_path


def cycle_frames(config: AnimConfig = DEFAULT_CONFIG, samples: int = 12, start: Optional[int] = None) -> List[int]:
    """Evenly spaced frames across one gait cycle, clipped to the timeline."""
    cycle = config.gait_cycle_frames
    first = 0 if start is None else start
    out = sorted({min(config.total_frames, first + (i * cycle) // samples) for i in range(samples)})
    return out
