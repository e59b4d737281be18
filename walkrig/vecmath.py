from __future__ import annotations

import math
from typing import Iterable

from .types import Vec3


ROUND_DIGITS = 4


def r4(x: float) -> float:
    # +0.0 folds -0.0 so emitted text never shows "-0.0000"
    return round(float(x), ROUND_DIGITS) + 0.0


def round_vec3(a: Vec3) -> Vec3:
    return (r4(a[0]), r4(a[1]), r4(a[2]))


def v3_add(a: Vec3, b: Vec3) -> Vec3:
    x, y, z = a
    return (x + b[0], y + b[1], z + b[2])


def v3_dist(a: Vec3, b: Vec3) -> float:
    return math.sqrt(sum((p - q) ** 2 for p, q in zip(a, b)))


def rms(values: Iterable[float]) -> float:
    vals = list(values)
    if not vals:
        return 0.0
    return math.sqrt(sum(v * v for v in vals) / len(vals))
