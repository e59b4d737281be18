# walkrig/viewer/evaluator.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..rig import Rig, limb_kind
from ..types import Mat4, Pose, Vec3


# row-major 4x4 helpers

def mat4_identity() -> Mat4:
    return [[1.0 if r == c else 0.0 for c in range(4)] for r in range(4)]


def mat4_translate(x: float, y: float, z: float) -> Mat4:
    m = mat4_identity()
    m[0][3], m[1][3], m[2][3] = float(x), float(y), float(z)
    return m


def mat4_mul(a: Mat4, b: Mat4) -> Mat4:
    # row-major: (a * b)[r][c] = row r of a . column c of b
    cols = list(zip(*b))
    return [[sum(x * y for x, y in zip(row, col)) for col in cols] for row in a]


def euler_xyz_to_mat4(e: Vec3) -> Mat4:
    # Blender 'XYZ' order: R = Rz * Ry * Rx
    cx, sx = math.cos(e[0]), math.sin(e[0])
    cy, sy = math.cos(e[1]), math.sin(e[1])
    cz, sz = math.cos(e[2]), math.sin(e[2])
    return [
        [cy * cz, sx * sy * cz - cx * sz, cx * sy * cz + sx * sz, 0.0],
        [cy * sz, sx * sy * sz + cx * cz, cx * sy * sz - sx * cz, 0.0],
        [-sy,     sx * cy,                cx * cy,                0.0],
        [0.0,     0.0,                    0.0,                    1.0],
    ]


def transform_point(m: Mat4, v: Vec3) -> Vec3:
    """Apply m to the point v, taken as the column (x, y, z, 1)."""
    x, y, z = v
    return tuple(row[0] * x + row[1] * y + row[2] * z + row[3] for row in m[:3])  # type: ignore[return-value]


@dataclass(frozen=True)
class WorldPose:
    world_mats: Dict[str, Mat4]
    origins: Dict[str, Vec3]
    # far end of each hanging limb segment, for drawing
    tips: Dict[str, Vec3]


def evaluate_world(rig: Rig, poses: List[Pose]) -> WorldPose:
    """
    World = ParentWorld * T(location) * R(rotation_euler)

    Scale is left out: the emitter bakes it into mesh data, so it never
    reaches children.
    """
    by_name = {p.name: p for p in poses}
    world_mats: Dict[str, Mat4] = {}

    def compute_world(name: str) -> Mat4:
        if name in world_mats:
            return world_mats[name]
        pose = by_name[name]
        local = mat4_mul(mat4_translate(*pose.location), euler_xyz_to_mat4(pose.rotation_euler))
        parent: Optional[str] = rig.part(name).parent
        world = local if parent is None else mat4_mul(compute_world(parent), local)
        world_mats[name] = world
        return world

    origins: Dict[str, Vec3] = {}
    tips: Dict[str, Vec3] = {}
    for part in rig.parts:
        w = compute_world(part.name)
        origins[part.name] = transform_point(w, (0.0, 0.0, 0.0))
        if limb_kind(part.name).limb in ("arm", "leg"):
            tips[part.name] = transform_point(w, (0.0, 0.0, -2.0 * part.bind_scale[2]))

    return WorldPose(world_mats=world_mats, origins=origins, tips=tips)


def world_positions(rig: Rig, poses: List[Pose]) -> Dict[str, Vec3]:
    return evaluate_world(rig, poses).origins


def bone_segments(rig: Rig, world: WorldPose) -> List[tuple[Vec3, Vec3]]:
    """Lines to draw: parent origin -> child origin, plus each limb's own length."""
    segs: List[tuple[Vec3, Vec3]] = []
    for part in rig.parts:
        if part.parent is not None:
            segs.append((world.origins[part.parent], world.origins[part.name]))
        tip = world.tips.get(part.name)
        if tip is not None:
            segs.append((world.origins[part.name], tip))
    return segs
