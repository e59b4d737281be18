from __future__ import annotations

import math

from .config import DEFAULT_CONFIG, AnimConfig
from .errors import InvalidFrame
from .rig import Rig, limb_kind
from .types import Part, Pose, Vec3
from .vecmath import round_vec3, v3_add


TRAVEL_AXIS = 1  # Y

# amplitudes in radians
SWAY = 0.04
LEG_SWING = 0.45
ARM_SWING = 0.3
KNEE_BEND = 0.5
ELBOW_BEND = 0.25
HEAD_NOD = 0.05

# contralateral gait: left/right differ by pi, arm and leg on one side differ by pi
LIMB_PHASE = {
    ("leg", "L"): 0.0,
    ("leg", "R"): math.pi,
    ("arm", "L"): math.pi,
    ("arm", "R"): 0.0,
}


def check_frame(frame: int, total_frames: int) -> None:
    if total_frames < 0 or frame < 0 or frame > total_frames:
        raise InvalidFrame(frame, total_frames)


def gait_angle(frame: int, config: AnimConfig = DEFAULT_CONFIG) -> float:
    # reduce modulo the cycle first so poses repeat bit-for-bit every cycle
    cycle = config.gait_cycle_frames
    return 2.0 * math.pi * (frame % cycle) / cycle


def limb_phase(part_name: str) -> float:
    kind = limb_kind(part_name)
    return LIMB_PHASE.get((kind.limb, kind.side), 0.0)


def swing_phase(part_name: str, frame: int, config: AnimConfig = DEFAULT_CONFIG) -> float:
    return gait_angle(frame, config) + limb_phase(part_name)


def _limb_swing(part: Part, theta: float) -> float:
    kind = limb_kind(part.name)
    phi = theta + limb_phase(part.name)

    if kind.limb == "leg":
        if kind.segment == "lower":
            return -KNEE_BEND * max(0.0, math.sin(phi))
        return LEG_SWING * math.sin(phi)
    if kind.limb == "arm":
        if kind.segment == "lower":
            return ELBOW_BEND * max(0.0, math.sin(phi))
        return ARM_SWING * math.sin(phi)
    if kind.limb == "head":
        return HEAD_NOD * math.sin(2.0 * theta)
    return 0.0


def _travel_location(part: Part, frame: int, config: AnimConfig) -> Vec3:
    loc = list(part.bind_location)
    loc[TRAVEL_AXIS] = part.bind_location[TRAVEL_AXIS] + frame * config.forward_speed
    return round_vec3((loc[0], loc[1], loc[2]))


def _root_pose(part: Part, frame: int, theta: float, config: AnimConfig) -> Pose:
    rot = v3_add(part.bind_rotation, (0.0, SWAY * math.sin(theta), 0.0))
    return Pose(
        name=part.name,
        parent=None,
        location=_travel_location(part, frame, config),
        rotation_euler=round_vec3(rot),
        scale=round_vec3(part.bind_scale),
    )


def _limb_pose(part: Part, theta: float) -> Pose:
    rot = v3_add(part.bind_rotation, (_limb_swing(part, theta), 0.0, 0.0))
    return Pose(
        name=part.name,
        parent=part.parent,
        location=round_vec3(part.bind_location),
        rotation_euler=round_vec3(rot),
        scale=round_vec3(part.bind_scale),
    )


def solve(rig: Rig, frame: int, total_frames: int, config: AnimConfig = DEFAULT_CONFIG) -> list[Pose]:
    """
    Poses for every part at `frame`, in rig order.

    The root carries the world-space travel offset and body sway; every other
    part is expressed in its parent's frame and only swings about X. The
    result depends on nothing but the arguments.
    """
    check_frame(frame, total_frames)
    theta = gait_angle(frame, config)

    out: list[Pose] = []
    for part in rig.parts:
        if part.is_root:
            out.append(_root_pose(part, frame, theta, config))
        else:
            out.append(_limb_pose(part, theta))
    return out


def root_travel(rig: Rig, frame: int, config: AnimConfig = DEFAULT_CONFIG) -> Vec3:
    """World location of the root at `frame`, without range checks."""
    return _travel_location(rig.root, frame, config)
