from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Any

from .sequencer import SceneStream
from .types import CHANNEL_ROTATION
from .vecmath import rms


@dataclass(frozen=True)
class FingerprintConfig:
    active_eps: float = 1e-4
    top_k: int = 12  # parts listed under top_movers


def _part_motion(scene: SceneStream) -> dict[str, dict[str, float]]:
    """Per part: range and RMS of the rotation channel, summed over axes."""
    rot: dict[str, list[tuple[float, float, float]]] = {}
    for ev in scene.timeline:
        if ev.channel == CHANNEL_ROTATION:
            rot.setdefault(ev.part, []).append(ev.value)

    out: dict[str, dict[str, float]] = {}
    for name, values in rot.items():
        rng = 0.0
        rms_sum = 0.0
        for axis in range(3):
            col = [v[axis] for v in values]
            rng += max(col) - min(col)
            rms_sum += rms(col)
        out[name] = {"rot_range": rng, "rot_rms": rms_sum}
    return out


def scene_payload(scene: SceneStream, cfg: FingerprintConfig = FingerprintConfig()) -> dict[str, Any]:
    motion = _part_motion(scene)

    movers = [
        {"part": name, "rot_range": m["rot_range"], "rot_rms": m["rot_rms"]}
        for name, m in motion.items()
        if m["rot_range"] > cfg.active_eps
    ]
    # Deterministic ordering: range desc, then name
    movers.sort(key=lambda m: (-float(m["rot_range"]), str(m["part"])))

    return {
        "v": 1,
        "frames": {"total": scene.total_frames, "rate": scene.frame_rate},
        "parts": [
            {"name": d.name, "parent": d.parent, "material": d.material_class.value}
            for d in scene.declarations
        ],
        "links": [[l.child, l.parent] for l in scene.links],
        "timeline": [[e.frame, e.part, e.channel, list(e.value), e.space] for e in scene.timeline],
        "camera": {
            "target": scene.camera_track.target,
            "path": [[c.frame, list(c.location)] for c in scene.camera_cues],
        },
        "audio": None if scene.audio is None else {
            "path": scene.audio.path.as_posix(),
            "start_frame": scene.audio.start_frame,
            "channel": scene.audio.channel,
        },
        "aggregate": {
            "active_part_count": len(movers),
            "keyframe_count": len(scene.timeline),
        },
        "top_movers": movers[: int(cfg.top_k)],
    }


def canonicalize(payload: dict[str, Any]) -> tuple[str, str]:
    """
    Returns (canonical_json, sha1_hex) deterministically.
    """
    canonical_json = json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"))
    sha1_hex = hashlib.sha1(canonical_json.encode("utf-8")).hexdigest()
    return canonical_json, sha1_hex


def scene_fingerprint(scene: SceneStream) -> str:
    return canonicalize(scene_payload(scene))[1]
