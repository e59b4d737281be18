from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from .config import DEFAULT_CONFIG, AnimConfig
from .errors import InvalidFrame, MalformedRig
from .rig import Rig, classify
from .solver import root_travel, solve
from .strip import StripConfig, strip_declarations, strip_timeline
from .types import (
    CHANNEL_LOCATION,
    CHANNEL_ROTATION,
    SPACE_LOCAL,
    SPACE_WORLD,
    AudioCue,
    CameraCue,
    CameraTrack,
    KeyframeEvent,
    ParentLink,
    Pose,
    PoseDeclaration,
)
from .vecmath import round_vec3, v3_add


CAMERA_NAME = "Camera"
FIRST_FRAME = 0
AUDIO_CHANNEL = 1

Record = Union[PoseDeclaration, ParentLink, KeyframeEvent, CameraTrack, CameraCue, AudioCue]

# emission stages; records must appear with non-decreasing stage
_STAGE = {
    PoseDeclaration: 0,
    ParentLink: 1,
    KeyframeEvent: 2,
    CameraTrack: 3,
    CameraCue: 3,
    AudioCue: 4,
}


@dataclass(frozen=True)
class SceneStream:
    total_frames: int
    frame_rate: int
    declarations: tuple[PoseDeclaration, ...]
    links: tuple[ParentLink, ...]
    timeline: tuple[KeyframeEvent, ...]
    camera_track: CameraTrack
    camera_cues: tuple[CameraCue, ...]
    audio: Optional[AudioCue] = None

    @property
    def records(self) -> tuple[Record, ...]:
        out: list[Record] = []
        out.extend(self.declarations)
        out.extend(self.links)
        out.extend(self.timeline)
        out.append(self.camera_track)
        out.extend(self.camera_cues)
        if self.audio is not None:
            out.append(self.audio)
        return tuple(out)


def emit_bind_pose(rig: Rig) -> list[PoseDeclaration]:
    """Creation records in rig order. Parent names ride along but are only linked later."""
    out: list[PoseDeclaration] = []
    for p in rig.parts:
        out.append(
            PoseDeclaration(
                name=p.name,
                location=round_vec3(p.bind_location),
                rotation_euler=round_vec3(p.bind_rotation),
                scale=round_vec3(p.bind_scale),
                material_class=classify(p.name),
                parent=p.parent,
            )
        )
    return out


def emit_parent_links(rig: Rig) -> list[ParentLink]:
    out: list[ParentLink] = []
    for i, p in enumerate(rig.parts):
        pi = rig.parent_index(i)
        if pi is None:
            continue
        out.append(ParentLink(child=p.name, parent=rig.parts[pi].name))
    return out


def _solve_frames(rig: Rig, total_frames: int, config: AnimConfig, workers: int) -> list[list[Pose]]:
    frames = range(total_frames + 1)
    if workers <= 1:
        return [solve(rig, f, total_frames, config) for f in frames]

    by_frame: dict[int, list[Pose]] = {}
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = {pool.submit(solve, rig, f, total_frames, config): f for f in frames}
        for fut in as_completed(futures):
            by_frame[futures[fut]] = fut.result()
    return [by_frame[f] for f in frames]


def emit_timeline(
    rig: Rig,
    total_frames: int,
    config: AnimConfig = DEFAULT_CONFIG,
    workers: Optional[int] = None,
) -> list[KeyframeEvent]:
    """
    One location and one rotation event per part per frame, frames ascending.

    The root's values are world space (its pose already carries the travel
    offset); every other part stays local to its parent.
    """
    if total_frames < 0:
        raise InvalidFrame(total_frames, total_frames)

    n_workers = config.workers if workers is None else workers
    poses_by_frame = _solve_frames(rig, total_frames, config, n_workers)

    out: list[KeyframeEvent] = []
    for frame, poses in enumerate(poses_by_frame):
        for pose in poses:
            space = SPACE_WORLD if pose.parent is None else SPACE_LOCAL
            out.append(KeyframeEvent(frame, pose.name, CHANNEL_LOCATION, pose.location, space))
            out.append(KeyframeEvent(frame, pose.name, CHANNEL_ROTATION, pose.rotation_euler, space))
    return out


def emit_camera_path(rig: Rig, total_frames: int, config: AnimConfig = DEFAULT_CONFIG) -> list[CameraCue]:
    if total_frames < 0:
        raise InvalidFrame(total_frames, total_frames)
    return [
        CameraCue(frame=f, location=round_vec3(v3_add(root_travel(rig, f, config), config.camera_offset)))
        for f in range(total_frames + 1)
    ]


def emit_camera_track(rig: Rig) -> CameraTrack:
    return CameraTrack(camera=CAMERA_NAME, target=rig.root.name)


def emit_audio_cue(waveform_path: Union[str, Path]) -> AudioCue:
    return AudioCue(path=Path(waveform_path), start_frame=FIRST_FRAME, channel=AUDIO_CHANNEL)


def check_ordering(records: Iterable[Record]) -> None:
    """
    Raise MalformedRig when records break the emission order: creations,
    then parent links naming created parts, then keyframes ascending per
    part and channel, then camera, then audio.
    """
    stage = 0
    declared: set[str] = set()
    last_key: dict[tuple[str, str], int] = {}
    last_cam = -1

    for rec in records:
        s = _STAGE.get(type(rec))
        if s is None:
            raise MalformedRig(f"unknown record type {type(rec).__name__}")
        if s < stage:
            raise MalformedRig(f"{type(rec).__name__} emitted after a later stage")
        stage = s

        if isinstance(rec, PoseDeclaration):
            if rec.name in declared:
                raise MalformedRig(f"part {rec.name!r} declared twice")
            declared.add(rec.name)
        elif isinstance(rec, ParentLink):
            for name in (rec.child, rec.parent):
                if name not in declared:
                    raise MalformedRig(f"parent link references undeclared part {name!r}")
        elif isinstance(rec, KeyframeEvent):
            if rec.part not in declared:
                raise MalformedRig(f"keyframe for undeclared part {rec.part!r}")
            k = (rec.part, rec.channel)
            if rec.frame <= last_key.get(k, -1):
                raise MalformedRig(f"keyframes for {rec.part}.{rec.channel} not ascending at frame {rec.frame}")
            last_key[k] = rec.frame
        elif isinstance(rec, CameraTrack):
            if rec.target not in declared:
                raise MalformedRig(f"camera tracks undeclared part {rec.target!r}")
        elif isinstance(rec, CameraCue):
            if rec.frame <= last_cam:
                raise MalformedRig(f"camera cues not ascending at frame {rec.frame}")
            last_cam = rec.frame


def build_scene(
    rig: Rig,
    config: AnimConfig = DEFAULT_CONFIG,
    audio_path: Optional[Union[str, Path]] = None,
    strip: Optional[StripConfig] = None,
    workers: Optional[int] = None,
    logger=None,
) -> SceneStream:
    total = config.total_frames

    declarations = emit_bind_pose(rig)
    links = emit_parent_links(rig)
    timeline = emit_timeline(rig, total, config, workers=workers)
    if strip is not None:
        declarations += strip_declarations(strip)
        timeline += strip_timeline(strip, total)

    scene = SceneStream(
        total_frames=total,
        frame_rate=config.frame_rate,
        declarations=tuple(declarations),
        links=tuple(links),
        timeline=tuple(timeline),
        camera_track=emit_camera_track(rig),
        camera_cues=tuple(emit_camera_path(rig, total, config)),
        audio=emit_audio_cue(audio_path) if audio_path is not None else None,
    )
    check_ordering(scene.records)

    if logger:
        logger.info(
            "Scene built: %d parts, %d links, %d keyframes, %d camera cues, audio=%s",
            len(scene.declarations), len(scene.links), len(scene.timeline),
            len(scene.camera_cues), scene.audio.path if scene.audio else None,
        )
    return scene
