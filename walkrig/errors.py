from __future__ import annotations


class AnimationError(Exception):
    """Base for contract violations inside the animation core."""


class InvalidFrame(AnimationError):
    def __init__(self, frame: int, total_frames: int) -> None:
        super().__init__(f"frame {frame} outside [0, {total_frames}]")
        self.frame = frame
        self.total_frames = total_frames


class UnresolvedParent(AnimationError):
    def __init__(self, part: str, parent: str) -> None:
        super().__init__(f"part {part!r} references missing parent {parent!r}")
        self.part = part
        self.parent = parent


class MalformedRig(AnimationError):
    pass


class ConfigError(ValueError):
    pass


class RenderError(RuntimeError):
    pass
