from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List

from .errors import RenderError


@dataclass(frozen=True)
class RenderResult:
    ok: bool
    returncode: int
    stdout: str
    stderr: str
    command: List[str]


def blender_command(blender_path: Path, script_path: Path) -> List[str]:
    # blender -b -P generated_script.py -a
    return [
        str(blender_path),
        "--background",
        "--python",
        str(script_path),
        "--render-anim",
    ]


def run_blender_render(blender_path: Path, script_path: Path, logger=None) -> RenderResult:
    """
    Run Blender headless on the generated script and render the animation.
    A renderer that cannot start raises RenderError; a non-zero exit comes
    back as ok=False. Nothing is retried.
    """
    cmd = blender_command(blender_path, script_path)

    if logger:
        logger.info("Running Blender render: %s", " ".join(cmd))

    try:
        p = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        raise RenderError(f"Failed to execute Blender at {blender_path}: {e}") from e

    if logger:
        if p.stdout.strip():
            logger.info("Blender stdout:\n%s", p.stdout.strip())
        if p.stderr.strip():
            logger.warning("Blender stderr:\n%s", p.stderr.strip())

    return RenderResult(
        ok=p.returncode == 0,
        returncode=int(p.returncode),
        stdout=p.stdout or "",
        stderr=p.stderr or "",
        command=cmd,
    )
