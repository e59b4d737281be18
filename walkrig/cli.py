from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .config import DEFAULT_CONFIG, AnimConfig, load_config
from .emitter import write_script
from .errors import AnimationError, ConfigError, RenderError
from .fingerprints import canonicalize, scene_payload
from .render import run_blender_render
from .rig import build_rig
from .sequencer import build_scene
from .strip import StripConfig, beat_synced
from .waveform import check_waveform, probe_waveform


# strip sits beside the walk path, centered on X
STRIP_ORIGIN = (-11.25, 8.0, 0.0)


def setup_logger(log_path: Path, echo: bool = True) -> logging.Logger:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger("walkrig")
    logger.setLevel(logging.INFO)
    if not logger.handlers:
        fmt = logging.Formatter("%(asctime)s %(levelname)s %(message)s")
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setLevel(logging.INFO)
        fh.setFormatter(fmt)
        logger.addHandler(fh)
        if echo:
            sh = logging.StreamHandler(sys.stderr)
            sh.setLevel(logging.INFO)
            sh.setFormatter(fmt)
            logger.addHandler(sh)
    return logger


@dataclass(frozen=True)
class GenerateResult:
    script_path: Path
    fingerprint_path: Path
    sha1: str
    audio_ok: Optional[bool]


def strip_for(config: AnimConfig) -> Optional[StripConfig]:
    if not config.strip_enabled:
        return None
    strip = StripConfig(origin=STRIP_ORIGIN)
    if config.strip_bpm:
        strip = beat_synced(strip, config.strip_bpm, config.frame_rate)
    return strip


def generate(config: AnimConfig, *, strict_audio: bool = True, logger=None) -> GenerateResult:
    rig = build_rig()

    audio_ok: Optional[bool] = None
    if config.audio_path is not None:
        info = probe_waveform(config.audio_path)
        audio_ok = check_waveform(info, config, strict=strict_audio, logger=logger)
        if logger:
            logger.info("Waveform: %s (%.3fs @ %d Hz)", info.path, info.duration_s, info.sample_rate)

    scene = build_scene(
        rig,
        config,
        audio_path=config.audio_path.resolve() if config.audio_path is not None else None,
        strip=strip_for(config),
        logger=logger,
    )

    script_path = write_script(scene, config.script_path, render_output=config.render_output, logger=logger)

    canonical_json, sha1 = canonicalize(scene_payload(scene))
    fp_path = script_path.with_suffix(".fingerprint.json")
    fp_path.write_text(
        json.dumps({"sha1": sha1, "payload_bytes": len(canonical_json)}, indent=2),
        encoding="utf-8",
    )
    if logger:
        logger.info("Scene fingerprint: %s", sha1)

    return GenerateResult(script_path=script_path, fingerprint_path=fp_path, sha1=sha1, audio_ok=audio_ok)


def _positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1 (got {value})")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="walkrig", description="Procedural walker animation for Blender")
    parser.add_argument("--config", type=Path, default=None, help="Path to config JSON")
    parser.add_argument("--frames", type=int, default=None, help="Override total_frames")
    parser.add_argument("--workers", type=int, default=None, help="Threads used to solve frames")
    parser.add_argument("--audio", type=Path, default=None, help="WAV file placed on channel 1")
    parser.add_argument("--strip", action="store_true", help="Add the bobbing cube strip")
    parser.add_argument("--output-dir", type=Path, default=None)

    sub = parser.add_subparsers(dest="command", required=True)

    p_gen = sub.add_parser("generate", help="Write the Blender script")
    p_gen.add_argument("--lenient-audio", action="store_true", help="Warn instead of failing on audio length")

    p_ren = sub.add_parser("render", help="Write the script and render it with Blender")
    p_ren.add_argument("--lenient-audio", action="store_true")
    p_ren.add_argument("--blender", type=Path, default=None, help="Blender executable")

    p_pre = sub.add_parser("preview", help="Draw a contact sheet of one gait cycle")
    p_pre.add_argument("--out", type=Path, default=None)
    p_pre.add_argument("--samples", type=_positive_int, default=12)

    sub.add_parser("view", help="Open the OpenGL playback window")
    return parser


def _resolve_config(args: argparse.Namespace) -> AnimConfig:
    if args.config is not None:
        if not args.config.exists():
            raise FileNotFoundError(f"Missing config at: {args.config}")
        cfg = load_config(args.config)
    else:
        cfg = DEFAULT_CONFIG

    overrides = {}
    if args.frames is not None:
        overrides["total_frames"] = args.frames
    if args.workers is not None:
        overrides["workers"] = args.workers
    if args.audio is not None:
        overrides["audio_path"] = args.audio
    if args.strip:
        overrides["strip_enabled"] = True
    if args.output_dir is not None:
        overrides["output_dir"] = args.output_dir
    if getattr(args, "blender", None) is not None:
        overrides["blender_path"] = args.blender
    return cfg.with_overrides(**overrides).validate()


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        cfg = _resolve_config(args)
    except (ConfigError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    logger = setup_logger(cfg.log_path)

    try:
        if args.command == "generate":
            res = generate(cfg, strict_audio=not args.lenient_audio, logger=logger)
            print(res.script_path)
            return 0

        if args.command == "render":
            if cfg.blender_path is None:
                logger.error("No blender_path configured; run manually: blender -b -P <script> -a")
                return 2
            res = generate(cfg, strict_audio=not args.lenient_audio, logger=logger)
            rr = run_blender_render(cfg.blender_path, res.script_path, logger=logger)
            if not rr.ok:
                logger.error("Blender exited with %d", rr.returncode)
                return 1
            logger.info("Rendering complete: %s", cfg.render_output)
            return 0

        if args.command == "preview":
            from .viewer.contact_sheet import cycle_frames, render_contact_sheet

            out = args.out or (cfg.output_dir / "contact_sheet.png")
            render_contact_sheet(build_rig(), cycle_frames(cfg, samples=args.samples), out, cfg, logger=logger)
            print(out)
            return 0

        if args.command == "view":
            from .viewer.window import run_viewer

            run_viewer(build_rig(), cfg)
            return 0

    except (AnimationError, ConfigError, RenderError) as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1

    return 2


if __name__ == "__main__":
    sys.exit(main())
