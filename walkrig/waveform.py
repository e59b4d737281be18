from __future__ import annotations

import wave
from pathlib import Path

from .config import AnimConfig
from .errors import ConfigError
from .types import WaveformInfo


def probe_waveform(wav_path: Path) -> WaveformInfo:
    try:
        with wave.open(str(wav_path), "rb") as wf:
            return WaveformInfo(path=wav_path, sample_rate=wf.getframerate(), n_samples=wf.getnframes())
    except (OSError, EOFError, wave.Error) as e:
        raise ConfigError(f"Cannot read waveform {wav_path}: {e}") from e


def check_waveform(info: WaveformInfo, config: AnimConfig, *, strict: bool = True, logger=None) -> bool:
    """
    True when the audio lasts as long as the timeline, give or take one frame.
    A mismatch raises ConfigError, or is logged and returned as False when
    strict is off.
    """
    expected_s = config.duration_s
    tolerance_s = 1.0 / float(config.frame_rate)
    if abs(info.duration_s - expected_s) <= tolerance_s:
        return True

    msg = (
        f"Waveform {info.path} lasts {info.duration_s:.3f}s but the timeline needs "
        f"{expected_s:.3f}s ({config.total_frames} frames at {config.frame_rate} fps)"
    )
    if strict:
        raise ConfigError(msg)
    if logger:
        logger.warning(msg)
    return False
