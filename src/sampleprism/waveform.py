"""Waveform envelope — normalised peak buckets plus per-bucket colours.

Usage::

    from sampleprism.waveform import waveform_from_file

    wf = waveform_from_file("kicks/kick_01.wav", num_peaks=128)
    wf.peaks    # 128 floats in [0, 1]
    wf.colors   # 128 (r, g, b) triples in [0, 1]
    cache_row = wf.to_json()
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np

from sampleprism.colors import compute_frequency_colors
from sampleprism.constants import ANALYSIS_VERSION, DEFAULT_NUM_PEAKS
from sampleprism.pcm import PcmBuffer, decode, probe_duration

logger = logging.getLogger(__name__)


class StaleCacheError(ValueError):
    """Serialised waveform was produced under a different ANALYSIS_VERSION."""


# ── Peak extraction ───────────────────────────────────────────────────────────


def extract_peaks(samples: np.ndarray, num_peaks: int) -> np.ndarray:
    """Downsample PCM to ``num_peaks`` absolute-peak buckets in [0, 1].

    - Empty input gives all zeros.
    - Fewer samples than buckets: each |sample| in order, zero-padded.
    - Otherwise ``len // num_peaks``-sized chunks; each bucket holds the
      chunk's largest |sample|.  The last chunk also absorbs the
      ``len % num_peaks`` remainder.

    The result is divided by its maximum unless that maximum is 0.
    """
    if num_peaks < 0:
        raise ValueError(f"num_peaks must be >= 0, got {num_peaks}")
    samples = np.abs(np.asarray(samples, dtype=np.float32))
    total = samples.shape[0]

    if total == 0 or num_peaks == 0:
        return np.zeros(num_peaks, dtype=np.float32)

    if total < num_peaks:
        peaks = np.zeros(num_peaks, dtype=np.float32)
        peaks[:total] = samples
    else:
        chunk_size = total // num_peaks
        starts = np.arange(num_peaks) * chunk_size
        # reduceat runs the last segment through to the end of the array.
        peaks = np.maximum.reduceat(samples, starts)
        peaks = peaks.astype(np.float32)

    max_peak = float(peaks.max())
    if max_peak > 0.0:
        peaks = peaks / max_peak
    return peaks.astype(np.float32)


# ── WaveformData ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class WaveformData:
    """Display-ready envelope of one audio file.

    Attributes
    ----------
    peaks:          N normalised peak magnitudes in [0, 1].
    colors:         N (r, g, b) triples, each channel in [0, 1].
    duration_secs:  File duration in seconds (>= 0).
    """

    peaks: tuple[float, ...]
    colors: tuple[tuple[float, float, float], ...]
    duration_secs: float

    def __post_init__(self) -> None:
        if len(self.peaks) != len(self.colors):
            raise ValueError(
                f"peaks and colors must have equal length, got "
                f"{len(self.peaks)} and {len(self.colors)}"
            )
        if self.duration_secs < 0:
            raise ValueError(f"duration_secs must be >= 0, got {self.duration_secs}")

    @property
    def num_peaks(self) -> int:
        return len(self.peaks)

    # ── serialisation ─────────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict at 32-bit float precision, tagged with the version."""
        return {
            "version": ANALYSIS_VERSION,
            "peaks": np.asarray(self.peaks, dtype=np.float32).tolist(),
            "colors": np.asarray(self.colors, dtype=np.float32)
            .reshape(-1, 3)
            .tolist(),
            "duration_secs": float(self.duration_secs),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WaveformData:
        """Rebuild from ``to_dict`` output.

        Raises
        ------
        StaleCacheError:
            If the entry was written by another analysis version and must
            be recomputed.
        """
        version = data.get("version")
        if version != ANALYSIS_VERSION:
            raise StaleCacheError(
                f"cached waveform has version {version!r}, "
                f"current is {ANALYSIS_VERSION}"
            )
        return cls(
            peaks=tuple(float(p) for p in data["peaks"]),
            colors=tuple(
                (float(r), float(g), float(b)) for r, g, b in data["colors"]
            ),
            duration_secs=float(data["duration_secs"]),
        )

    @classmethod
    def from_json(cls, text: str) -> WaveformData:
        return cls.from_dict(json.loads(text))

    def __repr__(self) -> str:
        return f"WaveformData({self.num_peaks} peaks, {self.duration_secs:.3f}s)"


# ── Entry points ──────────────────────────────────────────────────────────────


def compute_waveform(
    pcm: PcmBuffer,
    num_peaks: int = DEFAULT_NUM_PEAKS,
    duration_secs: float | None = None,
) -> WaveformData:
    """Peaks and colours for a decoded buffer.

    Parameters
    ----------
    pcm:
        Full decoded file.
    num_peaks:
        Bucket count N (0 gives empty sequences).
    duration_secs:
        Duration to report.  Defaults to the buffer length.
    """
    peaks = extract_peaks(pcm.samples, num_peaks)
    colors = compute_frequency_colors(pcm.samples, num_peaks, pcm.sample_rate)
    return WaveformData(
        peaks=tuple(float(p) for p in peaks),
        colors=tuple((float(r), float(g), float(b)) for r, g, b in colors),
        duration_secs=pcm.duration_secs if duration_secs is None else duration_secs,
    )


def waveform_from_file(
    filepath: str | Path, num_peaks: int = DEFAULT_NUM_PEAKS
) -> WaveformData:
    """Decode a whole file and compute its waveform.

    Duration comes from the container when it reports one, otherwise from
    the decoded sample count.

    Raises
    ------
    FileNotFoundError:
        If the file does not exist.
    DecodeError:
        If the file cannot be read.
    """
    pcm = decode(filepath)
    duration = probe_duration(filepath)
    if duration is None:
        duration = pcm.duration_secs
    logger.debug("waveform %s: %d peaks over %.3fs", filepath, num_peaks, duration)
    return compute_waveform(pcm, num_peaks, duration_secs=duration)
