"""sampleprism.inspect — analyse one audio file for a sample browser.

Usage::

    from sampleprism.inspect import inspect

    info = inspect("packs/house/Groove_124bpm_Amin.wav")
    print(info.summary())

    # Key fields
    # ──────────────────────────────────────────────────────────────────────
    # info.waveform        WaveformData: 128 peaks + 128 RGB colours
    # info.bpm             124 — from the filename here, otherwise detected
    #                      from the audio (None if not confident)
    # info.bpm_source      "filename" | "audio" | None
    # info.sample_type     "loop" or "oneshot"
    # ──────────────────────────────────────────────────────────────────────

Batch analysis fans out one inspect() per file on a thread pool::

    results = analyze_many(paths, max_workers=8)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import numpy as np

from sampleprism.constants import ANALYSIS_VERSION, DEFAULT_NUM_PEAKS
from sampleprism.naming import parse_bpm_from_filename, parse_key_from_filename
from sampleprism.oneshot import has_trailing_silence
from sampleprism.pcm import PcmBuffer, decode, probe_duration
from sampleprism.sample_type import (
    MAX_ANALYSED_MS,
    SHORT_ONESHOT_MS,
    classify_sample_type,
    sample_type_from_filename,
)
from sampleprism.tempo import detect_bpm
from sampleprism.waveform import WaveformData, compute_waveform

logger = logging.getLogger(__name__)


# ── helpers ───────────────────────────────────────────────────────────────────


def _db(linear: float) -> float:
    """Linear amplitude → dBFS. Silence floors at -200 dBFS."""
    return float(20 * np.log10(max(linear, 1e-10)))


def _levels(pcm: PcmBuffer) -> tuple[float, float]:
    """(rms_db, peak_db) of the whole buffer."""
    if pcm.is_empty:
        return _db(0.0), _db(0.0)
    samples = pcm.samples.astype(np.float64)
    rms = float(np.sqrt(np.mean(samples**2)))
    peak = float(np.max(np.abs(samples)))
    return _db(rms), _db(peak)


# ── SampleInfo dataclass ───────────────────────────────────────────────────────


@dataclass
class SampleInfo:
    """All analysis results for a single audio file.

    Attributes
    ----------
    filepath:       Path to the analysed file.
    duration_secs:  Duration in seconds (container value when available).
    sample_rate:    Native sample rate of the file.
    rms_db:         RMS level of the mono mixdown in dBFS.
    peak_db:        Peak level of the mono mixdown in dBFS.
    waveform:       Peaks and spectral colours for display.
    bpm:            Tempo in BPM, or None if unknown.
    bpm_source:     "filename" when parsed from the name, "audio" when
                    detected, None when neither produced a value.
    key:            Key parsed from the filename, e.g. "Amin", or None.
    trailing_silence: One-shot classifier result, or None if the sample
                    type was settled without it.
    sample_type:    "loop" or "oneshot".
    """

    filepath: str
    duration_secs: float
    sample_rate: int
    rms_db: float
    peak_db: float
    waveform: WaveformData
    bpm: Optional[int]
    bpm_source: Optional[str]
    key: Optional[str]
    trailing_silence: Optional[bool]
    sample_type: str

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict for caching; carries ``ANALYSIS_VERSION``."""
        return {
            "version": ANALYSIS_VERSION,
            "filepath": self.filepath,
            "duration_secs": self.duration_secs,
            "sample_rate": self.sample_rate,
            "rms_db": self.rms_db,
            "peak_db": self.peak_db,
            "waveform": self.waveform.to_dict(),
            "bpm": self.bpm,
            "bpm_source": self.bpm_source,
            "key": self.key,
            "trailing_silence": self.trailing_silence,
            "sample_type": self.sample_type,
        }

    # ── display ───────────────────────────────────────────────────────────────

    def summary(self) -> str:
        """Human-readable summary of the analysis."""
        filename = Path(self.filepath).name
        bar = "─" * max(len(filename) + 2, 48)

        lines: list[str] = [
            f"\n{filename}  ({self.duration_secs:.3f}s, {self.sample_rate} Hz)",
            bar,
            f"Levels:    RMS {self.rms_db:+.1f} dBFS   Peak {self.peak_db:+.1f} dBFS",
        ]

        if self.bpm is not None:
            lines.append(f"Tempo:     {self.bpm} BPM  (from {self.bpm_source})")
        else:
            lines.append("Tempo:     undetected (short or arrhythmic sample)")

        if self.key is not None:
            lines.append(f"Key:       {self.key}  (from filename)")

        lines.append(f"Type:      {self.sample_type}")

        # Dominant colour of the loudest bar gives a quick read of its band
        peaks = self.waveform.peaks
        if peaks and max(peaks) > 0:
            loudest = int(np.argmax(peaks))
            r, g, b = self.waveform.colors[loudest]
            lines.append(
                f"Colour:    loudest bar #{loudest}  rgb({r:.2f}, {g:.2f}, {b:.2f})"
            )

        return "\n".join(lines) + "\n"

    def __repr__(self) -> str:
        return (
            f"SampleInfo('{Path(self.filepath).name}', "
            f"{self.duration_secs:.3f}s, bpm={self.bpm}, key={self.key!r}, "
            f"type={self.sample_type})"
        )


# ── inspect() entry point ─────────────────────────────────────────────────────


def inspect(
    filepath: str | Path,
    num_peaks: int = DEFAULT_NUM_PEAKS,
    detect_tempo: bool = True,
) -> SampleInfo:
    """Analyse an audio file: waveform, colours, tempo, key and sample type.

    The file is decoded once; the tempo detector and the one-shot classifier
    look at its first 30 seconds, the waveform at all of it.

    Parameters
    ----------
    filepath:
        Path to any audio file readable by soundfile.
    num_peaks:
        Number of waveform buckets.
    detect_tempo:
        If False, only a filename BPM is reported.

    Raises
    ------
    FileNotFoundError:
        If the file does not exist.
    DecodeError:
        If the file cannot be read.
    """
    path = Path(filepath)
    filename = path.name

    # ── Decode ────────────────────────────────────────────────────────────────
    pcm = decode(path)
    duration = probe_duration(path)
    if duration is None:
        duration = pcm.duration_secs

    rms_db, peak_db = _levels(pcm)

    # ── Waveform + colours ────────────────────────────────────────────────────
    waveform = compute_waveform(pcm, num_peaks, duration_secs=duration)

    # ── Tempo: filename first, audio second ───────────────────────────────────
    bpm = parse_bpm_from_filename(filename)
    bpm_source = "filename" if bpm is not None else None
    if bpm is None and detect_tempo:
        bpm = detect_bpm(pcm)
        bpm_source = "audio" if bpm is not None else None

    # ── Sample type ───────────────────────────────────────────────────────────
    duration_ms = int(duration * 1000)
    trailing: bool | None = None
    if (
        sample_type_from_filename(filename) is None
        and SHORT_ONESHOT_MS <= duration_ms <= MAX_ANALYSED_MS
    ):
        trailing = has_trailing_silence(pcm)
    sample_type = classify_sample_type(
        filename, duration_ms, trailing_silence=trailing
    )

    return SampleInfo(
        filepath=str(path),
        duration_secs=round(duration, 6),
        sample_rate=pcm.sample_rate,
        rms_db=round(rms_db, 2),
        peak_db=round(peak_db, 2),
        waveform=waveform,
        bpm=bpm,
        bpm_source=bpm_source,
        key=parse_key_from_filename(filename),
        trailing_silence=trailing,
        sample_type=sample_type,
    )


def _inspect_or_none(filepath: str | Path, num_peaks: int) -> SampleInfo | None:
    try:
        return inspect(filepath, num_peaks=num_peaks)
    except (FileNotFoundError, ValueError) as exc:
        logger.warning("skipping %s: %s", filepath, exc)
        return None


def analyze_many(
    filepaths: Iterable[str | Path],
    num_peaks: int = DEFAULT_NUM_PEAKS,
    max_workers: int | None = None,
) -> list[SampleInfo | None]:
    """Inspect many files in parallel, one task per file.

    Results come back in input order.  A file that cannot be decoded yields
    None in its slot instead of aborting the batch.
    """
    paths = list(filepaths)
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(lambda p: _inspect_or_none(p, num_peaks), paths))
