"""One-shot classifier — does the sound decay into a silent tail?

Loops keep their energy up to the last bar; one-shots (hits, stabs, long
reverb tails) fall away.  The heuristic works on 100 ms RMS chunks:

    - the last 30% of chunks are mostly (> 60%) below 3% of peak RMS, or
    - the back half peaks below 10% of the front half's peak.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from sampleprism.constants import ANALYSIS_WINDOW_SECONDS, ONESHOT, OneShotSettings
from sampleprism.pcm import PcmBuffer, decode

logger = logging.getLogger(__name__)


def rms_chunks(
    samples: np.ndarray, sample_rate: int, chunk_ms: float = ONESHOT.chunk_ms
) -> np.ndarray:
    """RMS of each complete ``chunk_ms`` chunk; a trailing partial chunk is dropped."""
    chunk_size = int(sample_rate * chunk_ms / 1000.0)
    if chunk_size <= 0:
        return np.zeros(0, dtype=np.float64)
    total_chunks = len(samples) // chunk_size
    chunks = np.asarray(samples[: total_chunks * chunk_size], dtype=np.float64)
    chunks = chunks.reshape(total_chunks, chunk_size)
    return np.sqrt(np.mean(chunks * chunks, axis=1))


def has_trailing_silence(pcm: PcmBuffer, settings: OneShotSettings = ONESHOT) -> bool:
    """True if the first 30 s of *pcm* decay like a one-shot.

    Too-short or fully silent input is never a one-shot.
    """
    pcm = pcm.head(ANALYSIS_WINDOW_SECONDS)
    energies = rms_chunks(pcm.samples, pcm.sample_rate, settings.chunk_ms)
    total_chunks = energies.shape[0]
    if total_chunks < settings.min_chunks:
        return False

    peak_energy = float(energies.max())
    if peak_energy <= 0.0:
        return False

    half = total_chunks // 2
    front_peak = float(energies[:half].max())
    back_peak = float(energies[half:].max())
    if front_peak <= 0.0:
        return False

    tail_start = int(total_chunks * settings.tail_start)
    tail = energies[tail_start:]
    silent = int(np.count_nonzero(tail < peak_energy * settings.silence_threshold))
    if silent / tail.shape[0] > settings.silent_ratio:
        return True

    return back_peak < front_peak * settings.decay_ratio


def has_trailing_silence_file(filepath: str | Path) -> bool:
    """File variant of :func:`has_trailing_silence`; unreadable files are not one-shots."""
    try:
        pcm = decode(filepath, max_seconds=ANALYSIS_WINDOW_SECONDS)
    except (FileNotFoundError, ValueError) as exc:
        logger.warning("trailing-silence check skipped for %s: %s", filepath, exc)
        return False
    return has_trailing_silence(pcm)
