"""Tempo detector — short-time onset autocorrelation with octave folding.

Pipeline (all pure numpy):

    energy envelope (20 ms window, 10 ms hop)
      → log-compressed, half-wave-rectified first difference (onset strength)
      → normalised autocorrelation over the 50–190 BPM lag range
      → local-maximum peak picking
      → raw / doubled / halved scoring of the strongest peaks
      → sub-harmonic check for slow winners

Autocorrelation cannot tell a tempo from its double or half, so each peak is
tried at all three octaves and scored with a prior toward 80–160 BPM.

Usage::

    from sampleprism.pcm import decode
    from sampleprism.tempo import detect_bpm

    bpm = detect_bpm(decode("groove.wav", max_seconds=30.0))   # e.g. 124 or None
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import NamedTuple

import numpy as np

from sampleprism.constants import ANALYSIS_WINDOW_SECONDS, TEMPO, TempoSettings
from sampleprism.pcm import PcmBuffer, decode
from sampleprism.windowing import round_half_up

logger = logging.getLogger(__name__)


class TempoCandidate(NamedTuple):
    """An autocorrelation peak: lag in onset frames and its correlation."""

    lag: int
    correlation: float


class OctaveChoice(NamedTuple):
    """Winning BPM of the octave search and the score that won it."""

    bpm: int
    score: float


# ── Onset curve ───────────────────────────────────────────────────────────────


def frame_sizes(sample_rate: int, settings: TempoSettings = TEMPO) -> tuple[int, int]:
    """(window, hop) in samples for the energy envelope."""
    window = int(sample_rate * settings.window_ms / 1000.0)
    hop = int(sample_rate * settings.hop_ms / 1000.0)
    return window, hop


def energy_envelope(samples: np.ndarray, window: int, hop: int) -> np.ndarray:
    """Mean squared amplitude of each full ``window``-sample frame, ``hop`` apart."""
    samples = np.asarray(samples, dtype=np.float64)
    if window <= 0 or hop <= 0 or samples.shape[0] < window:
        return np.zeros(0, dtype=np.float64)
    frames = np.lib.stride_tricks.sliding_window_view(samples * samples, window)
    return frames[::hop].mean(axis=1)


def onset_strength(energy: np.ndarray, log_floor: float = TEMPO.log_floor) -> np.ndarray:
    """Positive-only frame-to-frame increase of log energy; frame 0 is 0."""
    if energy.shape[0] == 0:
        return np.zeros(0, dtype=np.float64)
    log_energy = np.log(energy + log_floor)
    rising = np.maximum(np.diff(log_energy), 0.0)
    return np.concatenate(([0.0], rising))


# ── Autocorrelation ───────────────────────────────────────────────────────────


def bpm_to_lag(bpm: float, frames_per_sec: float) -> int:
    return round_half_up(frames_per_sec * 60.0 / bpm)


def lag_bounds(
    num_frames: int, frames_per_sec: float, settings: TempoSettings = TEMPO
) -> tuple[int, int] | None:
    """Inclusive (min_lag, max_lag) search range, or None if degenerate.

    The long end is clamped to half the onset curve so every lag still has
    at least half the frames overlapping.
    """
    min_lag = max(1, bpm_to_lag(settings.search_max_bpm, frames_per_sec))
    max_lag = bpm_to_lag(settings.search_min_bpm, frames_per_sec)
    max_lag = min(max_lag, num_frames // 2)
    if min_lag >= max_lag or max_lag >= num_frames:
        return None
    return min_lag, max_lag


def autocorrelate(onset: np.ndarray, min_lag: int, max_lag: int) -> np.ndarray:
    """Overlap-normalised autocorrelation for lags ``min_lag..max_lag``.

    Returns an array indexed by lag (length ``max_lag + 1``); entries below
    ``min_lag`` are 0.
    """
    n = onset.shape[0]
    corr = np.zeros(max_lag + 1, dtype=np.float64)
    for lag in range(min_lag, max_lag + 1):
        overlap = n - lag
        corr[lag] = float(np.dot(onset[:overlap], onset[lag:])) / overlap
    return corr


def pick_peaks(
    corr: np.ndarray,
    min_lag: int,
    max_lag: int,
    threshold: float = TEMPO.min_correlation,
) -> list[TempoCandidate]:
    """Local maxima above ``threshold``, strongest first.

    Falls back to the global maximum of the range when no local maximum
    qualifies.
    """
    peaks = [
        TempoCandidate(lag, float(corr[lag]))
        for lag in range(min_lag + 1, max_lag)
        if corr[lag] > corr[lag - 1]
        and corr[lag] > corr[lag + 1]
        and corr[lag] > threshold
    ]

    if not peaks:
        best_lag = min_lag + int(np.argmax(corr[min_lag : max_lag + 1]))
        if corr[best_lag] > threshold:
            peaks.append(TempoCandidate(best_lag, float(corr[best_lag])))

    return sorted(peaks, key=lambda p: p.correlation, reverse=True)


# ── Octave resolution ─────────────────────────────────────────────────────────


def _range_weight(bpm: int, settings: TempoSettings) -> float:
    if settings.preferred_min_bpm <= bpm <= settings.preferred_max_bpm:
        return settings.preferred_weight
    return 1.0


def resolve_octave(
    candidates: list[TempoCandidate],
    frames_per_sec: float,
    settings: TempoSettings = TEMPO,
) -> OctaveChoice | None:
    """Score each candidate at x1, x2 and x0.5 and keep the best variant.

    score = correlation * range_weight * octave_penalty, where the range
    weight favours the preferred tempo band and the penalty applies to the
    doubled/halved variants.
    """
    best: OctaveChoice | None = None
    for lag, corr in candidates[: settings.top_candidates]:
        bpm_raw = 60.0 * frames_per_sec / lag
        for variant in (bpm_raw, bpm_raw * 2.0, bpm_raw / 2.0):
            bpm = round_half_up(variant)
            if not settings.accept_min_bpm <= bpm <= settings.accept_max_bpm:
                continue
            penalty = 1.0 if abs(variant - bpm_raw) < 1.0 else settings.octave_penalty
            score = corr * _range_weight(bpm, settings) * penalty
            if best is None or score > best.score:
                best = OctaveChoice(bpm, score)
    return best


def _prefer_double(
    choice: OctaveChoice,
    corr: np.ndarray,
    min_lag: int,
    max_lag: int,
    frames_per_sec: float,
    settings: TempoSettings,
) -> OctaveChoice:
    """Swap a slow winner for its double when the double's lag is strong too."""
    if not 0 < choice.bpm <= settings.subharmonic_max_bpm:
        return choice
    double_bpm = choice.bpm * 2
    if double_bpm > settings.accept_max_bpm:
        return choice
    double_lag = bpm_to_lag(double_bpm, frames_per_sec)
    if min_lag <= double_lag <= max_lag:
        if corr[double_lag] >= choice.score * settings.subharmonic_ratio:
            logger.debug("sub-harmonic %d BPM doubled to %d", choice.bpm, double_bpm)
            return OctaveChoice(double_bpm, choice.score)
    return choice


# ── detect_bpm() entry point ──────────────────────────────────────────────────


def detect_bpm(pcm: PcmBuffer, settings: TempoSettings = TEMPO) -> int | None:
    """Estimate tempo as an integer BPM in [60, 190].

    Only the first 30 seconds are analysed.  Returns None when the clip is
    too short or no periodicity is confident enough; that is an expected
    outcome for one-shots and ambient material, not an error.
    """
    pcm = pcm.head(ANALYSIS_WINDOW_SECONDS)
    sample_rate = pcm.sample_rate
    if pcm.num_samples < sample_rate * settings.min_seconds:
        logger.debug("tempo: %.3fs is too short", pcm.duration_secs)
        return None

    window, hop = frame_sizes(sample_rate, settings)
    if window == 0 or hop == 0:
        return None

    energy = energy_envelope(pcm.samples, window, hop)
    if energy.shape[0] < settings.min_frames:
        logger.debug("tempo: only %d energy frames", energy.shape[0])
        return None

    onset = onset_strength(energy, settings.log_floor)
    onset_max = float(onset.max())
    if onset_max <= 0.0:
        logger.debug("tempo: flat onset curve")
        return None
    onset = onset / onset_max

    frames_per_sec = sample_rate / hop
    bounds = lag_bounds(onset.shape[0], frames_per_sec, settings)
    if bounds is None:
        logger.debug("tempo: degenerate lag range for %d frames", onset.shape[0])
        return None
    min_lag, max_lag = bounds

    corr = autocorrelate(onset, min_lag, max_lag)
    peaks = pick_peaks(corr, min_lag, max_lag, settings.min_correlation)
    if not peaks:
        logger.debug("tempo: no autocorrelation peak above threshold")
        return None

    choice = resolve_octave(peaks, frames_per_sec, settings)
    if choice is None:
        return None
    choice = _prefer_double(choice, corr, min_lag, max_lag, frames_per_sec, settings)

    if (
        settings.accept_min_bpm <= choice.bpm <= settings.accept_max_bpm
        and choice.score > settings.min_correlation
    ):
        logger.debug("tempo: %d BPM (score %.5f)", choice.bpm, choice.score)
        return choice.bpm
    return None


def detect_bpm_from_file(filepath: str | Path) -> int | None:
    """Decode the first 30 seconds of a file and run :func:`detect_bpm`.

    Raises
    ------
    FileNotFoundError:
        If the file does not exist.
    DecodeError:
        If the file cannot be read.
    """
    return detect_bpm(decode(filepath, max_seconds=ANALYSIS_WINDOW_SECONDS))
