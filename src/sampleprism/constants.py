"""Fixed analysis constants — band table, reference colours, thresholds.

Everything that shapes the numeric output of the analysers lives here so a
retune is a one-place change.  Cached results carry ``ANALYSIS_VERSION``;
bump it whenever any value in this module changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

# Bump on any change below; stored next to cached WaveformData.
ANALYSIS_VERSION = 1

RGB = tuple[float, float, float]


class Band(NamedTuple):
    """One frequency band: name, upper edge in Hz (None = Nyquist), colour."""

    name: str
    upper_hz: float | None
    color: RGB


# ── Spectral colour table ─────────────────────────────────────────────────────
#
#   Sub      ~20–150 Hz    kick body, sub bass
#   LowMid   150–600 Hz    kick attack, bass harmonics
#   Mid      600–2500 Hz   vocals, snare, clap
#   HighMid  2500–6000 Hz  presence, attack transients
#   High     6000 Hz+      hats, cymbals, air

BANDS: tuple[Band, ...] = (
    Band("sub", 150.0, (0.95, 0.10, 0.10)),
    Band("low_mid", 600.0, (0.95, 0.75, 0.10)),
    Band("mid", 2500.0, (0.15, 0.90, 0.20)),
    Band("high_mid", 6000.0, (0.10, 0.70, 0.90)),
    Band("high", None, (0.20, 0.30, 0.95)),
)

NEUTRAL_COLOR: RGB = (0.4, 0.4, 0.6)
TARGET_BRIGHTNESS = 0.85
# Floor for the brightest channel before rescaling.
MIN_CHANNEL = 0.001

MAX_FFT_SIZE = 2048
MIN_FFT_SIZE = 64

DEFAULT_NUM_PEAKS = 128

# Tempo detection and one-shot classification look at this much audio at most.
ANALYSIS_WINDOW_SECONDS = 30.0


# ── Detector settings ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TempoSettings:
    """Thresholds for the onset-autocorrelation tempo detector."""

    min_seconds: float = 2.0
    window_ms: float = 20.0
    hop_ms: float = 10.0
    min_frames: int = 20
    log_floor: float = 1e-10

    # Autocorrelation search range (wider than the accepted range so that
    # octave folding can reach slow sub-harmonics).
    search_min_bpm: float = 50.0
    search_max_bpm: float = 190.0

    accept_min_bpm: int = 60
    accept_max_bpm: int = 190

    preferred_min_bpm: int = 80
    preferred_max_bpm: int = 160
    preferred_weight: float = 1.3

    octave_penalty: float = 0.8
    min_correlation: float = 0.0005
    top_candidates: int = 5

    subharmonic_max_bpm: int = 95
    subharmonic_ratio: float = 0.7


@dataclass(frozen=True)
class OneShotSettings:
    """Thresholds for the trailing-silence one-shot heuristic."""

    chunk_ms: float = 100.0
    min_chunks: int = 5
    # Tail = chunks from this fraction of the clip onward (the last 30%).
    tail_start: float = 0.7
    silence_threshold: float = 0.03
    silent_ratio: float = 0.6
    decay_ratio: float = 0.1


TEMPO = TempoSettings()
ONESHOT = OneShotSettings()
