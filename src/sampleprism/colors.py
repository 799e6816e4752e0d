"""Spectral band colouriser — Rekordbox-style RGB per waveform bar.

Each waveform bucket gets one Hann-windowed FFT frame taken from its centre.
Spectral energy is summed into five bands (see ``constants.BANDS``), divided
by the band's bin count so wide bands are not automatically louder, and the
resulting density shares blend the bands' reference colours:

    bass-heavy bars   → red / yellow
    mid-heavy bars    → green
    bright bars       → cyan / blue

The blend is rescaled so its strongest channel sits at 0.85.
"""

from __future__ import annotations

import numpy as np

from sampleprism.constants import (
    BANDS,
    MIN_CHANNEL,
    NEUTRAL_COLOR,
    TARGET_BRIGHTNESS,
)
from sampleprism.windowing import (
    band_bin_counts,
    band_edges,
    centered_frame,
    fft_size_for_chunk,
    hann_window,
)

_REFERENCE_COLORS = np.array([band.color for band in BANDS], dtype=np.float64)


def neutral_colors(num_peaks: int) -> np.ndarray:
    """(num_peaks, 3) array filled with the neutral default tone."""
    return np.tile(np.asarray(NEUTRAL_COLOR, dtype=np.float32), (num_peaks, 1))


def band_densities(
    power: np.ndarray, edges: list[int], counts: np.ndarray
) -> np.ndarray:
    """Per-band energy density from one power spectrum.

    Parameters
    ----------
    power:
        Squared magnitudes for bins 0..Nyquist (bin 0 is ignored).
    edges:
        Exclusive upper bin of each band, from ``band_edges``.
    counts:
        Bins per band, from ``band_bin_counts``.

    Returns
    -------
    Array of len(BANDS) energy densities.
    """
    nyquist = edges[-1]
    bins = np.arange(1, nyquist)
    band_of_bin = np.searchsorted(np.asarray(edges[:-1]), bins, side="right")
    energy = np.bincount(band_of_bin, weights=power[1:nyquist], minlength=len(BANDS))
    return energy / counts


def blend_color(densities: np.ndarray) -> tuple[float, float, float]:
    """Blend the reference colours by density share and normalise brightness."""
    total = float(densities.sum())
    if total <= 0.0:
        return NEUTRAL_COLOR

    shares = densities / total
    rgb = shares @ _REFERENCE_COLORS
    scale = TARGET_BRIGHTNESS / max(float(rgb.max()), MIN_CHANNEL)
    r, g, b = np.minimum(rgb * scale, 1.0)
    return float(r), float(g), float(b)


def compute_frequency_colors(
    samples: np.ndarray, num_peaks: int, sample_rate: int
) -> np.ndarray:
    """One RGB triple per waveform bucket.

    The last bucket also covers the ``len % num_peaks`` remainder samples.

    Parameters
    ----------
    samples:
        Mono PCM of the whole file.
    num_peaks:
        Number of buckets; must match the peak count.
    sample_rate:
        Sample rate of ``samples`` in Hz.

    Returns
    -------
    float32 array of shape (num_peaks, 3), every channel in [0, 1].
    """
    if num_peaks < 0:
        raise ValueError(f"num_peaks must be >= 0, got {num_peaks}")
    samples = np.asarray(samples, dtype=np.float32)
    if samples.size == 0 or num_peaks == 0:
        return neutral_colors(num_peaks)
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be > 0, got {sample_rate}")

    total = samples.shape[0]
    chunk_size = max(1, total // num_peaks)
    fft_size = fft_size_for_chunk(chunk_size)
    window = hann_window(fft_size)
    edges = band_edges(fft_size, sample_rate)
    counts = band_bin_counts(edges)

    colors = np.empty((num_peaks, 3), dtype=np.float32)
    for i in range(num_peaks):
        start = min(i * chunk_size, total)
        if i == num_peaks - 1:
            length = total - start
        else:
            length = min(start + chunk_size, total) - start
        frame = centered_frame(samples, start, length, fft_size) * window
        power = np.abs(np.fft.rfft(frame)) ** 2
        colors[i] = blend_color(band_densities(power, edges, counts))
    return colors
