"""Shared framing helpers: FFT sizing, Hann window, band edges."""

from __future__ import annotations

import numpy as np
from scipy import signal

from sampleprism.constants import BANDS, MAX_FFT_SIZE, MIN_FFT_SIZE


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    if n <= 1:
        return 1
    return 1 << (int(n) - 1).bit_length()


def fft_size_for_chunk(chunk_size: int) -> int:
    """FFT length for a chunk: next power of two, kept within [64, 2048]."""
    return min(MAX_FFT_SIZE, max(MIN_FFT_SIZE, next_power_of_two(chunk_size)))


def hann_window(size: int) -> np.ndarray:
    """Periodic raised-cosine window, ``0.5 * (1 - cos(2*pi*i / size))``."""
    return signal.get_window("hann", size, fftbins=True)


def centered_frame(
    samples: np.ndarray, start: int, length: int, fft_size: int
) -> np.ndarray:
    """Cut an ``fft_size`` frame out of the chunk ``samples[start:start+length]``.

    A chunk longer than the frame contributes its centred sub-range.  A
    shorter chunk is placed in the middle of a zero-filled frame.
    """
    frame = np.zeros(fft_size, dtype=np.float64)
    copy_len = min(length, fft_size)
    src_offset = (length - fft_size) // 2 if length > fft_size else 0
    buf_offset = (fft_size - copy_len) // 2 if copy_len < fft_size else 0

    src = samples[start + src_offset : start + src_offset + copy_len]
    frame[buf_offset : buf_offset + len(src)] = src
    return frame


def round_half_up(x: float) -> int:
    """Round a non-negative value to the nearest int, halves going up.

    ``round()`` rounds halves to even, which would move band edges and lags.
    """
    return int(np.floor(x + 0.5))


def freq_to_bin(freq_hz: float, fft_size: int, sample_rate: int) -> int:
    """Nearest FFT bin for a frequency."""
    return round_half_up(freq_hz * fft_size / sample_rate)


def band_edges(fft_size: int, sample_rate: int) -> list[int]:
    """Exclusive upper bin index of each band in ``BANDS``.

    Every edge is clamped to sit at least one bin above the previous one and
    never past Nyquist; the last band always ends at Nyquist.
    """
    nyquist = fft_size // 2
    edges: list[int] = []
    floor = 1
    for band in BANDS:
        if band.upper_hz is None:
            edges.append(nyquist)
            continue
        edge = freq_to_bin(band.upper_hz, fft_size, sample_rate)
        edge = min(max(edge, floor), nyquist)
        edges.append(edge)
        floor = edge + 1
    return edges


def band_bin_counts(edges: list[int]) -> np.ndarray:
    """Number of bins in each band (bin 0 excluded), at least 1 per band."""
    counts = []
    lower = 1
    for edge in edges:
        counts.append(max(edge - lower, 1))
        lower = edge
    return np.asarray(counts, dtype=np.float64)
