"""
Shared fixtures: synthetic signals and temporary audio files.

No audio fixtures live on disk — every test builds its signal with numpy and,
where a file is needed, writes it to ``tmp_path`` with soundfile.
"""

from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

SR = 44100


# ---------------------------------------------------------------------------
# Signal builders
# ---------------------------------------------------------------------------


def click_track(bpm: float, seconds: float, sr: int = SR, amplitude: float = 0.9) -> np.ndarray:
    """Single-sample clicks on every beat, silence in between."""
    n = int(seconds * sr)
    y = np.zeros(n, dtype=np.float32)
    period = 60.0 / bpm * sr
    k = 0
    while round(k * period) < n:
        y[int(round(k * period))] = amplitude
        k += 1
    return y


def sine(freq: float, seconds: float, sr: int = SR, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(int(seconds * sr)) / sr
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


def write_wav(path: Path, data: np.ndarray, sr: int = SR) -> Path:
    """Write float PCM (mono (N,) or multichannel (N, C)) to ``path``."""
    sf.write(str(path), data, sr, subtype="FLOAT")
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(1234)


@pytest.fixture
def wav_factory(tmp_path):
    """Return a writer: wav_factory(name, data, sr=SR) -> Path."""

    def _write(name: str, data: np.ndarray, sr: int = SR) -> Path:
        return write_wav(tmp_path / name, data, sr)

    return _write
