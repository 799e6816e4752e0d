"""PCM source adapter — decode an audio file into a mono float32 buffer.

This is the only module that touches the filesystem.  Every analyser
downstream takes a :class:`PcmBuffer` (or a bare sample array plus rate) and
never a path.

Usage::

    from sampleprism.pcm import decode

    pcm = decode("loops/groove_124bpm.wav", max_seconds=30.0)
    print(pcm.sample_rate, pcm.duration_secs)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import soundfile as sf

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS: frozenset[str] = frozenset(
    {".wav", ".mp3", ".flac", ".ogg", ".aiff", ".aif"}
)


class DecodeError(ValueError):
    """The file exists but could not be decoded into PCM."""


# ── helpers ───────────────────────────────────────────────────────────────────


def to_mono(audio: np.ndarray) -> np.ndarray:
    """(channels, N) or (N,) → (N,) mono float32, averaging channels per frame."""
    audio = np.asarray(audio, dtype=np.float32)
    if audio.ndim == 1:
        return audio
    return audio.mean(axis=0).astype(np.float32)


def is_audio_file(path: str | Path) -> bool:
    """True if *path* has one of the recognised audio extensions."""
    return Path(path).suffix.lower() in AUDIO_EXTENSIONS


# ── PcmBuffer ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PcmBuffer:
    """Decoded mono audio: float32 samples in roughly [-1, 1] plus sample rate.

    The sample array is marked read-only so one buffer can be shared between
    the analysers (and threads) without copies.
    """

    samples: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be > 0, got {self.sample_rate}")
        samples = np.array(self.samples, dtype=np.float32).reshape(-1)
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    @property
    def num_samples(self) -> int:
        return int(self.samples.shape[0])

    @property
    def duration_secs(self) -> float:
        return self.num_samples / self.sample_rate

    @property
    def is_empty(self) -> bool:
        return self.num_samples == 0

    def head(self, seconds: float) -> PcmBuffer:
        """Return a buffer holding at most the first *seconds* of audio."""
        limit = int(seconds * self.sample_rate)
        if limit >= self.num_samples:
            return self
        return PcmBuffer(self.samples[:limit], self.sample_rate)

    def __repr__(self) -> str:
        return (
            f"PcmBuffer({self.num_samples} samples, {self.sample_rate} Hz, "
            f"{self.duration_secs:.3f}s)"
        )


# ── decode() entry point ──────────────────────────────────────────────────────


def decode(filepath: str | Path, max_seconds: float | None = None) -> PcmBuffer:
    """Decode an audio file to mono PCM.

    Parameters
    ----------
    filepath:
        Path to any file readable by soundfile (.wav, .flac, .ogg, .aiff,
        .mp3 with libsndfile >= 1.1).
    max_seconds:
        Decode at most this many seconds from the start.  None decodes the
        whole file.

    Returns
    -------
    PcmBuffer with channels averaged per frame.

    Raises
    ------
    FileNotFoundError:
        If the file does not exist.
    DecodeError:
        If the file cannot be read.
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Audio file not found: {filepath}")
    if max_seconds is not None and max_seconds <= 0:
        raise ValueError(f"max_seconds must be > 0 when specified, got {max_seconds}")

    try:
        with sf.SoundFile(str(path)) as f:
            sample_rate = f.samplerate
            frames = -1 if max_seconds is None else int(max_seconds * sample_rate)
            audio = f.read(frames=frames, dtype="float32", always_2d=True)
    except Exception as exc:
        raise DecodeError(f"Could not read '{filepath}': {exc}") from exc

    # audio is (num_samples, channels), sf convention
    mono = to_mono(audio.T)
    logger.debug(
        "decoded %s: %d channel(s), %d frames @ %d Hz",
        path.name,
        audio.shape[1],
        mono.shape[0],
        sample_rate,
    )
    return PcmBuffer(mono, sample_rate)


def probe_duration(filepath: str | Path) -> float | None:
    """Container-reported duration in seconds, or None if it cannot be read."""
    try:
        info = sf.info(str(filepath))
    except Exception as exc:
        logger.debug("could not probe duration of %s: %s", filepath, exc)
        return None
    if info.samplerate <= 0 or info.frames < 0:
        return None
    return info.frames / info.samplerate
