"""
Tests for sampleprism/oneshot.py — the trailing-silence heuristic.
"""

import numpy as np
import pytest

from conftest import sine
from sampleprism.constants import OneShotSettings
from sampleprism.oneshot import has_trailing_silence, has_trailing_silence_file, rms_chunks
from sampleprism.pcm import PcmBuffer

SR = 8000


def _hit_then_silence(seconds: float = 3.0, hit_seconds: float = 0.2) -> np.ndarray:
    y = np.zeros(int(seconds * SR), dtype=np.float32)
    n_hit = int(hit_seconds * SR)
    y[:n_hit] = np.linspace(0.9, 0.0, n_hit, dtype=np.float32)
    return y


class TestRmsChunks:
    def test_constant_signal(self):
        energies = rms_chunks(np.full(SR, 0.5), SR)
        assert energies.shape == (10,)
        np.testing.assert_allclose(energies, 0.5)

    def test_partial_chunk_dropped(self):
        assert rms_chunks(np.ones(int(SR * 0.25)), SR).shape == (2,)


class TestHasTrailingSilence:
    def test_hit_followed_by_silence_is_oneshot(self):
        assert has_trailing_silence(PcmBuffer(_hit_then_silence(), SR))

    def test_sustained_tone_is_not_oneshot(self):
        assert not has_trailing_silence(PcmBuffer(sine(440, 3.0, sr=SR), SR))

    def test_too_short_is_not_oneshot(self):
        # 0.4 s → 4 chunks, below the 5-chunk minimum.
        assert not has_trailing_silence(PcmBuffer(_hit_then_silence(0.4, 0.05), SR))

    def test_silence_is_not_oneshot(self):
        assert not has_trailing_silence(PcmBuffer(np.zeros(SR * 3), SR))

    def test_strong_decay_without_silence_is_oneshot(self):
        # Back half stays above the 3% silence floor but under 10% of the front.
        loud = sine(440, 1.5, sr=SR, amplitude=1.0)
        quiet = sine(440, 1.5, sr=SR, amplitude=0.05)
        assert has_trailing_silence(PcmBuffer(np.concatenate([loud, quiet]), SR))

    def test_moderate_decay_is_loop(self):
        loud = sine(440, 1.5, sr=SR, amplitude=1.0)
        softer = sine(440, 1.5, sr=SR, amplitude=0.5)
        assert not has_trailing_silence(PcmBuffer(np.concatenate([loud, softer]), SR))

    def test_silence_late_in_clip_counts(self):
        # Sound for 75% then silence: the whole tail window is silent.
        y = np.concatenate([sine(440, 3.0, sr=SR), np.zeros(SR, dtype=np.float32)])
        assert has_trailing_silence(PcmBuffer(y, SR))

    def test_only_first_thirty_seconds(self):
        y = np.concatenate(
            [sine(440, 30.0, sr=SR), np.zeros(SR * 30, dtype=np.float32)]
        )
        assert not has_trailing_silence(PcmBuffer(y, SR))

    def test_settings_override(self):
        pcm = PcmBuffer(_hit_then_silence(), SR)
        strict = OneShotSettings(silent_ratio=1.0, decay_ratio=0.0)
        assert not has_trailing_silence(pcm, strict)

    def test_idempotent(self):
        pcm = PcmBuffer(_hit_then_silence(), SR)
        assert has_trailing_silence(pcm) == has_trailing_silence(pcm)


class TestHasTrailingSilenceFile:
    def test_reads_file(self, wav_factory):
        path = wav_factory("hit.wav", _hit_then_silence(), sr=SR)
        assert has_trailing_silence_file(path)

    def test_missing_file_is_false(self, tmp_path):
        assert not has_trailing_silence_file(tmp_path / "missing.wav")

    @pytest.mark.parametrize("payload", [b"", b"RIFF0000WAVEjunk"])
    def test_unreadable_file_is_false(self, tmp_path, payload):
        bad = tmp_path / "bad.wav"
        bad.write_bytes(payload)
        assert not has_trailing_silence_file(bad)
