"""
Tests for sampleprism/inspect.py — the per-file entry point and batch runner.
"""

import json

import numpy as np
import pytest

from conftest import SR, click_track, sine
from sampleprism.constants import ANALYSIS_VERSION
from sampleprism.inspect import SampleInfo, analyze_many, inspect
from sampleprism.pcm import DecodeError


def _sustained_groove(bpm: float, seconds: float) -> np.ndarray:
    """Clicks over a quiet bed so the clip never goes silent."""
    return click_track(bpm, seconds) + sine(100, seconds, amplitude=0.05)


class TestInspect:
    def test_detects_tempo_from_audio(self, wav_factory):
        path = wav_factory("groove.wav", click_track(120, 6.0))
        info = inspect(path, num_peaks=32)
        assert isinstance(info, SampleInfo)
        assert info.bpm == 120
        assert info.bpm_source == "audio"
        assert info.duration_secs == pytest.approx(6.0)
        assert info.sample_rate == SR
        assert len(info.waveform.peaks) == len(info.waveform.colors) == 32

    def test_filename_bpm_preempts_detection(self, wav_factory):
        path = wav_factory("Groove_128bpm_Amin.wav", click_track(120, 6.0))
        info = inspect(path)
        assert info.bpm == 128
        assert info.bpm_source == "filename"
        assert info.key == "Amin"

    def test_detection_can_be_disabled(self, wav_factory):
        path = wav_factory("groove.wav", click_track(120, 6.0))
        info = inspect(path, detect_tempo=False)
        assert info.bpm is None
        assert info.bpm_source is None

    def test_key_from_filename(self, wav_factory):
        path = wav_factory("Bass F#m.wav", sine(92.5, 2.0))
        assert inspect(path).key == "F#min"

    def test_short_hit_is_oneshot_without_tail_check(self, wav_factory):
        path = wav_factory("thing.wav", sine(200, 0.5))
        info = inspect(path)
        assert info.sample_type == "oneshot"
        assert info.trailing_silence is None

    def test_sustained_clip_is_loop(self, wav_factory):
        path = wav_factory("groove.wav", _sustained_groove(120, 6.0))
        info = inspect(path)
        assert info.trailing_silence is False
        assert info.sample_type == "loop"

    def test_decaying_clip_is_oneshot(self, wav_factory):
        y = np.concatenate([sine(200, 1.0), np.zeros(SR * 3, dtype=np.float32)])
        info = inspect(wav_factory("boom.wav", y))
        assert info.trailing_silence is True
        assert info.sample_type == "oneshot"

    def test_levels(self, wav_factory):
        info = inspect(wav_factory("tone.wav", sine(440, 2.0, amplitude=0.5)))
        assert info.peak_db == pytest.approx(-6.02, abs=0.05)
        assert info.rms_db == pytest.approx(-9.03, abs=0.05)

    def test_to_dict_is_json_serialisable(self, wav_factory):
        info = inspect(wav_factory("groove.wav", click_track(120, 4.0)), num_peaks=8)
        payload = json.loads(json.dumps(info.to_dict()))
        assert payload["version"] == ANALYSIS_VERSION
        assert len(payload["waveform"]["peaks"]) == 8

    def test_summary_mentions_tempo_and_type(self, wav_factory):
        info = inspect(wav_factory("groove.wav", _sustained_groove(120, 6.0)))
        text = info.summary()
        assert "groove.wav" in text
        assert "120 BPM" in text
        assert "loop" in text

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            inspect(tmp_path / "missing.wav")

    def test_unreadable_file(self, tmp_path):
        bad = tmp_path / "bad.wav"
        bad.write_text("nope")
        with pytest.raises(DecodeError):
            inspect(bad)


class TestAnalyzeMany:
    def test_results_in_input_order_with_failures_as_none(self, wav_factory, tmp_path):
        a = wav_factory("a.wav", click_track(120, 4.0))
        b = wav_factory("b.wav", sine(440, 1.0))
        missing = tmp_path / "missing.wav"
        results = analyze_many([a, missing, b], num_peaks=16, max_workers=2)
        assert len(results) == 3
        assert results[0].filepath == str(a)
        assert results[1] is None
        assert results[2].filepath == str(b)

    def test_matches_sequential_results(self, wav_factory):
        paths = [wav_factory(f"g{i}.wav", click_track(100 + 20 * i, 4.0)) for i in range(3)]
        parallel = analyze_many(paths, max_workers=3)
        for path, info in zip(paths, parallel):
            assert info.waveform == inspect(path).waveform
            assert info.bpm == inspect(path).bpm
