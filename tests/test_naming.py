"""
Tests for sampleprism/naming.py — BPM and key hints in filenames.
"""

import pytest

from sampleprism.naming import parse_bpm_from_filename, parse_key_from_filename


class TestParseBpm:
    @pytest.mark.parametrize(
        "filename, expected",
        [
            ("Groove_124bpm.wav", 124),
            ("Groove 124 BPM.wav", 124),
            ("Groove_124_bpm.wav", 124),
            ("Groove-124-Bpm.wav", 124),
            ("BPM_128 Drums.wav", 128),
            ("bpm90_keys.wav", 90),
            ("Tempo-95 Keys.wav", 95),
            ("Keys 95 Tempo.wav", 95),
            ("Drums_128_Full.wav", 128),
            ("140 Hats.wav", 140),
        ],
    )
    def test_recognised(self, filename, expected):
        assert parse_bpm_from_filename(filename) == expected

    @pytest.mark.parametrize(
        "filename",
        [
            "Snare_200bpm.wav",  # out of range
            "Loop 045.wav",  # out of range
            "Kick_24bit.wav",
            "Pad_120_bars.wav",
            "Sweep 100 Hz.wav",
            "Vocal_320_kbps.mp3",
            "Pad.wav",
        ],
    )
    def test_not_recognised(self, filename):
        assert parse_bpm_from_filename(filename) is None

    def test_explicit_bpm_beats_bare_number(self):
        assert parse_bpm_from_filename("Pack 100 - Groove 128bpm.wav") == 128

    def test_out_of_range_explicit_falls_through(self):
        assert parse_bpm_from_filename("200bpm Groove_120.wav") == 120


class TestParseKey:
    @pytest.mark.parametrize(
        "filename, expected",
        [
            ("Bass Amin 120.wav", "Amin"),
            ("Pad - C# minor.wav", "C#min"),
            ("Lead Bbmaj.wav", "Bbmaj"),
            ("Keys Cmajor.wav", "Cmaj"),
            ("Keys cmaj.wav", "Cmaj"),
            ("Chords F#m 128.wav", "F#min"),
            ("Bass Am.wav", "Amin"),
            ("Groove_124bpm_Ebmin.wav", "Ebmin"),
        ],
    )
    def test_recognised(self, filename, expected):
        assert parse_key_from_filename(filename) == expected

    @pytest.mark.parametrize("filename", ["Kick 01.wav", "Drum Loop.wav", "Hmaj.wav"])
    def test_not_recognised(self, filename):
        assert parse_key_from_filename(filename) is None


# ---------------------------------------------------------------------------
# Separators between a value and its neighbours
# ---------------------------------------------------------------------------


class TestSeparators:
    """A bare number only counts once it is fenced by separators, so a unit
    suffix can only ever appear after one; it is looked for past them."""

    @pytest.mark.parametrize(
        "filename",
        [
            "Pad_120_bars.wav",
            "Pad 120-Bar.wav",
            "Pad - 120 - bars.wav",
            "Tone_100_Hz.wav",
            "Kick_96_kHz.wav",
            "Gain 120 dB.wav",
        ],
    )
    def test_unit_after_separator_is_not_a_tempo(self, filename):
        assert parse_bpm_from_filename(filename) is None

    @pytest.mark.parametrize(
        "filename, expected",
        [
            ("Pad_120_Warm.wav", 120),
            ("Pad - 120 - Warm.wav", 120),
        ],
    )
    def test_other_words_after_separator_keep_the_tempo(self, filename, expected):
        assert parse_bpm_from_filename(filename) == expected

    @pytest.mark.parametrize(
        "filename, expected",
        [
            ("Groove_124bpm_Amin.wav", "Amin"),
            ("Bass_F#m_01.wav", "F#min"),
            ("Lead-Cmaj-01.wav", "Cmaj"),
            ("Keys_Bbminor_01.wav", "Bbmin"),
        ],
    )
    def test_key_between_underscores(self, filename, expected):
        assert parse_key_from_filename(filename) == expected

    @pytest.mark.parametrize("filename", ["Dram_01.wav", "Gamin_02.wav", "2Am.wav"])
    def test_key_inside_a_word_is_ignored(self, filename):
        assert parse_key_from_filename(filename) is None
