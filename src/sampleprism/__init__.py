from sampleprism.constants import ANALYSIS_VERSION, BANDS, NEUTRAL_COLOR
from sampleprism.pcm import PcmBuffer, DecodeError, decode
from sampleprism.waveform import (
    WaveformData,
    StaleCacheError,
    extract_peaks,
    compute_waveform,
    waveform_from_file,
)
from sampleprism.colors import compute_frequency_colors
from sampleprism.tempo import detect_bpm, detect_bpm_from_file
from sampleprism.oneshot import has_trailing_silence
from sampleprism.naming import parse_bpm_from_filename, parse_key_from_filename
from sampleprism.sample_type import classify_sample_type
from sampleprism.inspect import inspect as inspect_sample, SampleInfo, analyze_many

__all__ = [
    "ANALYSIS_VERSION",
    "BANDS",
    "NEUTRAL_COLOR",
    "PcmBuffer",
    "DecodeError",
    "decode",
    "WaveformData",
    "StaleCacheError",
    "extract_peaks",
    "compute_waveform",
    "waveform_from_file",
    "compute_frequency_colors",
    "detect_bpm",
    "detect_bpm_from_file",
    "has_trailing_silence",
    "parse_bpm_from_filename",
    "parse_key_from_filename",
    "classify_sample_type",
    "inspect_sample",
    "SampleInfo",
    "analyze_many",
]
