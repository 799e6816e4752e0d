"""Filename metadata — BPM and key hints embedded in sample names.

Sample packs usually spell tempo and key into the filename
("Groove_124bpm_Amin.wav").  A BPM found here pre-empts audio detection.
"""

from __future__ import annotations

import re

from sampleprism.constants import TEMPO

# Tried in order; the first in-range match wins.
_BPM_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"(\d{2,3})\s*[_\-]?\s*bpm", re.IGNORECASE),  # 120bpm, 120_BPM
    re.compile(r"bpm[\s_\-]*(\d{2,3})", re.IGNORECASE),  # bpm120, BPM-120
    re.compile(r"tempo[\s_\-]*(\d{2,3})", re.IGNORECASE),  # Tempo_120
    re.compile(r"(\d{2,3})\s*[_\-]?\s*tempo", re.IGNORECASE),  # 120 Tempo
)

# Bare numbers between separators, e.g. "Drums_128_Full.wav".
_BARE_NUMBER = re.compile(r"(?:^|[^0-9a-zA-Z])(\d{2,3})(?=[^0-9a-zA-Z]|$)")

# Units that make a bare number something other than a tempo.
_NON_BPM_SUFFIXES: tuple[str, ...] = ("bit", "bar", "hz", "khz", "db", "ch", "st", "kbps")

_KEY_QUALITY = re.compile(
    r"(?<![0-9a-zA-Z])([A-G][#b]?)\s*(maj(?:or)?|min(?:or)?)(?![0-9a-zA-Z])", re.IGNORECASE
)
_KEY_SHORT_MINOR = re.compile(r"(?<![0-9a-zA-Z])([A-G][#b]?)m(?![0-9a-zA-Z])")


def _in_range(bpm: int) -> bool:
    return TEMPO.accept_min_bpm <= bpm <= TEMPO.accept_max_bpm


def parse_bpm_from_filename(filename: str) -> int | None:
    """Tempo spelled into a filename, restricted to [60, 190]."""
    for pattern in _BPM_PATTERNS:
        match = pattern.search(filename)
        if match and _in_range(int(match.group(1))):
            return int(match.group(1))

    for match in _BARE_NUMBER.finditer(filename):
        number = int(match.group(1))
        if not _in_range(number):
            continue
        after = filename[match.end(1) :].lstrip(" _-").lower()
        if after.startswith(_NON_BPM_SUFFIXES):
            continue
        return number
    return None


def _note_name(raw: str) -> str:
    return raw[0].upper() + raw[1:]


def parse_key_from_filename(filename: str) -> str | None:
    """Key spelled into a filename as ``"<note>maj"`` or ``"<note>min"``.

    Accepts "Cmaj", "C#min", "Bb major", "A minor", and the short minor
    form "Am" / "F#m".
    """
    match = _KEY_QUALITY.search(filename)
    if match:
        quality = "min" if match.group(2).lower().startswith("min") else "maj"
        return _note_name(match.group(1)) + quality

    match = _KEY_SHORT_MINOR.search(filename)
    if match:
        return _note_name(match.group(1)) + "min"
    return None
