"""Sample-type decision: "loop" or "oneshot".

Order of evidence:

    1. filename keywords ("loop", "_lp" / "hit", "stab", "fx", ...)
    2. very short clips (< 1.5 s) are one-shots
    3. 1.5–20 s clips with a decaying, silent tail are one-shots
    4. anything else with a known duration is a loop; unknown → one-shot
"""

from __future__ import annotations

from pathlib import Path

from sampleprism.oneshot import has_trailing_silence_file

LOOP = "loop"
ONESHOT = "oneshot"

_LOOP_KEYWORDS: tuple[str, ...] = ("loop", "_lp")
_ONESHOT_KEYWORDS: tuple[str, ...] = (
    "oneshot",
    "one-shot",
    "one shot",
    "_hit",
    " hit",
    "stab",
    "impact",
    "riser",
    "downlifter",
    "fx",
    "sfx",
    "transition",
    "fill",
)

SHORT_ONESHOT_MS = 1500
MAX_ANALYSED_MS = 20000


def sample_type_from_filename(filename: str) -> str | None:
    """Keyword verdict from the filename alone, or None if it says nothing."""
    lower = filename.lower()
    if any(keyword in lower for keyword in _LOOP_KEYWORDS):
        return LOOP
    if any(keyword in lower for keyword in _ONESHOT_KEYWORDS):
        return ONESHOT
    return None


def classify_sample_type(
    filename: str,
    duration_ms: int | None,
    filepath: str | Path | None = None,
    *,
    trailing_silence: bool | None = None,
) -> str:
    """Decide whether a sample is a loop or a one-shot.

    Parameters
    ----------
    filename:
        File name (keywords are matched case-insensitively).
    duration_ms:
        Duration in milliseconds, if known.
    filepath:
        Audio to analyse for a silent tail when the duration is inconclusive.
    trailing_silence:
        Pre-computed one-shot classifier result.  Used instead of decoding
        ``filepath`` when given.

    Returns
    -------
    ``"loop"`` or ``"oneshot"``.
    """
    by_name = sample_type_from_filename(filename)
    if by_name is not None:
        return by_name

    if duration_ms is None:
        return ONESHOT
    if duration_ms < SHORT_ONESHOT_MS:
        return ONESHOT

    if duration_ms <= MAX_ANALYSED_MS:
        if trailing_silence is None and filepath is not None:
            trailing_silence = has_trailing_silence_file(filepath)
        if trailing_silence:
            return ONESHOT

    return LOOP
