# examples/browse_folder.py

import sys
import os
# Hack to import sampleprism without installing it yet
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

import logging
from pathlib import Path

from sampleprism import analyze_many
from sampleprism.pcm import is_audio_file


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    folder = Path(sys.argv[1]) if len(sys.argv) > 1 else Path.cwd()
    paths = sorted(p for p in folder.iterdir() if p.is_file() and is_audio_file(p))
    if not paths:
        print(f"No audio files in {folder}")
        sys.exit(1)

    print(f"Analysing {len(paths)} files in {folder}...")
    results = [info for info in analyze_many(paths, num_peaks=64) if info is not None]
    for info in results:
        print(info.summary())

    print(f"{len(results)}/{len(paths)} analysed")
    if results:
        # What a browser would cache for the first file
        print(results[0].waveform.to_json()[:120] + "...")
