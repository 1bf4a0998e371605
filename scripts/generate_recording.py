#!/usr/bin/env python
"""
Synthetic Recording Generator

Writes a recording of one hand closing into a pinch and opening again,
for trying out the replay pipeline without a sensor.

Usage:
    python scripts/generate_recording.py --output data/pinch.json
    python -m handtrack.pipeline --input data/pinch.json
"""

import argparse
import numpy as np

from handtrack.data.recording import save_recording
from handtrack.data.synthetic import create_pinch_recording
from handtrack.hand.joints import Handedness
from handtrack.utils.logging_utils import setup_logging, get_logger

logger = get_logger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic pinch recording")
    parser.add_argument(
        "--output",
        type=str,
        default="./data/pinch.json",
        help="Output JSON file"
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=120,
        help="Number of frames (one open-close-open cycle)"
    )
    parser.add_argument(
        "--hand",
        type=str,
        default="right",
        choices=[h.value for h in Handedness],
        help="Handedness of the synthetic hand"
    )

    args = parser.parse_args()
    setup_logging()

    # 8cm apart -> touching -> 8cm apart
    phase = np.linspace(0.0, 2.0 * np.pi, args.frames)
    distances = 0.04 + 0.04 * np.cos(phase)

    recording = create_pinch_recording(distances.tolist(), handedness=Handedness(args.hand))
    save_recording(recording, args.output)
    logger.info(f"Wrote {len(recording)} frames to {args.output}")


if __name__ == "__main__":
    main()
