"""Conversion between Slide positions and open percentages.

Slide reports 0 for fully open and 1 for fully closed. The bridge API uses
percent open: 0 is closed, 100 is open.
"""

import math


def slide_pos_to_percent(pos: float) -> int:
    """Slide pos (0=open, 1=closed) -> percent (0=closed, 100=open)."""
    clamped = max(0.0, min(1.0, pos))
    # round half up
    return int(math.floor((1 - clamped) * 100 + 0.5))


def percent_to_slide_pos(percent: float) -> float:
    """Percent (0=closed, 100=open) -> Slide pos (0=open, 1=closed)."""
    p = max(0.0, min(100.0, percent))
    return 1 - p / 100
