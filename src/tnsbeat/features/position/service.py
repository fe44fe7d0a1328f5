from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    """
    Rounds .5 towards +infinity, matching how the vendor player rounds
    currentTime (Python's round() would send 2.5 -> 2).
    """
    return math.floor(value + 0.5)


def compute_fts(position_s: float, now_s: int, skew_s: int, live: bool) -> int:
    """
    Reportable playback position ("fts") for one beacon.

    - VOD:                 round(position)
    - live, at the edge:   now - skew  (position only contributes its sign)
    - live, DVR rewind:    now + round(position) - skew

    The sign test is done on the rounded position, so -0.4 counts as "at the edge".
    """
    fts = round_half_up(position_s)
    if not live:
        return fts

    if fts < 0:
        # DVR: negative offset from the live edge
        return int(now_s) + fts - int(skew_s)
    return int(now_s) - int(skew_s)
