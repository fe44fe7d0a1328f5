from __future__ import annotations

import math


def compute_skew(server_timestamp: int | float | None, local_now: float) -> int:
    """
    Offset between the local clock and the vendor reference, in whole seconds.

    local_now is truncated to whole seconds before subtracting. A missing or
    zero server timestamp means "no reference" and yields 0.
    """
    if not server_timestamp:
        return 0
    return math.floor(local_now) - int(server_timestamp)
