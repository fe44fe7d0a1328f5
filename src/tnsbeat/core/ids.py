from __future__ import annotations

import hashlib
import json
from typing import Any


def canonical_json(obj: dict[str, Any]) -> str:
    # stable serialization for hashing
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True, default=str)


def deterministic_session_id(options: dict[str, Any], length: int = 12) -> str:
    """
    Session id derived from the merged plugin options.
    - Same options -> same id, so log lines of repeated runs line up.
    - Any option change -> different id.

    Only used to tag log records; it never goes on the wire.
    """
    s = canonical_json(options).encode("utf-8")
    h = hashlib.sha1(s).hexdigest()
    return h[:length]
