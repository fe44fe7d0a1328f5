from __future__ import annotations

import re
from enum import IntEnum


class DeviceType(IntEnum):
    DESKTOP = 1
    IOS = 2
    ANDROID = 3
    WINDOWS_MOBILE = 4
    TIZEN = 7


_MOBILE_RE = re.compile(r"Android( |%20)|iPhone|iPad|iPod|Tizen|Phone", re.IGNORECASE)

# checked in order; first match wins
_MOBILE_FAMILIES: tuple[tuple[re.Pattern[str], DeviceType], ...] = (
    (re.compile(r"iPhone|iPod|iPad", re.IGNORECASE), DeviceType.IOS),
    (re.compile(r"Android", re.IGNORECASE), DeviceType.ANDROID),
    (re.compile(r"Windows", re.IGNORECASE), DeviceType.WINDOWS_MOBILE),
    (re.compile(r"Tizen", re.IGNORECASE), DeviceType.TIZEN),
)


def detect_device_type(user_agent: str | None) -> int | None:
    """
    Maps a user-agent string to the vendor's "dvtp" id.

    Anything that does not look mobile is a desktop (1). A mobile-looking agent
    that matches none of the known families has no id and the field is omitted.
    """
    ua = user_agent or ""
    if not _MOBILE_RE.search(ua):
        return int(DeviceType.DESKTOP)

    for pattern, device_type in _MOBILE_FAMILIES:
        if pattern.search(ua):
            return int(device_type)
    return None
