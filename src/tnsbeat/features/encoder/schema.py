from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Wire order of the "key:value:" segment. Vendor-mandated; do not reorder.
FIELD_ORDER: tuple[str, ...] = (
    "catid",
    "vcid",
    "vcver",
    "fts",
    "vts",
    "evtp",
    "dvtp",
    "adid",
    "advid",
    "idfa",
    "dvid",
    "mac",
    "app",
)

ENDPOINT_HOST = "www.tns-counter.ru"
PATH_PREFIX = "/V13a**"
FIELD_SEPARATOR = ":"

EVENT_TYPE_LIVE = 1
EVENT_TYPE_VOD = 2


def event_type_for(live: bool) -> int:
    return EVENT_TYPE_LIVE if live else EVENT_TYPE_VOD


@dataclass(frozen=True, slots=True)
class BeaconParams:
    """One beacon's worth of fields. None means "omit from the URL"."""

    fts: int
    vts: int
    evtp: int

    catid: Any = None
    vcid: Any = None
    vcver: Any = None
    dvtp: int | None = None
    adid: Any = None
    advid: Any = None
    idfa: Any = None
    dvid: Any = None
    mac: Any = None
    app: Any = None

    def as_row(self) -> dict[str, Any]:
        """Fields keyed by wire name, in wire order."""
        return {key: getattr(self, key) for key in FIELD_ORDER}
