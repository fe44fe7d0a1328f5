from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from tnsbeat.features.device_type.service import detect_device_type
from tnsbeat.features.encoder.schema import BeaconParams, event_type_for

DEFAULT_INTERVAL_MS = 30000

# Recognized plugin options and their defaults. "dvtp" is filled from the user
# agent at merge time when the caller does not set it.
DEFAULTS: dict[str, Any] = {
    "catid": None,
    "vcid": None,
    "vcver": 0,
    "dvtp": None,
    "adid": None,
    "advid": None,
    "idfa": None,
    "dvid": None,
    "mac": None,
    "app": None,
    "TnsAccount": None,
    "tmsec": None,
    "interval": DEFAULT_INTERVAL_MS,
    "live": False,
    "dvr": False,
    "serverTimestamp": 0,
}


def merge_options(
    overrides: Mapping[str, Any] | None,
    *,
    user_agent: str | None = None,
) -> dict[str, Any]:
    """
    Defaults overlaid with caller options. Unknown keys are dropped.
    """
    merged = dict(DEFAULTS)
    for key, value in (overrides or {}).items():
        if key in DEFAULTS:
            merged[key] = value

    if "dvtp" not in (overrides or {}):
        merged["dvtp"] = detect_device_type(user_agent)
    return merged


@dataclass(frozen=True)
class SessionOptions:
    """Immutable session configuration."""

    account: Any
    section: Any
    interval_ms: int = DEFAULT_INTERVAL_MS
    live: bool = False
    dvr: bool = False  # informational; behavior follows `live` and the fts sign
    server_timestamp: int | None = None

    catid: Any = None
    vcid: Any = None
    vcver: Any = 0
    dvtp: int | None = None
    adid: Any = None
    advid: Any = None
    idfa: Any = None
    dvid: Any = None
    mac: Any = None
    app: Any = None

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> SessionOptions:
        interval_ms = int(options.get("interval", DEFAULT_INTERVAL_MS))
        if interval_ms <= 0:
            raise ValueError(f"interval must be > 0 (milliseconds), got {interval_ms!r}")

        server_ts = options.get("serverTimestamp")
        return cls(
            account=options.get("TnsAccount"),
            section=options.get("tmsec"),
            interval_ms=interval_ms,
            live=bool(options.get("live", False)),
            dvr=bool(options.get("dvr", False)),
            server_timestamp=int(server_ts) if server_ts else None,
            catid=options.get("catid"),
            vcid=options.get("vcid"),
            vcver=options.get("vcver"),
            dvtp=options.get("dvtp"),
            adid=options.get("adid"),
            advid=options.get("advid"),
            idfa=options.get("idfa"),
            dvid=options.get("dvid"),
            mac=options.get("mac"),
            app=options.get("app"),
        )

    def beacon_params(self, *, fts: int, vts: int) -> BeaconParams:
        return BeaconParams(
            fts=fts,
            vts=vts,
            evtp=event_type_for(self.live),
            catid=self.catid,
            vcid=self.vcid,
            vcver=self.vcver,
            dvtp=self.dvtp,
            adid=self.adid,
            advid=self.advid,
            idfa=self.idfa,
            dvid=self.dvid,
            mac=self.mac,
            app=self.app,
        )
