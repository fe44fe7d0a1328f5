from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tnsbeat.features.encoder.schema import (
    ENDPOINT_HOST,
    FIELD_ORDER,
    FIELD_SEPARATOR,
    PATH_PREFIX,
    BeaconParams,
)


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        # 1.0 goes on the wire as "1"
        return str(int(value))
    return str(value)


def _is_present(value: Any) -> bool:
    return value is not None and value != ""


def encode_fields(params: Mapping[str, Any] | BeaconParams) -> str:
    """
    "key:value:" for every present field in wire order, trailing ':' trimmed.
    Keys outside FIELD_ORDER are ignored.
    """
    row = params.as_row() if isinstance(params, BeaconParams) else params
    out = ""
    for key in FIELD_ORDER:
        value = row.get(key)
        if _is_present(value):
            out += key + FIELD_SEPARATOR + _render(value) + FIELD_SEPARATOR
    if out.endswith(FIELD_SEPARATOR):
        out = out[: -len(FIELD_SEPARATOR)]
    return out


def encode_beacon_url(
    params: Mapping[str, Any] | BeaconParams,
    *,
    account: Any,
    section: Any,
    secure: bool = True,
) -> str:
    """
    Builds the tracking URL:

        {scheme}://www.tns-counter.ru/V13a**{fields}**{account}/ru/UTF-8/tmsec={section}/

    account and section are not validated; a missing value renders as "None",
    which the vendor rejects (accepted misconfiguration failure mode).
    """
    scheme = "https" if secure else "http"
    return (
        f"{scheme}://{ENDPOINT_HOST}{PATH_PREFIX}"
        f"{encode_fields(params)}"
        f"**{account}/ru/UTF-8/tmsec={section}/"
    )
