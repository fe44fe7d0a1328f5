from __future__ import annotations

import pytest

from tnsbeat.features.plugin.options import DEFAULTS, SessionOptions, merge_options

IPHONE = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)"


def test_merge_keeps_defaults_for_missing_keys():
    merged = merge_options({"catid": "C1", "TnsAccount": "ACC"})

    assert merged["catid"] == "C1"
    assert merged["TnsAccount"] == "ACC"
    assert merged["interval"] == 30000
    assert merged["vcver"] == 0
    assert merged["live"] is False
    assert merged["serverTimestamp"] == 0


def test_merge_drops_unknown_keys():
    merged = merge_options({"catid": "C1", "colour": "red"})
    assert "colour" not in merged
    assert set(merged) == set(DEFAULTS)


def test_device_type_detected_when_not_given():
    assert merge_options({}, user_agent=IPHONE)["dvtp"] == 2
    assert merge_options({}, user_agent=None)["dvtp"] == 1


def test_explicit_device_type_wins_over_detection():
    assert merge_options({"dvtp": 7}, user_agent=IPHONE)["dvtp"] == 7


def test_session_options_from_mapping():
    o = SessionOptions.from_mapping(
        merge_options(
            {
                "TnsAccount": "ACC",
                "tmsec": "sec1",
                "interval": "15000",
                "live": True,
                "serverTimestamp": 1000,
                "advid": "adv",
            }
        )
    )

    assert o.account == "ACC"
    assert o.section == "sec1"
    assert o.interval_ms == 15000
    assert o.live is True
    assert o.server_timestamp == 1000
    assert o.advid == "adv"


def test_zero_server_timestamp_means_absent():
    o = SessionOptions.from_mapping(merge_options({}))
    assert o.server_timestamp is None


def test_non_positive_interval_is_rejected():
    with pytest.raises(ValueError):
        SessionOptions.from_mapping(merge_options({"interval": 0}))


def test_beacon_params_carry_identifiers_and_event_type():
    o = SessionOptions(account="ACC", section="s", live=True, catid="C", idfa="X")
    p = o.beacon_params(fts=1990, vts=2000)

    assert p.evtp == 1
    assert p.catid == "C"
    assert p.idfa == "X"
    assert (p.fts, p.vts) == (1990, 2000)
