from __future__ import annotations

from tnsbeat.app.cli import main, preview_url
from tnsbeat.app.runner import run, simulate
from tnsbeat.core.config import parse_config


def fts_values(urls: list[str]) -> list[int]:
    out = []
    for url in urls:
        fields = url.split("**")[1].split(":")
        out.append(int(fields[fields.index("fts") + 1]))
    return out


def test_vod_with_preroll_rewinds_and_reports_from_zero():
    cfg = parse_config(
        {
            "session": {"TnsAccount": "ACC", "tmsec": "sec1", "catid": "C1"},
            "scenario": {
                "start_epoch": 1_700_000_000,
                "until_s": 100,
                "steps": [
                    {"at": 0, "event": "prerollExists"},
                    {"at": 0, "event": "play"},
                    {"at": 15, "event": "allPrerollsEnded"},
                ],
            },
        }
    )

    res = simulate(cfg)

    # starts at 15 from position 0, then 45, 75
    assert fts_values(res.urls) == [0, 30, 60]
    assert res.beacons_sent == 3
    assert res.skew_s == 0


def test_live_dvr_scenario_uses_skew():
    cfg = parse_config(
        {
            "session": {
                "TnsAccount": "ACC",
                "tmsec": "sec1",
                "live": True,
                "serverTimestamp": 990,
            },
            "scenario": {
                "start_epoch": 1000,
                "until_s": 65,
                "steps": [
                    {"at": 0, "event": "play", "position": 5},
                    {"at": 40, "event": "seek", "position": -30},
                ],
            },
        }
    )

    res = simulate(cfg)

    assert res.skew_s == 10
    # t=0 edge: 1000-10; t=30 edge: 1030-10; t=60 dvr: 1060 + (-30+20) - 10
    assert fts_values(res.urls) == [990, 1020, 1040]
    assert all(":evtp:1" in u for u in res.urls)


def test_ended_scenario_stops_beacons():
    cfg = parse_config(
        {
            "session": {"TnsAccount": "ACC", "tmsec": "s", "interval": 10000},
            "scenario": {
                "start_epoch": 0,
                "until_s": 200,
                "steps": [{"at": 0, "event": "play"}, {"at": 25, "event": "ended"}],
            },
        }
    )

    assert simulate(cfg).beacons_sent == 3


def test_run_and_cli_from_yaml(tmp_path, capsys):
    p = tmp_path / "heartbeat.yaml"
    p.write_text(
        "session:\n"
        "  TnsAccount: ACC\n"
        "  tmsec: sec1\n"
        "  catid: A\n"
        "endpoint:\n"
        "  secure: false\n"
        "scenario:\n"
        "  start_epoch: 1000\n"
        "  until_s: 31\n"
        "  user_agent: 'Mozilla/5.0 (Linux; Android 14; Pixel 8)'\n"
        "  steps:\n"
        "    - {at: 0, event: play}\n"
    )

    res = run(str(p))
    assert res.urls[0] == (
        "http://www.tns-counter.ru/V13a**catid:A:vcver:0:fts:0:vts:1000:evtp:2:dvtp:3"
        "**ACC/ru/UTF-8/tmsec=sec1/"
    )

    assert main(["simulate", "--config", str(p)]) == 0
    assert "beacons=2" in capsys.readouterr().out

    assert preview_url(str(p), fts=12, vts=1000, user_agent=None) == (
        "http://www.tns-counter.ru/V13a**catid:A:vcver:0:fts:12:vts:1000:evtp:2:dvtp:1"
        "**ACC/ru/UTF-8/tmsec=sec1/"
    )
