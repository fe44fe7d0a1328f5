from __future__ import annotations

import argparse
import math
import sys
import time

from tnsbeat.app.runner import run
from tnsbeat.core.config import load_config
from tnsbeat.features.encoder.service import encode_beacon_url
from tnsbeat.features.plugin.options import SessionOptions, merge_options


def preview_url(config_path: str, fts: int, vts: int | None, user_agent: str | None) -> str:
    cfg = load_config(config_path)
    o = SessionOptions.from_mapping(merge_options(cfg.session, user_agent=user_agent))
    params = o.beacon_params(fts=fts, vts=math.floor(time.time()) if vts is None else vts)
    return encode_beacon_url(
        params, account=o.account, section=o.section, secure=cfg.endpoint.secure
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="tnsbeat")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_sim = sub.add_parser("simulate", help="Replay a scripted playback scenario")
    p_sim.add_argument("--config", default="config/heartbeat.yaml")

    p_url = sub.add_parser("url", help="Print the beacon URL for one position")
    p_url.add_argument("--config", default="config/heartbeat.yaml")
    p_url.add_argument("--fts", type=int, required=True)
    p_url.add_argument("--vts", type=int, default=None)
    p_url.add_argument("--user-agent", default=None)

    args = parser.parse_args(argv)

    if args.cmd == "simulate":
        result = run(args.config)
        # minimal stdout signal
        print(
            f"session_id={result.session_id} skew_s={result.skew_s} "
            f"beacons={result.beacons_sent}"
        )
        return 0

    if args.cmd == "url":
        print(preview_url(args.config, args.fts, args.vts, args.user_agent))
        return 0

    return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
