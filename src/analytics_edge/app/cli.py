from __future__ import annotations

import argparse
import json
import sys

from analytics_edge.app.runner import run


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="analytics-edge")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_run = sub.add_parser("run", help="Boot the extension and replay inbound events")
    p_run.add_argument("--config", default="config/extension.yaml")
    p_run.add_argument("--events", default=None, help="YAML list of inbound events")

    args = parser.parse_args(argv)

    if args.cmd == "run":
        result = run(args.config, args.events)
        for hit in result.hits:
            print(json.dumps(hit, sort_keys=True, separators=(",", ":")))
        return 0

    return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
