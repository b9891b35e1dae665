"""Command line entry point: python -m chartcore."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from skyloom.config import get_settings

from chartcore.angles import require_finite
from chartcore.aspects import find_chart_aspects
from chartcore.durations import label_duration
from chartcore.placements import build_chart
from chartcore.synastry import compare_charts

logger = logging.getLogger("chartcore")


def _load_json(path: str) -> dict:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object of body -> longitude")
    return data


def _as_series(value: object) -> list[float]:
    if isinstance(value, list) and value:
        return [require_finite(v, "longitude") for v in value]
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return [require_finite(value, "longitude")]
    raise ValueError(f"Expected a longitude or list of longitudes, got {value!r}")


def _cmd_chart(args: argparse.Namespace) -> dict:
    samples = {body: _as_series(value) for body, value in _load_json(args.file).items()}
    cusps = [float(c) for c in args.cusps.split(",")] if args.cusps else None
    placements, stations = build_chart(samples, cusps)
    aspects = find_chart_aspects({p.body: p.ecliptic_longitude for p in placements})
    return {
        "positions": [p.model_dump(mode="json", by_alias=True) for p in placements],
        "stations": [s.model_dump(mode="json", by_alias=True) for s in stations],
        "aspects": [a.model_dump(mode="json", by_alias=True) for a in aspects],
    }


def _cmd_synastry(args: argparse.Namespace) -> dict:
    chart1 = {body: _as_series(value)[0] for body, value in _load_json(args.file1).items()}
    chart2 = {body: _as_series(value)[0] for body, value in _load_json(args.file2).items()}
    return compare_charts(chart1, chart2).model_dump(mode="json", by_alias=True)


def _cmd_label(args: argparse.Namespace) -> str:
    return label_duration(args.days)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chartcore", description="Chart computation utilities.")
    sub = parser.add_subparsers(dest="command", required=True)

    chart = sub.add_parser("chart", help="Placements, stations and aspects for one chart.")
    chart.add_argument("file", help="JSON object: body -> longitude or [today, yesterday, ...]")
    chart.add_argument("--cusps", default="", help="Comma-separated 12 house cusps.")
    chart.set_defaults(func=_cmd_chart)

    synastry = sub.add_parser("synastry", help="Compare two charts.")
    synastry.add_argument("file1")
    synastry.add_argument("file2")
    synastry.set_defaults(func=_cmd_synastry)

    label = sub.add_parser("label", help="Duration label for a number of days.")
    label.add_argument("days", type=int)
    label.set_defaults(func=_cmd_label)
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    args = _parser().parse_args(argv)
    try:
        result = args.func(args)
    except (ValueError, OSError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1

    if isinstance(result, str):
        print(result)
    else:
        print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
