"""
COMap CLI entrypoint.

This CLI is intended for quick local demos and debugging without a map front end.
It runs the mock sensor feed for a few ticks and delegates estimation to
`comap.service.estimate_at_point`.
"""

from __future__ import annotations

import argparse
import json
from datetime import timedelta
from typing import Any

from comap.config.settings import Settings, get_settings
from comap.core.logging import configure_logging
from comap.core.time import now_tz
from comap.errors import OutOfBoundsError
from comap.sensors.feed import SensorSnapshot
from comap.sensors.simulator import SensorSimulator
from comap.sensors.trails import TrailBuffer
from comap.service.estimate import bounds_info, estimate_at_point, sensors_overview

EXIT_OUT_OF_BOUNDS = 2


def _run_feed(settings: Settings, *, seed: int | None, ticks: int) -> tuple[SensorSnapshot, TrailBuffer]:
    """Advance the simulator `ticks` times, spaced by the configured refresh interval."""
    sim = SensorSimulator(settings, seed=seed)
    trails = TrailBuffer(max_points=settings.sensors.trail_max_points)
    start = now_tz(settings.app.timezone)
    step = timedelta(seconds=settings.sensors.refresh_seconds)
    snapshot = sim.step(start)
    trails.record(snapshot)
    for i in range(1, max(1, ticks)):
        snapshot = sim.step(start + i * step)
        trails.record(snapshot)
    return snapshot, trails


def _fmt_value(value: float | None) -> str:
    return "-- ppm (no estimate)" if value is None else f"{value:.1f} ppm"


def _cmd_estimate(args: argparse.Namespace) -> int:
    """Handle the `estimate` subcommand."""
    settings = get_settings()
    snapshot, _ = _run_feed(settings, seed=args.seed, ticks=int(args.ticks))
    try:
        result = estimate_at_point(float(args.lat), float(args.lon), snapshot, settings=settings)
    except OutOfBoundsError as e:
        print(f"error: {e}")
        return EXIT_OUT_OF_BOUNDS

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0

    print(f"Point: {result.query.lat:.5f}, {result.query.lon:.5f}")
    status = f"  [{result.severity.name}]" if result.severity else ""
    print(f"Estimate: {_fmt_value(result.value)}{status}")
    print(f"Source: {result.source} (samples={result.sample_count})")
    if result.override_sensor_id:
        print(f"  from {result.override_sensor_id}, {result.override_distance_m:.1f} m away")
    if result.parameters:
        p = result.parameters
        print(f"  variogram: nugget={p.nugget:.3f} sill={p.sill:.3f} range={p.range_m:.1f}m")
    return 0


def _cmd_sensors(args: argparse.Namespace) -> int:
    """Handle the `sensors` subcommand."""
    settings = get_settings()
    snapshot, trails = _run_feed(settings, seed=args.seed, ticks=int(args.ticks))
    overview = sensors_overview(snapshot, settings=settings, trails=trails)

    if args.json:
        print(json.dumps(overview.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0

    print(f"Generated at: {overview.generated_at.isoformat()}")
    print(f"Online: {overview.counts.online}/{overview.counts.total}")
    print("Stationary sensors:")
    for s in overview.stationary:
        print(f"  {s.id:<10} {s.value:6.1f} ppm  {s.severity.name}")
    print("Moving sensors:")
    for m in overview.mobile:
        print(f"  {m.id:<10} {m.value:6.1f} ppm  {m.severity.name}  GPS: {m.lat:.4f}, {m.lon:.4f}  trail={len(m.trail)}")
    return 0


def _cmd_bounds(_: argparse.Namespace) -> int:
    info = bounds_info(get_settings())
    print(json.dumps(info.model_dump(mode="json"), ensure_ascii=False, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the COMap CLI."""
    parser = argparse.ArgumentParser(prog="comap")
    sub = parser.add_subparsers(dest="command", required=True)

    est = sub.add_parser("estimate", help="Estimate CO at a point from the simulated sensor feed.")
    est.add_argument("--lat", required=True, type=float)
    est.add_argument("--lon", required=True, type=float)
    est.add_argument("--seed", type=int, default=None, help="Seed the mock feed for reproducible output.")
    est.add_argument("--ticks", type=int, default=1, help="Feed updates to simulate before estimating.")
    est.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    est.set_defaults(func=_cmd_estimate)

    sen = sub.add_parser("sensors", help="Print simulated sensor readings.")
    sen.add_argument("--seed", type=int, default=None)
    sen.add_argument("--ticks", type=int, default=1)
    sen.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    sen.set_defaults(func=_cmd_sensors)

    b = sub.add_parser("bounds", help="Print the query bounding box.")
    b.set_defaults(func=_cmd_bounds)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m comap.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
