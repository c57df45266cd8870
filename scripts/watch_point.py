from __future__ import annotations

import argparse
import json
import time

from comap.config.settings import get_settings
from comap.core.logging import configure_logging
from comap.errors import OutOfBoundsError
from comap.sensors.feed import LiveFeed
from comap.sensors.simulator import SensorSimulator
from comap.service.estimate import ensure_in_bounds, estimate_at_point


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Re-estimate CO at one point on every sensor feed update.")
    p.add_argument("--lat", required=True, type=float)
    p.add_argument("--lon", required=True, type=float)
    p.add_argument("--seed", type=int, default=None, help="Seed the mock feed.")
    p.add_argument("--iterations", type=int, default=0, help="Stop after N updates (0 = run until Ctrl-C).")
    p.add_argument("--json", action="store_true", help="One JSON object per line.")
    args = p.parse_args(argv)

    configure_logging()
    settings = get_settings()
    try:
        ensure_in_bounds(args.lat, args.lon, settings)
    except OutOfBoundsError as e:
        print(f"error: {e}")
        return 2

    feed = LiveFeed(SensorSimulator(settings, seed=args.seed), refresh_seconds=settings.sensors.refresh_seconds)
    last_generated = None
    done = 0
    try:
        while args.iterations <= 0 or done < args.iterations:
            snapshot = feed.current()
            if snapshot.generated_at != last_generated:
                last_generated = snapshot.generated_at
                result = estimate_at_point(args.lat, args.lon, snapshot, settings=settings)
                if args.json:
                    print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False), flush=True)
                else:
                    value = "--" if result.value is None else f"{result.value:.1f}"
                    band = result.severity.name if result.severity else "no estimate"
                    print(f"{snapshot.generated_at.isoformat()}  {value} ppm  {band}  ({result.source})", flush=True)
                done += 1
            time.sleep(min(0.5, settings.sensors.refresh_seconds))
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
