"""DRONERISK operator session demo.

Places a ring of simulated drones at fixed ranges around a single coverage
station (inside, on and just past the 30 km boundary), scores them from
randomly drawn indicators and plays an operator working through the
mitigation actions on a simulated clock.

Run:
    python scripts/demo_mitigation.py
    python scripts/demo_mitigation.py --seed 7 --targets 8 --verbose
"""

from __future__ import annotations

import argparse

import numpy as np

from dronerisk.classification.risk import DEFAULT_WEIGHTS
from dronerisk.core.clock import SimClock, iso_timestamp
from dronerisk.core.types import ActionStatus, Station
from dronerisk.engagement.actions import DEFAULT_ACTIONS
from dronerisk.engagement.coverage import COVERAGE_RADIUS_M
from dronerisk.engagement.manager import MitigationEngine
from dronerisk.utils.geodetic import destination_point

STATION = Station(station_id="stn-demo", name="Demo Site", position=(52.08, 4.30))

# Ranges in metres; the boundary ring sits exactly on the coverage radius
RANGES_M = [5_000.0, 15_000.0, 29_900.0, COVERAGE_RADIUS_M, 30_100.0, 45_000.0]


# ---------------------------------------------------------------------------
# Scenario definitions
# ---------------------------------------------------------------------------


def build_target_defs(n_targets: int, rng: np.random.Generator) -> list[dict]:
    """Targets spread in bearing, cycling through RANGES_M, each with a short track."""
    names = list(DEFAULT_WEIGHTS)
    defs = []
    for i in range(n_targets):
        bearing = 360.0 * i / n_targets
        rng_m = RANGES_M[i % len(RANGES_M)]
        lat, lon = destination_point(*STATION.position, bearing, rng_m)
        # Previous fix 500 m further out on the same radial: inbound heading
        prev_lat, prev_lon = destination_point(*STATION.position, bearing, rng_m + 500.0)
        active = rng.random(len(names)) < 0.3
        outcomes = {
            a.key: (a.success_outcome if rng.random() < 0.5 else a.error_outcome)
            for a in DEFAULT_ACTIONS
        }
        defs.append({
            "id": f"demo{i + 1}",
            "track": [[prev_lat, prev_lon], [lat, lon]],
            "indicators": {name: bool(flag) for name, flag in zip(names, active)},
            "outcomes": outcomes,
        })
    return defs


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def print_targets(engine: MitigationEngine) -> None:
    covered = engine.covered_targets()
    print("  Targets:")
    for t in engine.ordered_targets():
        rng_km = engine.compute_distance(STATION.position, t.position) / 1000.0
        print(
            f"    {t.call_sign:<10} {t.risk.level.value:<6} score={t.risk.score:>3} "
            f"hdg={t.heading_deg:6.1f} range={rng_km:6.2f} km "
            f"{'COVERED' if t.target_id in covered else '-':<8} "
            f"state={engine.target_state(t.target_id).value}"
        )


def run_demo(n_targets: int, seed: int, verbose: bool) -> None:
    rng = np.random.default_rng(seed)
    clock = SimClock()
    engine = MitigationEngine(
        target_defs=build_target_defs(n_targets, rng),
        stations=[STATION],
        clock=clock,
    )

    print("=" * 72)
    print("  DRONERISK Operator Session Demo")
    print("=" * 72)
    print(f"  Seed:     {seed}")
    print(f"  Targets:  {n_targets}")
    print(f"  Station:  {STATION.name} {STATION.position}")
    print(f"  Engaged:  {sorted(engine.engaged_stations()) or 'none'}")
    print_targets(engine)

    # Operator works the highest-risk covered targets first
    covered = engine.covered_targets()
    queue = sorted(
        (t for t in engine.targets if t.target_id in covered),
        key=lambda t: (-t.risk.score, t.target_id),
    )
    counts = {status: 0 for status in ActionStatus}
    for target in queue:
        for action in DEFAULT_ACTIONS:
            clock.step(float(rng.integers(2, 15)))
            result = engine.resolve_action(target.target_id, action.key)
            counts[result.status] += 1
            if verbose or result.resolved:
                print(
                    f"  [{iso_timestamp(clock.now())}] {target.call_sign} "
                    f"{action.label}: {result.status.value} ({result.message})"
                    f"{'  -> RESOLVED' if result.resolved else ''}"
                )
        # Second click on an action that was already used
        counts[engine.resolve_action(target.target_id, DEFAULT_ACTIONS[0].key).status] += 1

    print(f"\n{'=' * 72}")
    print("=== SESSION SUMMARY ===")
    print(f"{'=' * 72}")
    for status, n in counts.items():
        print(f"  {status.value:<9} {n}")
    print_targets(engine)
    print()
    print(engine.export_audit_log(), end="")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="DRONERISK operator session demo",
    )
    parser.add_argument(
        "--targets", type=int, default=6,
        help="Number of simulated drones (default: 6)",
    )
    parser.add_argument(
        "--seed", type=int, default=42,
        help="Random seed for indicators and outcomes (default: 42)",
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Print every action result, not only resolutions",
    )
    args = parser.parse_args()

    try:
        run_demo(args.targets, args.seed, args.verbose)
    except KeyboardInterrupt:
        print("\n  Interrupted. Exiting.")


if __name__ == "__main__":
    main()
