"""DRONERISK CLI entry point.

Usage:
    python -m dronerisk                                  # Default scenario
    python -m dronerisk --config custom.yaml             # Custom scenario
    python -m dronerisk --act d1:simDetach --act d1:report
    python -m dronerisk --act d2:directionalJam --export exports/
    python -m dronerisk --act d1:report --export        # export.directory from config
"""

from __future__ import annotations

import argparse
import logging
import sys

from dronerisk.core.config import DroneRiskConfig
from dronerisk.engagement.manager import MitigationEngine
from dronerisk.history.storage import AuditExporter
from dronerisk.utils.logging import setup_logging

logger = logging.getLogger("dronerisk.cli")


def _parse_act(value: str) -> tuple[str, str]:
    target_id, sep, action_key = value.partition(":")
    if not sep or not target_id or not action_key:
        raise argparse.ArgumentTypeError(f"expected TARGET:ACTION, got '{value}'")
    return target_id, action_key


def print_targets(engine: MitigationEngine) -> None:
    engaged = engine.engaged_stations()
    covered = engine.covered_targets()
    print(f"{'TARGET':<12} {'LEVEL':<7} {'SCORE':>5} {'HDG':>6}  {'POSITION':<20} COVERED")
    for t in engine.ordered_targets():
        lat, lon = t.position
        print(
            f"{t.call_sign:<12} {t.risk.level.value:<7} {t.risk.score:>5} "
            f"{t.heading_deg:>6.1f}  {lat:>8.4f}, {lon:<9.4f}  "
            f"{'yes' if t.target_id in covered else 'no'}"
        )
    if engine.stations:
        print()
        for s in engine.stations:
            mark = "ENGAGED" if s.station_id in engaged else "idle"
            print(f"  {s.name:<24} {mark}")


def main() -> int:
    parser = argparse.ArgumentParser(
        prog="dronerisk",
        description="DRONERISK - Drone Risk Assessment & Mitigation Engine",
    )
    parser.add_argument(
        "--config",
        "-c",
        default="config/default.yaml",
        help="Path to configuration YAML file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--act",
        "-a",
        action="append",
        type=_parse_act,
        default=[],
        metavar="TARGET:ACTION",
        help="Resolve an action on a target (repeatable, applied in order)",
    )
    parser.add_argument(
        "--export",
        "-e",
        nargs="?",
        const="",
        default=None,
        metavar="DIR",
        help="Write the mitigation report to DIR (default: export.directory from config)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level",
    )
    parser.add_argument(
        "--validate-config",
        action="store_true",
        default=False,
        help="Validate config against Pydantic schema before starting",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Path to log file (default: no file logging)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        default=False,
        help="Output logs as JSON instead of human-readable",
    )
    args = parser.parse_args()

    # Load config
    config = DroneRiskConfig(args.config)
    try:
        cfg = config.load(validate=args.validate_config)
    except FileNotFoundError:
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: Config validation failed:\n{e}", file=sys.stderr)
        return 1

    # Setup logging
    system = cfg.dronerisk.get("system", {}) or {}
    log_level = args.log_level or system.get("log_level", "INFO")
    log_file = args.log_file or system.get("log_file", None)
    log_json = args.log_json or system.get("log_json", False)
    setup_logging(log_level, log_file=log_file, log_json=log_json)

    try:
        engine = MitigationEngine.from_config(cfg)
    except ValueError as e:
        print(f"Error: Invalid scenario:\n{e}", file=sys.stderr)
        return 1

    for target_id, action_key in args.act:
        result = engine.resolve_action(target_id, action_key)
        suffix = " [target resolved]" if result.resolved else ""
        print(f"{target_id}:{action_key} -> {result.status.value}: {result.message}{suffix}")

    print_targets(engine)

    generated_at = engine.clock.now()
    report = engine.export_audit_log(generated_at=generated_at)
    print()
    print(report, end="")

    if args.export is not None:
        export_cfg = cfg.dronerisk.get("export", {}) or {}
        directory = args.export or export_cfg.get("directory", "exports")
        path = AuditExporter.save_report(report, directory, generated_at)
        print(f"\nReport written to {path}")
        if export_cfg.get("entries", False):
            suffix = ".json.gz" if export_cfg.get("compression", False) else ".json"
            AuditExporter.save_entries(
                engine.audit_log.entries(),
                path.with_suffix(suffix),
                generated_at,
                compression=bool(export_cfg.get("compression", False)),
            )
    return 0


if __name__ == "__main__":
    sys.exit(main())
