#!/usr/bin/env python3
"""Load the dispatch grid and optionally poll live telemetry once.

Usage
-----
Point the engine at the hosted table API and run::

    export DISPATCH_BASE_URL="https://project.example.co"
    export DISPATCH_API_KEY="anon-key"
    python scripts/dispatch_probe.py --date 2024-01-15 --live

Without ``DISPATCH_BASE_URL`` the grid falls back to the sample rows and
live mode reports that no telemetry store is available.

Options::

    --date YYYY-MM-DD    Pickup date to load (default: all dates)
    --search TERM        Free-text search applied to the grid
    --sort COLUMN        Column sort (repeat to toggle direction)
    --off TOGGLE         Turn a filter toggle off (repeatable)
    --live               Poll live telemetry once and list the markers
    --json               Output as machine-readable JSON
    --verbose, -v        Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from dispatchcore import (  # noqa: E402
    DispatchConfig,
    DispatchConsole,
    RecordingSink,
    ReservationRow,
    TrackingMode,
)
from dispatchcore.grid import SORTABLE_COLUMNS  # noqa: E402
from dispatchcore.ingestion.normalize import parse_date  # noqa: E402


class _IdleScheduler:
    """Scheduler that never fires; the probe drives the tracker by hand."""

    class _Handle:
        cancelled = False

        def cancel(self) -> None:
            self.cancelled = True

    def call_every(self, interval: float, callback: Any, *, immediate: bool = False) -> _Handle:
        return self._Handle()


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _row_line(row: ReservationRow) -> str:
    return (
        f"{row.status_icon} {row.confirmation_number:<10} {row.status_label:<24} "
        f"{row.pickup_time:<9} {row.origin.value:<9} {row.passenger_name}"
    )


async def main() -> int:
    parser = argparse.ArgumentParser(description="Probe the dispatch grid and live telemetry.")
    parser.add_argument("--date", help="Pickup date to load (YYYY-MM-DD)")
    parser.add_argument("--search", help="Free-text search applied to the grid")
    parser.add_argument("--sort", action="append", default=[], choices=sorted(SORTABLE_COLUMNS))
    parser.add_argument("--off", action="append", default=[], help="Filter toggle to turn off")
    parser.add_argument("--live", action="store_true", help="Poll live telemetry once")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    pickup_date = parse_date(args.date) if args.date else None
    if args.date and pickup_date is None:
        parser.error(f"Unreadable --date {args.date!r}")

    config = DispatchConfig.from_env()
    fleet = RecordingSink()
    result: dict[str, Any] = {}

    async with DispatchConsole(config, scheduler=_IdleScheduler()) as console:
        console.register_sink("fleet", fleet, placeholder=True)
        await console.load_grid(pickup_date)
        for toggle in args.off:
            try:
                console.grid.set_filter(toggle, False)
            except ValueError as exc:
                parser.error(str(exc))
        if args.search:
            console.grid.search(args.search)
        for column in args.sort:
            console.grid.sort_by(column)
        rows = console.grid.visible_rows()

        if args.live:
            console.tracker.set_mode(TrackingMode.LIVE)
            await console.tracker.poll_once()

        result["grid"] = {
            "using_sample_data": console.grid.using_sample_data,
            "error": str(console.grid.last_error) if console.grid.last_error else None,
            "rows": [row.model_dump(mode="json", exclude={"raw"}) for row in rows],
        }
        result["tracker"] = {
            "mode": console.tracker.mode.value,
            "markers": [marker.model_dump(mode="json") for marker in fleet.markers.values()],
            "placeholder": fleet.placeholder.message if fleet.placeholder else None,
        }

    if args.json_mode:
        print(json.dumps(result, indent=2, default=str, ensure_ascii=False))
        return 0

    grid = result["grid"]
    out = [_section(f"GRID ({len(rows)} rows{', sample data' if grid['using_sample_data'] else ''})")]
    if grid["error"]:
        out.append(f"  store error: {grid['error']}")
    out.extend(f"  {_row_line(row)}" for row in rows)

    tracker = result["tracker"]
    out.append(_section(f"TRACKER ({tracker['mode']})"))
    if tracker["placeholder"]:
        out.append(f"  placeholder: {tracker['placeholder']}")
    for marker in fleet.markers.values():
        out.append(f"  {marker.icon} {marker.marker_id:<12} {marker.latitude:.5f}, {marker.longitude:.5f}")
    print("\n".join(out))
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
