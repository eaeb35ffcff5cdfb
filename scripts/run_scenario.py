#!/usr/bin/env python3
"""Run a canned flight scenario against the simulator and print telemetry.

Scenarios:
- ``rtl``      start airborne at home, return to launch and land
- ``takeoff``  take off from the ground to 10 m
- ``flyto``    fly from the launch point to 47.61, -122.33 at 50 m

Timings can be compressed with ``--speed`` so a full RTL finishes in seconds.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyuavsim import SimulatorConfig, TrackRecorder, UavSimulator, VehicleState  # noqa: E402


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("scenario", choices=("rtl", "takeoff", "flyto"))
    parser.add_argument("--speed", type=float, default=1.0, help="Time compression factor (default: 1.0)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible noise")
    parser.add_argument("--quiet", action="store_true", help="Only print the final state")
    parser.add_argument("--debug", action="store_true", help="Enable DEBUG logging")
    return parser.parse_args()


def _format(state: VehicleState) -> str:
    return (
        f"armed={state.armed!s:<5} mode={state.mode:<8} alt={state.altitude:7.2f}m "
        f"pos=({state.latitude:.6f}, {state.longitude:.6f}) hdg={state.heading:6.1f} "
        f"gs={state.groundspeed:4.1f}m/s batt={state.battery_voltage:.2f}V/{state.battery_percent}%"
    )


async def _run(args: argparse.Namespace) -> int:
    base = SimulatorConfig()
    config = SimulatorConfig.from_env(
        tick_interval=base.tick_interval / args.speed,
        sample_interval=base.sample_interval / args.speed,
        takeoff_duration=base.takeoff_duration / args.speed,
        fly_to_duration=base.fly_to_duration / args.speed,
        seed=args.seed,
    )
    initial = VehicleState()
    if args.scenario == "takeoff":
        initial = VehicleState(armed=False, mode="STABILIZE", altitude=0.0)

    recorder = TrackRecorder()
    async with UavSimulator(config, initial_state=initial) as sim:
        if not args.quiet:
            sim.subscribe(lambda s: print(_format(s)))
        recorder.attach(sim.store)

        if args.scenario == "takeoff":
            ok = await sim.takeoff(10)
        elif args.scenario == "flyto":
            ok = await sim.fly_to(47.61, -122.33, 50)
        else:
            ok = await sim.return_to_launch()
            await sim.wait_for_state(lambda s: s.mode == "LAND", timeout=600 / args.speed)

        final = sim.get_state()

    print(f"\nresult={ok} track_points={len(recorder)}")
    print(_format(final))
    return 0 if ok else 1


def main() -> int:
    args = _parse_args()
    if args.speed <= 0:
        print("--speed must be positive", file=sys.stderr)
        return 2
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING)
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
