# SPDX-License-Identifier: Apache-2.0
"""One-shot runner: dispatch a sensor's triggers against an event-set file."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List

from sensor_triggers.config import load_sensor
from sensor_triggers.dispatcher import DispatchResult, TriggerDispatcher
from sensor_triggers.events import EventSet

log = logging.getLogger("sensor_triggers")


def load_events(path: str | Path) -> EventSet:
    raw = json.loads(Path(path).read_text())
    if not isinstance(raw, dict):
        raise ValueError(f"event file {path} must contain a mapping of dependency name to event")
    return EventSet.from_dict(raw)


async def main_async(args) -> List[DispatchResult]:
    sensor = load_sensor(args.sensor)
    events = load_events(args.events)
    dispatcher = TriggerDispatcher.from_config(sensor)
    try:
        results = await dispatcher.dispatch_all(events, names=args.trigger or None)
    finally:
        await dispatcher.close()
    for result in results:
        if result.ok:
            log.info("trigger %s succeeded after %d attempt(s)", result.trigger, result.attempts)
        else:
            log.error("trigger %s %s after %d attempt(s): %r", result.trigger, result.outcome.value, result.attempts, result.error)
    return results


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Dispatch sensor triggers for a set of events")
    parser.add_argument("--sensor", default="config/sensor.yaml")
    parser.add_argument("--events", required=True, help="JSON file mapping dependency names to events")
    parser.add_argument("--trigger", action="append", help="only dispatch the named trigger (repeatable)")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    try:
        results = asyncio.run(main_async(args))
    except KeyboardInterrupt:
        return 130
    return 0 if all(r.ok for r in results) else 1


if __name__ == "__main__":
    sys.exit(main())
