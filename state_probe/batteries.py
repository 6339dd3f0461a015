"""
Detector batteries and their threshold vote.

A battery is a named group of detectors that together support one hypothesis
("stateful" or "stateless").  Evaluation is scatter-gather:

  scatter:  every detector is submitted to the executor on its own
  gather:   the battery waits for all futures, then counts True results

Each future is the detector's private result slot, so nothing is shared
between tasks and the order in which they finish cannot change the count.
Signals are always reported in declaration order.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional

from .detectors import Detector, stateful_detectors, stateless_detectors
from .models import BatteryResult, DetectorSignal

logger = logging.getLogger(__name__)

STATEFUL = "stateful"
STATELESS = "stateless"

# Called once per detector result with the battery name
SignalSink = Callable[[str, DetectorSignal], None]


@dataclass(frozen=True)
class Battery:
    """A named, ordered set of detectors plus the vote needed to pass."""

    name: str
    detectors: tuple[Detector, ...]
    threshold: int

    def reduce(self, signals: list[DetectorSignal]) -> BatteryResult:
        """Count fired signals and compare against the threshold."""
        true_count = sum(1 for s in signals if s.fired)
        return BatteryResult(
            battery=self.name,
            threshold=self.threshold,
            signals=signals,
            true_count=true_count,
            verdict=true_count >= self.threshold,
        )


def stateful_battery(threshold: int = 2, case_sensitive: bool = False) -> Battery:
    """Two or more independent session indicators imply session reliance."""
    return Battery(STATEFUL, stateful_detectors(case_sensitive), threshold)


def stateless_battery(threshold: int = 1) -> Battery:
    """Any single stateless indicator suffices once stateful has lost."""
    return Battery(STATELESS, stateless_detectors(), threshold)


# ─── Scatter / Gather ────────────────────────────────────────────────


def scatter(battery: Battery, body: str, executor: Executor) -> list[Future[bool]]:
    """Submit every detector; returns futures in declaration order."""
    return [executor.submit(detector, body) for detector in battery.detectors]


def gather(
    battery: Battery,
    futures: list[Future[bool]],
    sink: Optional[SignalSink] = None,
) -> BatteryResult:
    """Join on all futures, then reduce to a verdict."""
    signals: list[DetectorSignal] = []
    for detector, future in zip(battery.detectors, futures):
        signal = DetectorSignal(detector=detector.name, fired=future.result())
        logger.debug("[%s] %s = %s", battery.name, signal.detector, signal.fired)
        if sink is not None:
            sink(battery.name, signal)
        signals.append(signal)

    result = battery.reduce(signals)
    logger.info(
        "%s checks: %d/%d fired (threshold %d) -> %s",
        battery.name.capitalize(),
        result.true_count,
        len(signals),
        battery.threshold,
        result.verdict,
    )
    return result


def run_battery(
    battery: Battery,
    body: str,
    executor: Executor | None = None,
    sink: Optional[SignalSink] = None,
) -> BatteryResult:
    """Evaluate one battery on its own.  Creates a short-lived pool if none is given."""
    if executor is not None:
        return gather(battery, scatter(battery, body, executor), sink)

    with ThreadPoolExecutor(max_workers=len(battery.detectors)) as pool:
        return gather(battery, scatter(battery, body, pool), sink)
