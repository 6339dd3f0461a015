"""
Classification engine — orchestrates both batteries and the final vote.

Flow:
  ┌───────────────┐
  │ Document body │
  └───────┬───────┘
          │
  ┌───────▼───────┐     ┌───────────────┐
  │   Stateful    │     │   Stateless   │   ← Both batteries fan out
  │  (7 signals)  │     │  (3 signals)  │     onto one thread pool
  └───────┬───────┘     └───────┬───────┘
          │                     │
   count >= 2 ?           count >= 1 ?      ← Threshold vote per battery
          │                     │
          └──────────┬──────────┘
                     │
              ┌──────▼──────┐
              │  Combinator │   ← Stateful first, then Stateless,
              └──────┬──────┘     else Undetermined
                     │
              ┌──────▼──────┐
              │   Report    │
              └─────────────┘

Design principles:
  - Detectors are pure; the engine holds no mutable state and is reentrant.
  - Only the COUNT of fired signals matters, never which ones or in what order.
  - Diagnostics go to an injectable sink and to the module logger, not to a
    process-wide singleton.
"""

from __future__ import annotations

import hashlib
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from .batteries import SignalSink, gather, scatter, stateful_battery, stateless_battery
from .config import Settings
from .models import Classification, ClassificationReport

logger = logging.getLogger(__name__)


def combine(stateful_verdict: bool, stateless_verdict: bool) -> Classification:
    """Fixed priority: a stateful verdict always wins over a stateless one."""
    if stateful_verdict:
        return Classification.STATEFUL
    if stateless_verdict:
        return Classification.STATELESS
    return Classification.UNDETERMINED


class ClassificationEngine:
    """Classifies a document body as Stateful, Stateless or Undetermined.

    Usage:
        engine = ClassificationEngine()
        label = engine.classify(body)
        report = engine.analyze(body)   # label + per-detector diagnostics
    """

    def __init__(
        self,
        settings: Settings | None = None,
        signal_sink: Optional[SignalSink] = None,
    ):
        self.settings = settings or Settings()
        self.signal_sink = signal_sink
        self.stateful = stateful_battery(
            self.settings.stateful_threshold, self.settings.case_sensitive
        )
        self.stateless = stateless_battery(self.settings.stateless_threshold)

    def classify(self, body: str) -> Classification:
        """Return only the three-way label."""
        return self.analyze(body).classification

    def analyze(self, body: str) -> ClassificationReport:
        """Run both batteries and combine their verdicts.

        Args:
            body: The full document text (headers optional).

        Returns:
            ClassificationReport with the label, both battery results, and an
            audit hash of the input.
        """
        body_hash = hashlib.sha256(body.encode("utf-8", "surrogatepass")).hexdigest()

        # ── Scatter both batteries, then gather ─────────────────────
        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as pool:
            stateful_futures = scatter(self.stateful, body, pool)
            stateless_futures = scatter(self.stateless, body, pool)

            stateful_result = gather(self.stateful, stateful_futures, self.signal_sink)
            stateless_result = gather(self.stateless, stateless_futures, self.signal_sink)

        # ── Combine ─────────────────────────────────────────────────
        classification = combine(stateful_result.verdict, stateless_result.verdict)
        logger.info("Classification: %s", classification.value)

        return ClassificationReport(
            classification=classification,
            stateful=stateful_result,
            stateless=stateless_result,
            body_sha256=body_hash,
            body_length=len(body),
        )


def classify(body: str) -> Classification:
    """Classify with default settings."""
    return ClassificationEngine().classify(body)
