"""
Pydantic models for classification results.

The engine's only required output is a Classification label. Everything else
here is diagnostic: which detectors fired, how many per battery, and an audit
hash of the text that was classified.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


# ─── Classification Label ───────────────────────────────────────────


class Classification(str, Enum):
    """The engine's three-way verdict on a page's interaction model."""

    STATEFUL = "Stateful"  # Relies on server-side session state
    STATELESS = "Stateless"  # Self-describing, resource-oriented requests
    UNDETERMINED = "Undetermined"  # Neither battery reached its threshold


# ─── Diagnostics ────────────────────────────────────────────────────


class DetectorSignal(BaseModel):
    """One detector's boolean output over a document body."""

    detector: str  # Stable detector name, e.g. "hidden_field"
    fired: bool


class BatteryResult(BaseModel):
    """A battery's signals reduced to a verdict by threshold vote."""

    battery: str  # "stateful" or "stateless"
    threshold: int
    signals: list[DetectorSignal] = Field(default_factory=list)
    true_count: int
    verdict: bool

    def fired(self) -> list[str]:
        """Names of the detectors that fired, in declaration order."""
        return [s.detector for s in self.signals if s.fired]


class ClassificationReport(BaseModel):
    """The full output of one engine run."""

    classification: Classification
    stateful: BatteryResult
    stateless: BatteryResult
    body_sha256: str  # SHA-256 of the classified text, for audit trail
    body_length: int


# ─── Fetch Collaborator Output ──────────────────────────────────────


class FetchedDocument(BaseModel):
    """The text handed to the engine after a single GET."""

    url: str
    status_code: int
    text: str  # Header block (optional) + fully drained body
