"""
State Probe — Classify a web page as stateful, stateless, or undetermined.

Architecture: Fetch (single GET) → Detector batteries (scatter-gather) → Threshold vote → Label
Philosophy:  Count independent signals. Never trust a single weak one.
"""

__version__ = "1.0.0"
