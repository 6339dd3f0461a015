"""
Custom exception hierarchy for State Probe.

The classification engine itself never raises: every detector is total over
any text. These exceptions cover the collaborators around it (fetching the
page, loading configuration) so callers can report failures precisely.
"""

from __future__ import annotations


class StateProbeError(Exception):
    """Base exception for all State Probe failures."""

    def __init__(self, code: str, message: str, details: dict | None = None):
        self.code = code
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(StateProbeError):
    """A setting (threshold, worker count, env value) is out of range or unparseable."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("CONFIG_INVALID", message, details)


class FetchError(StateProbeError):
    """Base for failures of the single-GET fetch. Never retried."""


class RequestConstructionError(FetchError):
    """The request could not be built (empty URL, missing scheme, bad host)."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("REQUEST_INVALID", message, details)


class TransportError(FetchError):
    """The request was sent but the network or server failed to answer."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__("TRANSPORT_FAILED", message, details)
