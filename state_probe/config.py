"""
Runtime settings, read from the process environment.

Entry points call ``load_dotenv()`` first, so a local ``.env`` file works the
same as exported variables.  Bad values fail loudly with ConfigurationError
instead of silently falling back to a default.
"""

from __future__ import annotations

import os
from typing import Mapping

from pydantic import BaseModel, ValidationError, field_validator

from .exceptions import ConfigurationError

_ENV_PREFIX = "STATE_PROBE_"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


class Settings(BaseModel):
    """Tunables for the engine and the fetch collaborator."""

    stateful_threshold: int = 2
    stateless_threshold: int = 1
    case_sensitive: bool = False  # Set-Cookie marker and script keyword checks
    max_workers: int = 8
    fetch_timeout: float = 10.0  # Seconds
    include_headers: bool = True  # Prepend response headers to the fetched text

    model_config = {"frozen": True}

    @field_validator("stateful_threshold", "stateless_threshold", "max_workers")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be >= 1")
        return value

    @field_validator("fetch_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be > 0")
        return value

    @classmethod
    def build(cls, **values: object) -> Settings:
        """Construct settings, converting pydantic failures to ConfigurationError."""
        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid settings: {e.error_count()} error(s)",
                details={
                    ".".join(str(p) for p in err["loc"]): err["msg"]
                    for err in e.errors()
                },
            ) from e

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Read ``STATE_PROBE_*`` variables; unset ones keep their defaults."""
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        for field_name in cls.model_fields:
            raw = env.get(_ENV_PREFIX + field_name.upper())
            if raw is None or raw.strip() == "":
                continue
            if cls.model_fields[field_name].annotation is bool:
                values[field_name] = _parse_bool(field_name, raw)
            else:
                values[field_name] = raw.strip()

        return cls.build(**values)


def _parse_bool(field_name: str, raw: str) -> bool:
    """Strict boolean parsing: anything unrecognized is an error, not False."""
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"{_ENV_PREFIX}{field_name.upper()}={raw!r} is not a boolean",
        details={field_name: raw},
    )
