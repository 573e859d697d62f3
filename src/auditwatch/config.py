"""auditwatch configuration — singleton AuditwatchConfig resolved at startup."""

from __future__ import annotations

from functools import lru_cache

from auditwatch_common import AuditwatchConfig


@lru_cache(maxsize=1)
def get_config() -> AuditwatchConfig:
    """Return the global AuditwatchConfig (resolved once, cached)."""
    return AuditwatchConfig()
