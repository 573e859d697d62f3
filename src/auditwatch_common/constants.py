"""Shared constants for the auditwatch ecosystem."""

from pathlib import Path

# Default paths (overridable via AuditwatchConfig / env vars)
DATA_DIR = Path("/var/lib/auditwatch")
DATABASE_FILENAME = "auditwatch.db"

# Durable collections
EVENTS_COLLECTION = "audit_events"
RULES_COLLECTION = "alert_rules"
CHANNELS_COLLECTION = "alert_channels"

# Flat config keys
SOURCE_CONFIG_KEY = "atlassian"
CURSOR_CONFIG_KEY = "stream.cursor"

# Cache namespaces and their default TTLs (seconds)
API_CACHE_TTL = 300
SESSION_CACHE_TTL = 3600
CONFIG_CACHE_TTL = 1800

# Upstream event stream
ATLASSIAN_BASE_URL = "https://api.atlassian.com/admin"
EVENT_SOURCE_NAME = "atlassian-audit-stream"
DEFAULT_POLL_LIMIT = 200

# Retention
DEFAULT_RETENTION_DAYS = 90
DEFAULT_MAX_EVENTS = 10_000
