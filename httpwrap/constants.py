"""HTTP constants for the client layer.

Centralizes the constants shared by the executor, classifier and loggers.
"""

# Content types
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_PROBLEM_JSON = "application/problem+json"
JSON_CONTENT_TYPE_SUFFIX = "+json"

# Transport defaults
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_RETRIES = 0

# Response cache defaults
DEFAULT_CACHE_MAXSIZE = 1024
DEFAULT_CACHE_TTL_SECONDS = 60.0

# Placeholder substituted for sensitive values in logs
REDACTED_VALUE = "<redacted>"

# Banner line framing text-logger failure entries
LOG_BANNER = "-" * 68

# ``component`` values bound by the library's structlog loggers
LOG_COMPONENT_CLIENT = "http_client"
LOG_COMPONENT_CACHE = "cache"
LOG_COMPONENT_STUB = "stub_http_client"
LOG_COMPONENTS = frozenset(
    {LOG_COMPONENT_CLIENT, LOG_COMPONENT_CACHE, LOG_COMPONENT_STUB}
)
