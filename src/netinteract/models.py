"""Centralized defaults shared by the engine, accessors and CLI."""

# Status codes a fetch/submit accepts when the script does not list any
DEFAULT_ACCEPTED_STATUS_CODES = (200,)

# Browser-like agent string; some sites refuse requests without one
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Timeouts
DEFAULT_REQUEST_TIMEOUT = 30  # seconds
DEFAULT_NAVIGATION_TIMEOUT_MS = 30_000

# Maximum nesting of jump targets before a run is aborted
DEFAULT_MAX_JUMP_DEPTH = 64

# Network collaborator kinds understood by create_web_accessor()
ACCESSOR_KINDS = ("http", "playwright")
