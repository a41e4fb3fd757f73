"""Constants for the configuration module."""

DEFAULT_CONFIG_FILE = "config.yaml"

# ai
DEFAULT_AI_MODEL = "gpt-4o-mini"
DEFAULT_AI_LANGUAGE = "Chinese"

# sources
DEFAULT_HN_LIMIT = 30
DEFAULT_TOP_N = 20
DEFAULT_V2EX_PAGES = 3
DEFAULT_EXCLUDE_NODES = ("promotions", "deals", "cv", "exchange")

# publication ledger window
DEFAULT_SKIP_HOURS = 72.0

# extractor
DEFAULT_EXTRACTOR_CONCURRENCY = 3
DEFAULT_EXTRACTOR_MAX_LENGTH = 5000
DEFAULT_EXTRACTOR_TIMEOUT_SECONDS = 15.0

# Log component names
COMPONENT_CONFIG = "config"
COMPONENT_CLI = "cli"
