"""Centralized defaults for tollsync. Overridable via configuration."""

from __future__ import annotations

# =============================================================================
# RETRIEVAL
# =============================================================================

DEFAULT_PAGE_SIZE = 100
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 200

# =============================================================================
# PUBLISH FORMAT
# =============================================================================

CARDS_JSONP_PREFIX = "__yigaosuCards"
BILLS_JSONP_PREFIX = "__yigaosuBills"
CARDS_FILENAME = "cards.js"
BILLS_FILE_SUFFIX = ".js"

# =============================================================================
# GIT
# =============================================================================

DEFAULT_REMOTE_NAME = "origin"
DEFAULT_BRANCH = "main"
COMMIT_MESSAGE_PREFIX = "update "

# =============================================================================
# CONFIGURATION
# =============================================================================

DEFAULT_CONFIG_FILENAME = ".tollsync.toml"
SSH_KEY_BITS = 2048

# =============================================================================
# RETRY / TIMEOUTS
# =============================================================================

DEFAULT_TIMEOUT_SECONDS = 60
GIT_TIMEOUT_SECONDS = 300
DEBUG_BODY_LIMIT = 1024
