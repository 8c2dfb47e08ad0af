#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for the readbin command line.

Defaults for the option schema live here so the schema table, the help
output and the tests agree on a single value for each of them.
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Program identity
# =============================================================================

PROGRAM_NAME = "bap"
DISTRIBUTION_NAME = "readbin"

# Prefix for environment variables that override option defaults
ENV_PREFIX = "BAP_"

# Read by the plugin loader, never parsed by readbin itself
PLUGIN_PATH_ENV = "BAP_PLUGIN_PATH"

# =============================================================================
# Option defaults
# =============================================================================

DEFAULT_LOADER = "llvm"
DEFAULT_BYTEWEIGHT_LENGTH = 16
DEFAULT_BYTEWEIGHT_THRESHOLD = 0.9

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LOG_LEVELS: tuple[LogLevel, ...] = ("DEBUG", "INFO", "WARNING", "ERROR")
DEFAULT_LOG_LEVEL: LogLevel = "WARNING"

# =============================================================================
# Plugin flag namespacing
# =============================================================================

# Plugin-owned flags look like --<plugin>-<flag>
PLUGIN_FLAG_TEMPLATE = "--{plugin}-"

# Option string suffix of the hidden companion used for a bare vopt flag
BARE_FLAG_SUFFIX = ":bare"

# =============================================================================
# Configuration files
# =============================================================================

CONFIG_SECTION = ("tool", "bap")
CONFIG_SUFFIXES = (".json", ".toml", ".yaml", ".yml")
