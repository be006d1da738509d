"""Core constants used across SDB modules.

This module centralizes wire-format literals and runtime defaults.
Keeping values here avoids magic literals in codec and store logic.
"""

from __future__ import annotations

MAGIC_LINE = "#!SPRXDB t01"
HEAD_MARKER = "HEAD"
HEAD_END_MARKER = "HEAD END"
RECORD_TAG = "\nOBJ"
FOOTER = "\nEND"
TEXT_ENCODING = "utf-8"
HASH_ALGORITHM = "md5"
HEADER_FIELD_COUNT = 7
INITIAL_RECORD_VERSION = 1
RESERVED_ID_PREFIX = "__sdb_internal"
COMPOSITE_ID_SEPARATOR = "$"
MANIFEST_SEPARATOR = "\n"
DEFAULT_COMMENT = ""
DEFAULT_LOG_LEVEL = "info"
SUPPORTED_LOG_LEVELS = ("debug", "info", "warning", "error")
TRUE_ENV_VALUES = ("1", "true", "yes", "on")
FALSE_ENV_VALUES = ("0", "false", "no", "off", "")
