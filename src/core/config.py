"""Runtime configuration model for SDB.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os

from core.constants import (
    DEFAULT_COMMENT,
    DEFAULT_LOG_LEVEL,
    FALSE_ENV_VALUES,
    SUPPORTED_LOG_LEVELS,
    TRUE_ENV_VALUES,
)
from core.errors import SdbConfigError


@dataclass(frozen=True)
class SdbConfig:
    """Validated runtime configuration.

    Attributes:
        default_comment: Comment written when a save call passes none.
        fail_on_skipped_rows: Treat any skipped header row as a failed load.
        log_level: Minimum level of emitted log events.
    """

    default_comment: str = DEFAULT_COMMENT
    fail_on_skipped_rows: bool = False
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "SdbConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            SdbConfigError: If environment values are invalid.
        """
        default_comment = os.getenv("SDB_DEFAULT_COMMENT", DEFAULT_COMMENT)
        fail_on_skipped_rows = _parse_flag(
            "SDB_FAIL_ON_SKIPPED_ROWS",
            os.getenv("SDB_FAIL_ON_SKIPPED_ROWS", "false"),
        )
        log_level = _parse_log_level(os.getenv("SDB_LOG_LEVEL", DEFAULT_LOG_LEVEL))
        return cls(
            default_comment=default_comment,
            fail_on_skipped_rows=fail_on_skipped_rows,
            log_level=log_level,
        )


def _parse_flag(name: str, raw_value: str) -> bool:
    """Parse a boolean environment flag.

    Args:
        name: Environment variable name, used in error messages.
        raw_value: Raw string from environment.

    Returns:
        Parsed flag value.

    Raises:
        SdbConfigError: If the value is not a recognized boolean word.
    """
    normalized = raw_value.strip().lower()
    if normalized in TRUE_ENV_VALUES:
        return True
    if normalized in FALSE_ENV_VALUES:
        return False
    raise SdbConfigError(
        f"Invalid {name} value: expected a boolean word such as "
        f"'true' or 'false', got '{raw_value}'."
    )


def _parse_log_level(raw_value: str) -> str:
    normalized = raw_value.strip().lower()
    if normalized not in SUPPORTED_LOG_LEVELS:
        raise SdbConfigError(
            "Invalid SDB_LOG_LEVEL value: "
            f"expected one of {SUPPORTED_LOG_LEVELS}, got '{raw_value}'."
        )
    return normalized
