"""
Server Settings

This module turns the client's ``initializationOptions`` and a handful of
environment variables into the settings the services run with.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import (
    DEFAULT_READTAGS_TIMEOUT,
    DEFAULT_TAG_PATTERNS,
    ENV_READTAGS,
    ENV_READTAGS_TIMEOUT,
    READTAGS_COMMAND,
)

logger = logging.getLogger(__name__)


def _env_timeout() -> float:
    raw = os.getenv(ENV_READTAGS_TIMEOUT)
    if not raw:
        return DEFAULT_READTAGS_TIMEOUT
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {ENV_READTAGS_TIMEOUT}={raw!r}")
        return DEFAULT_READTAGS_TIMEOUT


@dataclass
class ServerSettings:
    """Settings shared by the workspace registry and the tag index client."""

    tag_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_TAG_PATTERNS))
    readtags_command: str = READTAGS_COMMAND
    readtags_timeout: float = DEFAULT_READTAGS_TIMEOUT

    @classmethod
    def from_environment(cls) -> "ServerSettings":
        """Build settings from defaults plus environment overrides."""
        return cls(
            readtags_command=os.getenv(ENV_READTAGS) or READTAGS_COMMAND,
            readtags_timeout=_env_timeout(),
        )

    @classmethod
    def from_initialization_options(cls, options: Optional[Dict[str, Any]]) -> "ServerSettings":
        """
        Build settings from the client's initialization options.

        Options override environment values, which override defaults. A
        malformed option is logged and the previous value kept.

        Args:
            options: The ``initializationOptions`` object, or None

        Returns:
            The merged ServerSettings
        """
        settings = cls.from_environment()
        if not options:
            return settings
        if not isinstance(options, dict):
            logger.warning(f"Ignoring non-object initialization options: {options!r}")
            return settings

        tags = options.get("tags")
        if tags is not None:
            if isinstance(tags, list) and all(isinstance(t, str) for t in tags):
                settings.tag_patterns = list(tags)
            else:
                logger.warning(f"Ignoring invalid 'tags' option: {tags!r}")

        command = options.get("readtags")
        if command is not None:
            if isinstance(command, str) and command:
                settings.readtags_command = command
            else:
                logger.warning(f"Ignoring invalid 'readtags' option: {command!r}")

        timeout = options.get("readtagsTimeout")
        if timeout is not None:
            if isinstance(timeout, (int, float)) and not isinstance(timeout, bool) and timeout > 0:
                settings.readtags_timeout = float(timeout)
            else:
                logger.warning(f"Ignoring invalid 'readtagsTimeout' option: {timeout!r}")

        return settings
