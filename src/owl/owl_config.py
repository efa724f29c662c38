"""
Runtime settings for the OWL front end and its hosts.

Settings come from the environment and can be overridden by CLI flags:

    OWL_DIAGNOSTICS   "verbose" (default) or "terse" diagnostic rendering
    OWL_MAX_DEPTH     maximum nesting of groups, blocks and unary chains (default 32)
    OWL_LOG_LEVEL     logging level name for the `owl` logger (default WARNING)

Example:
    >>> settings = Settings.from_env({"OWL_DIAGNOSTICS": "terse"})
    >>> settings.diagnostic_style
    <DiagnosticStyle.TERSE: 'terse'>
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

DEFAULT_MAX_DEPTH = 32


class DiagnosticStyle(Enum):
    VERBOSE = "verbose"
    TERSE = "terse"


@dataclass
class Settings:
    """Resolved configuration for a parse run.

    Attributes:
        diagnostic_style (DiagnosticStyle): How diagnostics render their final line.
        max_depth (int): Nesting bound handed to the parser.
        log_level (str): Level name for the `owl` logger.
    """

    diagnostic_style: DiagnosticStyle = DiagnosticStyle.VERBOSE
    max_depth: int = DEFAULT_MAX_DEPTH
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Builds settings from ``environ`` (defaults to ``os.environ``).

        Raises:
            ValueError: If a variable holds an unrecognized value.
        """
        env = os.environ if environ is None else environ
        settings = cls()

        style = env.get("OWL_DIAGNOSTICS")
        if style:
            try:
                settings.diagnostic_style = DiagnosticStyle(style.strip().lower())
            except ValueError:
                raise ValueError(
                    f"OWL_DIAGNOSTICS must be 'verbose' or 'terse', got {style!r}"
                ) from None

        depth = env.get("OWL_MAX_DEPTH")
        if depth:
            settings.max_depth = parse_max_depth(depth)

        level = env.get("OWL_LOG_LEVEL")
        if level:
            settings.log_level = parse_log_level(level)

        return settings


def parse_max_depth(raw: str) -> int:
    try:
        depth = int(raw)
    except ValueError:
        raise ValueError(f"Max depth must be an integer, got {raw!r}") from None
    if depth < 1:
        raise ValueError(f"Max depth must be at least 1, got {depth}")
    return depth


def parse_log_level(raw: str) -> str:
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown log level {raw!r}")
    return level


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a stderr handler to the `owl` logger hierarchy."""
    logger = logging.getLogger("owl")
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    handler.setLevel(level)
    logger.addHandler(handler)
    return logger


__all__ = [
    "DEFAULT_MAX_DEPTH",
    "DiagnosticStyle",
    "Settings",
    "parse_log_level",
    "parse_max_depth",
    "setup_logging",
]
