"""Run configuration for reclaim.

Defaults are module constants. A handful of them can be overridden through
environment variables, optionally seeded from /etc/default/reclaim.
"""

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from reclaim.distro import DistroTag, resolve_distro

DEFAULT_LOG_PATH = "/var/log/system_cleanup.log"
DEFAULT_MAX_LOG_SIZE = 10 * 1024 * 1024
DEFAULT_MIN_FREE_SPACE_MB = 1024

ENV_FILE = Path("/etc/default/reclaim")
ENV_LOG_FILE = "RECLAIM_LOG_FILE"
ENV_MIN_FREE_MB = "RECLAIM_MIN_FREE_MB"
ENV_MAX_LOG_BYTES = "RECLAIM_MAX_LOG_BYTES"


@dataclass(frozen=True)
class RunConfig:
    """Immutable settings for one run.

    Attributes:
        dry_run: Log what would be done without doing it
        min_free_space_mb: Abort when / has less free space than this
        log_path: Append-only log file
        max_log_size: Rotate the log at startup when it is larger than this
        target_distro: Selects the package tooling each action drives
        verbose: Echo debug output to the terminal
    """

    dry_run: bool = False
    min_free_space_mb: int = DEFAULT_MIN_FREE_SPACE_MB
    log_path: str = DEFAULT_LOG_PATH
    max_log_size: int = DEFAULT_MAX_LOG_SIZE
    target_distro: DistroTag = DistroTag.UNKNOWN
    verbose: bool = False

    def __post_init__(self):
        if self.min_free_space_mb < 0:
            raise ValueError("min_free_space_mb must be non-negative")
        if self.max_log_size < 0:
            raise ValueError("max_log_size must be non-negative")


def load_env(env_file: Path = ENV_FILE) -> None:
    """Load KEY=value overrides from the system defaults file, if present.

    Variables already set in the environment take precedence.
    """
    if env_file.is_file():
        load_dotenv(env_file, override=False)


def _int_from_env(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def build_config(
    args: argparse.Namespace,
    environ: Optional[Mapping[str, str]] = None,
    distro: Optional[DistroTag] = None,
) -> RunConfig:
    """Build the run configuration from parsed flags and the environment."""
    if environ is None:
        environ = os.environ

    return RunConfig(
        dry_run=getattr(args, "dry_run", False),
        min_free_space_mb=_int_from_env(environ, ENV_MIN_FREE_MB, DEFAULT_MIN_FREE_SPACE_MB),
        log_path=environ.get(ENV_LOG_FILE) or DEFAULT_LOG_PATH,
        max_log_size=_int_from_env(environ, ENV_MAX_LOG_BYTES, DEFAULT_MAX_LOG_SIZE),
        target_distro=distro if distro is not None else resolve_distro(),
        verbose=getattr(args, "verbose", False),
    )
