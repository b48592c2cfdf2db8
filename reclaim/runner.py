"""
Command runner: the single dry-run and logging gate.

Actions never call tools directly. They describe commands and hand them to
``CommandRunner.run``, which either logs what would happen (dry run) or
executes with output appended to the log, and decides whether a failure is
fatal.
"""

import logging
import subprocess
from enum import Enum
from typing import Optional, Sequence

from reclaim.commands import Command
from reclaim.config import RunConfig
from reclaim.errors import CommandFailedError
from reclaim.logsink import LogSink

logger = logging.getLogger(__name__)


class Outcome(Enum):
    OK = "ok"
    DRY_RUN = "dry_run"
    FAILED = "failed"


class CommandRunner:
    """Executes commands on behalf of cleanup actions."""

    def __init__(self, config: RunConfig, sink: LogSink):
        self.config = config
        self.sink = sink

    def run(self, command: Command, critical: bool = False) -> Outcome:
        """
        Run one command through the dry-run gate.

        Args:
            command: What to execute
            critical: Raise CommandFailedError on failure instead of warning

        Returns:
            Outcome: DRY_RUN when nothing was executed, OK or FAILED otherwise
        """
        if self.config.dry_run:
            self.sink.info("DRY RUN: Would run '%s'", command.description)
            return Outcome.DRY_RUN

        logger.debug("Running: %s", command.description)
        try:
            with self.sink.raw_stream() as stream:
                returncode = command.execute(stream)
        except FileNotFoundError as e:
            detail = f"not found: {e.filename or e}"
            returncode = None
        except OSError as e:
            detail = str(e)
            returncode = None
        else:
            detail = f"exit status {returncode}"

        if returncode == 0:
            return Outcome.OK

        logger.debug("%s failed: %s", command.description, detail)
        if critical:
            raise CommandFailedError(command.failure_message)

        self.sink.warning("%s (non-critical)", command.failure_message)
        return Outcome.FAILED

    def query(self, argv: Sequence[str]) -> Optional[str]:
        """Run a read-only command and return its stdout.

        Queries never change the system, so they run in dry-run mode too.
        Returns None if the tool is missing or exits non-zero.
        """
        try:
            result = subprocess.run(
                list(argv), capture_output=True, text=True, errors="replace", check=False
            )
        except OSError as e:
            logger.debug("Query %s failed: %s", " ".join(argv), e)
            return None

        if result.returncode != 0:
            logger.debug(
                "Query %s exited %d: %s", " ".join(argv), result.returncode, result.stderr.strip()
            )
            return None
        return result.stdout
