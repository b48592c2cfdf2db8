import argparse
import sys
from typing import List, Optional

from reclaim import __version__
from reclaim.config import RunConfig, build_config, load_env
from reclaim.errors import FatalError
from reclaim.logsink import LogSink
from reclaim.orchestrator import Orchestrator
from reclaim.preconditions import check_preconditions
from reclaim.ui import console, space_summary_panel


class UsageExit(Exception):
    """Raised instead of exiting when the command line is malformed."""


class ReclaimArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with exit status 1."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        print(f"{self.prog}: error: {message}", file=sys.stderr)
        raise UsageExit(message)


def build_parser() -> argparse.ArgumentParser:
    parser = ReclaimArgumentParser(
        prog="reclaim",
        description="Free disk space on a Linux host",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sudo reclaim -n        # Show what would be cleaned
  sudo reclaim           # Clean caches, logs, temp files, old kernels

Environment Variables:
  RECLAIM_LOG_FILE       Log file (default /var/log/system_cleanup.log)
  RECLAIM_MIN_FREE_MB    Abort below this much free space on / (default 1024)
  RECLAIM_MAX_LOG_BYTES  Rotate the log at startup above this size (default 10 MiB)
        """,
    )
    parser.add_argument(
        "-n", "--dry-run", action="store_true", help="Log what would be done without changing anything"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug output")
    parser.add_argument("--version", "-V", action="version", version=f"reclaim {__version__}")
    return parser


def run(config: RunConfig, sink: LogSink) -> int:
    """Check preconditions and run the cleanup, turning fatal errors into exit 1."""
    if config.dry_run:
        sink.info("Dry run mode enabled - no changes will be made")

    try:
        check_preconditions(config)
        orchestrator = Orchestrator(config, sink)
        status = orchestrator.run()
    except FatalError as e:
        sink.error("%s", e)
        return 1

    space_summary_panel(
        orchestrator.start.free_mb,
        orchestrator.end.free_mb,
        config.dry_run,
        str(sink.path) if sink.path else None,
    )
    return status


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except UsageExit:
        return 1

    try:
        load_env()
        config = build_config(args)
    except ValueError as e:
        console.error(f"Invalid configuration: {e}")
        return 1

    try:
        sink = LogSink.from_config(config)
    except OSError as e:
        sink = LogSink.terminal_only(verbose=config.verbose)
        sink.warning("Cannot open log file %s: %s, logging to the terminal only", config.log_path, e)

    try:
        return run(config, sink)
    except KeyboardInterrupt:
        sink.error("Interrupted, aborting")
        return 130
    finally:
        sink.close()


if __name__ == "__main__":
    sys.exit(main())
