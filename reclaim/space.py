"""
Free-space measurement and the end-of-run disk report.
"""

import shutil
from dataclasses import dataclass, field
from datetime import datetime

from reclaim.logsink import LogSink
from reclaim.runner import CommandRunner

ROOT_MOUNT = "/"
BYTES_PER_MB = 1024 * 1024


@dataclass(frozen=True)
class SpaceMeasurement:
    """Free space available to unprivileged users on a mount point."""

    free_mb: int
    taken_at: datetime = field(default_factory=datetime.now)


def measure_free_space(path: str = ROOT_MOUNT) -> SpaceMeasurement:
    """Measure available space in whole megabytes, like ``df -m``'s Avail."""
    return SpaceMeasurement(free_mb=shutil.disk_usage(path).free // BYTES_PER_MB)


def generate_report(
    start: SpaceMeasurement,
    end: SpaceMeasurement,
    sink: LogSink,
    runner: CommandRunner,
) -> int:
    """Log free space before and after, then df snapshots.

    Returns the delta in MB; negative when something else wrote to the disk
    during the run.
    """
    freed = end.free_mb - start.free_mb

    sink.info("========== Disk Space Report ==========")
    sink.info("Free space at start: %d MB", start.free_mb)
    sink.info("Free space at end: %d MB", end.free_mb)
    sink.info("Total space freed: %d MB", freed)

    sink.info("========== Detailed Disk Usage ==========")
    _append_snapshot(sink, runner, ["df", "-h"])

    sink.info("========== Inode Usage ==========")
    _append_snapshot(sink, runner, ["df", "-i", ROOT_MOUNT])

    return freed


def _append_snapshot(sink: LogSink, runner: CommandRunner, argv: list) -> None:
    output = runner.query(argv)
    if output is None:
        sink.warning("Could not run '%s'", " ".join(argv))
        return
    sink.write_raw(output)
