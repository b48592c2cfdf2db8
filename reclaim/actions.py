"""
The cleanup actions, in execution order.

Each action is an inert description: a name, the line logged when it
starts, and a planner that inspects the host (read-only) and returns the
commands to hand to the runner. Planners raise ``ActionSkipped`` when there
is nothing to do and ``UnsupportedDistroError`` when the action needs
package tooling reclaim does not know for this distribution.
"""

import logging
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List

from reclaim.commands import Command, FileCommand, PipeCommand, ProcessCommand
from reclaim.config import RunConfig
from reclaim.distro import DistroTag
from reclaim.errors import ActionSkipped, UnsupportedDistroError
from reclaim.fsops import (
    clear_directory,
    format_size,
    large_file_report,
    remove_files_older_than,
    remove_matching_files,
    remove_paths,
    shred_matching_files,
    truncate_file,
)
from reclaim.logsink import LogSink
from reclaim.probe import PathKind, Presence, first_present_tool, path_presence, tool_presence
from reclaim.runner import CommandRunner

logger = logging.getLogger(__name__)

JOURNAL_MAX_SIZE = "500M"

LOG_DIR = Path("/var/log")
ROTATED_LOG_PATTERNS = ("*.gz", "*.1", "*.old")
ACTIVE_LOG_FILES = (
    Path("/var/log/messages"),
    Path("/var/log/secure"),
    Path("/var/log/maillog"),
    Path("/var/log/cron"),
    Path("/var/log/dmesg"),
    Path("/var/log/audit/audit.log"),
)

MYSQL_SLOW_LOG = Path("/var/lib/mysql/slow-query.log")

TEMP_DIRS = (Path("/tmp"), Path("/var/tmp"))
TEMP_FILE_PATTERNS = ("*.tmp", "*.temp")

CORE_DUMP_DIR = Path("/")
CORE_DUMP_PATTERN = "core*"

MAIL_DIR = Path("/root/Maildir/new")
MAIL_MAX_AGE_DAYS = 7

LOST_FOUND_DIR = Path("/lost+found")

AUDIT_ROOT = Path("/")
LARGE_FILE_THRESHOLD = 100 * 1024 * 1024
LARGE_FILE_LIMIT = 20

CONTAINER_ENGINES = ("docker", "podman")


@dataclass
class ActionContext:
    """What a planner may look at while deciding what to run."""

    config: RunConfig
    sink: LogSink
    runner: CommandRunner
    kernel_release: str = field(default_factory=platform.release)

    @property
    def distro(self) -> DistroTag:
        return self.config.target_distro


Planner = Callable[[ActionContext], List[Command]]


@dataclass(frozen=True)
class CleanupAction:
    name: str
    announce: str
    plan: Planner
    critical: bool = False


def _require_present(presence: Presence, subject: str, absent_message: str) -> None:
    if presence is Presence.ABSENT:
        raise ActionSkipped(absent_message)
    if presence is Presence.ERROR:
        raise ActionSkipped(f"Cannot check {subject}, skipping", warning=True)


# Package tooling


def plan_package_cache(ctx: ActionContext) -> List[Command]:
    failure = "Failed to clean package cache"
    if ctx.distro is DistroTag.FEDORA:
        return [ProcessCommand(["dnf", "clean", "all"], failure)]
    if ctx.distro.is_rpm:
        return [ProcessCommand(["yum", "clean", "all", "-y"], failure)]
    if ctx.distro.is_deb:
        return [ProcessCommand(["apt-get", "clean"], failure)]
    raise UnsupportedDistroError("package-cache", ctx.distro.value)


def plan_orphaned_packages(ctx: ActionContext) -> List[Command]:
    failure = "Failed to remove some orphaned packages"
    if ctx.distro is DistroTag.FEDORA:
        tool = "dnf"
        command = ProcessCommand(["dnf", "-y", "autoremove"], failure)
    elif ctx.distro.is_rpm:
        tool = "package-cleanup"
        command = PipeCommand(
            ["package-cleanup", "--quiet", "--leaves", "--exclude-bin"],
            ["yum", "-y", "remove"],
            failure,
        )
    elif ctx.distro.is_deb:
        tool = "apt-get"
        command = ProcessCommand(["apt-get", "-y", "autoremove", "--purge"], failure)
    else:
        raise UnsupportedDistroError("orphaned-packages", ctx.distro.value)

    _require_present(
        tool_presence(tool), tool, f"{tool} not found, skipping orphaned package removal"
    )
    return [command]


def _installed_kernels(ctx: ActionContext) -> List[str]:
    if ctx.distro.is_rpm:
        output = ctx.runner.query(["rpm", "-q", "kernel"])
        if output is None:
            raise ActionSkipped("Could not list installed kernels, skipping")
        return output.split()

    output = ctx.runner.query(
        ["dpkg-query", "-W", "-f=${db:Status-Abbrev} ${Package}\n", "linux-image-[0-9]*"]
    )
    if output is None:
        raise ActionSkipped("Could not list installed kernels, skipping")
    packages = []
    for line in output.splitlines():
        status, _, package = line.strip().partition(" ")
        if status.startswith("ii") and package:
            packages.append(package.strip())
    return packages


def plan_old_kernels(ctx: ActionContext) -> List[Command]:
    if not (ctx.distro.is_rpm or ctx.distro.is_deb):
        raise UnsupportedDistroError("old-kernels", ctx.distro.value)

    old = [pkg for pkg in _installed_kernels(ctx) if ctx.kernel_release not in pkg]
    if not old:
        raise ActionSkipped("No old kernels to remove")
    ctx.sink.info("Old kernels: %s", " ".join(old))

    if ctx.distro is DistroTag.FEDORA:
        remove = ["dnf", "remove", "-y"]
    elif ctx.distro.is_rpm:
        remove = ["yum", "remove", "-y"]
    else:
        remove = ["apt-get", "-y", "purge"]
    return [ProcessCommand(remove + old, "Failed to remove old kernels")]


# Logs


def plan_journal_vacuum(ctx: ActionContext) -> List[Command]:
    return [
        ProcessCommand(
            ["journalctl", f"--vacuum-size={JOURNAL_MAX_SIZE}"], "Failed to vacuum journal logs"
        )
    ]


def plan_log_files(ctx: ActionContext) -> List[Command]:
    active_log = Path(ctx.config.log_path)
    patterns = ", ".join(ROTATED_LOG_PATTERNS)
    commands: List[Command] = [
        FileCommand(
            remove_matching_files,
            description=f"remove files matching {patterns} under {LOG_DIR}",
            failure_message="Failed to remove some log files",
            args=(LOG_DIR, ROTATED_LOG_PATTERNS, (active_log,)),
        )
    ]

    for path in ACTIVE_LOG_FILES:
        if path == active_log:
            continue
        presence = path_presence(path, PathKind.FILE)
        if presence is Presence.ERROR:
            ctx.sink.warning("Cannot check %s, not truncating", path)
        if presence is not Presence.PRESENT:
            continue
        commands.append(
            FileCommand(
                truncate_file,
                description=f"truncate {path}",
                failure_message=f"Failed to truncate {path}",
                args=(path,),
            )
        )
    return commands


def plan_mysql_slow_log(ctx: ActionContext) -> List[Command]:
    _require_present(
        path_presence(MYSQL_SLOW_LOG, PathKind.FILE),
        str(MYSQL_SLOW_LOG),
        f"{MYSQL_SLOW_LOG} not found, skipping",
    )
    return [
        FileCommand(
            truncate_file,
            description=f"truncate {MYSQL_SLOW_LOG}",
            failure_message="Failed to clear MySQL slow query log",
            args=(MYSQL_SLOW_LOG,),
        )
    ]


# Files


def plan_temp_dirs(ctx: ActionContext) -> List[Command]:
    dirs = [d for d in TEMP_DIRS if path_presence(d, PathKind.DIRECTORY) is Presence.PRESENT]
    if not dirs:
        raise ActionSkipped("No temp directories found")

    commands: List[Command] = []
    if tool_presence("shred") is Presence.PRESENT:
        commands.append(
            FileCommand(
                shred_matching_files,
                description=(
                    f"shred -u files matching {', '.join(TEMP_FILE_PATTERNS)} "
                    f"under {' '.join(str(d) for d in dirs)}"
                ),
                failure_message="Failed to shred temp files",
                args=(dirs, TEMP_FILE_PATTERNS),
            )
        )
    else:
        logger.debug("shred not found, temp files will only be deleted")

    for directory in dirs:
        commands.append(
            FileCommand(
                clear_directory,
                description=f"remove {directory}/*",
                failure_message=f"Failed to clean some temp files in {directory}",
                args=(directory,),
            )
        )
    return commands


def plan_core_dumps(ctx: ActionContext) -> List[Command]:
    dumps = [
        path for path in sorted(CORE_DUMP_DIR.glob(CORE_DUMP_PATTERN))
        if path.is_file() or path.is_symlink()
    ]
    if not dumps:
        raise ActionSkipped("No core dump files found")
    return [
        FileCommand(
            remove_paths,
            description=f"remove {CORE_DUMP_DIR / CORE_DUMP_PATTERN} ({len(dumps)} files)",
            failure_message="Failed to remove some core dump files",
            args=(dumps,),
        )
    ]


def plan_old_mail(ctx: ActionContext) -> List[Command]:
    _require_present(
        path_presence(MAIL_DIR, PathKind.DIRECTORY),
        str(MAIL_DIR),
        f"{MAIL_DIR} not found, skipping old mail cleanup",
    )
    return [
        FileCommand(
            remove_files_older_than,
            description=f"remove files in {MAIL_DIR} older than {MAIL_MAX_AGE_DAYS} days",
            failure_message="Failed to clean some mail",
            args=(MAIL_DIR, MAIL_MAX_AGE_DAYS),
        )
    ]


def plan_lost_found(ctx: ActionContext) -> List[Command]:
    _require_present(
        path_presence(LOST_FOUND_DIR, PathKind.DIRECTORY),
        str(LOST_FOUND_DIR),
        f"{LOST_FOUND_DIR} not found, skipping",
    )
    return [
        FileCommand(
            clear_directory,
            description=f"remove {LOST_FOUND_DIR}/*",
            failure_message=f"Failed to clean {LOST_FOUND_DIR}",
            args=(LOST_FOUND_DIR,),
        )
    ]


def plan_large_file_audit(ctx: ActionContext) -> List[Command]:
    return [
        FileCommand(
            large_file_report,
            description=(
                f"list the {LARGE_FILE_LIMIT} largest files over "
                f"{format_size(LARGE_FILE_THRESHOLD)} on {AUDIT_ROOT} (one filesystem)"
            ),
            failure_message="Failed to find large files",
            args=(AUDIT_ROOT, LARGE_FILE_THRESHOLD, LARGE_FILE_LIMIT),
        )
    ]


# Containers


def plan_container_prune(ctx: ActionContext) -> List[Command]:
    engine = first_present_tool(*CONTAINER_ENGINES)
    if engine is None:
        raise ActionSkipped("No container engine found, skipping container cleanup")
    return [
        ProcessCommand(
            [engine, "system", "prune", "-f"], f"{engine.capitalize()} cleanup failed"
        )
    ]


ACTIONS = (
    CleanupAction("package-cache", "Cleaning package cache...", plan_package_cache),
    CleanupAction("orphaned-packages", "Removing orphaned packages...", plan_orphaned_packages),
    CleanupAction(
        "journal-vacuum", f"Vacuuming journal logs to {JOURNAL_MAX_SIZE}...", plan_journal_vacuum
    ),
    CleanupAction("log-files", "Removing rotated/compressed log files...", plan_log_files),
    CleanupAction("mysql-slow-log", "Clearing MySQL slow query log...", plan_mysql_slow_log),
    CleanupAction("temp-dirs", "Cleaning /tmp and /var/tmp...", plan_temp_dirs),
    CleanupAction("core-dumps", "Removing core dump files...", plan_core_dumps),
    CleanupAction(
        "old-mail",
        f"Removing unread root mail older than {MAIL_MAX_AGE_DAYS} days...",
        plan_old_mail,
    ),
    CleanupAction("lost-found", "Cleaning /lost+found...", plan_lost_found),
    CleanupAction(
        "large-file-audit", "Logging large files (>100MB) under / ...", plan_large_file_audit
    ),
    CleanupAction("old-kernels", "Checking for old kernels...", plan_old_kernels),
    CleanupAction("container-prune", "Cleaning up container engine...", plan_container_prune),
)
