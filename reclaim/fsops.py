"""
Filesystem operations used by cleanup actions.

These run in-process behind ``FileCommand``. Targets that disappear while
an operation runs are ignored, so repeating a cleanup is harmless. Other
errors are collected and reported as a single ``OSError`` once every
target has been attempted.
"""

import fnmatch
import logging
import os
import shutil
import subprocess
import sys
import time
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Tuple

logger = logging.getLogger(__name__)


def format_size(size_bytes: float) -> str:
    """Format bytes into a human readable size."""
    for unit in ("B", "K", "M", "G", "T"):
        if size_bytes < 1024 or unit == "T":
            if unit == "B":
                return f"{int(size_bytes)}{unit}"
            return f"{size_bytes:.1f}{unit}"
        size_bytes /= 1024
    return f"{size_bytes:.1f}T"


def _raise_collected(action: str, errors: List[Tuple[str, OSError]]) -> None:
    if not errors:
        return
    path, first = errors[0]
    more = f" and {len(errors) - 1} more" if len(errors) > 1 else ""
    raise OSError(f"Could not {action} {path}: {first.strerror or first}{more}")


def _matches(name: str, patterns: Sequence[str]) -> bool:
    return any(fnmatch.fnmatch(name, pattern) for pattern in patterns)


def iter_matching_files(roots: Iterable[Path], patterns: Sequence[str]) -> Iterator[Path]:
    """Yield regular files below ``roots`` whose names match any pattern."""
    for root in roots:
        for dirpath, _, filenames in os.walk(root):
            for name in filenames:
                if not _matches(name, patterns):
                    continue
                path = Path(dirpath) / name
                if path.is_file() and not path.is_symlink():
                    yield path


def remove_matching_files(root: Path, patterns: Sequence[str], keep: Sequence[Path] = ()) -> None:
    """Recursively delete files under ``root`` matching ``patterns``."""
    protected = {Path(p) for p in keep}
    errors = []
    for path in list(iter_matching_files([root], patterns)):
        if path in protected:
            continue
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError as e:
            errors.append((str(path), e))
    _raise_collected("remove", errors)


def truncate_file(path: Path) -> None:
    """Empty a file in place, keeping its inode and permissions."""
    with open(path, "r+b") as f:
        f.truncate(0)


def _remove_tree(path: Path, errors: List[Tuple[str, OSError]]) -> None:
    # entries that vanish mid-walk count as removed
    def failed(func, failed_path, exc):
        if isinstance(exc, tuple):
            exc = exc[1]
        if not isinstance(exc, FileNotFoundError):
            errors.append((str(failed_path), exc))

    if sys.version_info >= (3, 12):
        shutil.rmtree(path, onexc=failed)
    else:
        shutil.rmtree(path, onerror=failed)


def remove_paths(paths: Iterable[Path]) -> None:
    """Delete files, links, and directory trees."""
    errors = []
    for path in paths:
        if path.is_dir() and not path.is_symlink():
            _remove_tree(path, errors)
            continue
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError as e:
            errors.append((str(path), e))
    _raise_collected("remove", errors)


def clear_directory(directory: Path) -> None:
    """Delete everything inside ``directory`` but keep the directory."""
    try:
        entries = list(directory.iterdir())
    except FileNotFoundError:
        return
    remove_paths(entries)


def remove_files_older_than(directory: Path, max_age_days: int) -> None:
    """Delete regular files directly inside ``directory`` older than the cutoff."""
    cutoff = time.time() - max_age_days * 86400
    stale = []
    for entry in directory.iterdir():
        try:
            st = entry.lstat()
        except FileNotFoundError:
            continue
        if entry.is_file() and not entry.is_symlink() and st.st_mtime < cutoff:
            stale.append(entry)
    remove_paths(stale)


def shred_matching_files(roots: Sequence[Path], patterns: Sequence[str]) -> None:
    """Overwrite and unlink matching files with ``shred -u``.

    Best effort: a file that cannot be shredded is left for the bulk delete
    that follows.
    """
    for path in list(iter_matching_files(roots, patterns)):
        try:
            result = subprocess.run(
                ["shred", "-u", str(path)], capture_output=True, text=True, check=False
            )
        except OSError as e:
            logger.debug("shred %s: %s", path, e)
            continue
        if result.returncode != 0:
            logger.debug("shred %s exited %d: %s", path, result.returncode, result.stderr.strip())


def find_large_files(root: Path, min_size: int, limit: int) -> List[Tuple[int, Path]]:
    """Return the ``limit`` largest regular files above ``min_size`` bytes.

    The walk stays on the filesystem that holds ``root``. Unreadable
    directories and files are skipped.
    """
    try:
        root_dev = os.lstat(root).st_dev
    except OSError as e:
        logger.debug("Cannot stat %s: %s", root, e)
        return []

    found = []
    for dirpath, dirnames, filenames in os.walk(root):
        kept = []
        for name in dirnames:
            try:
                if os.lstat(os.path.join(dirpath, name)).st_dev == root_dev:
                    kept.append(name)
            except OSError:
                continue
        dirnames[:] = kept

        for name in filenames:
            path = os.path.join(dirpath, name)
            try:
                st = os.lstat(path)
            except OSError:
                continue
            if st.st_dev == root_dev and os.path.isfile(path) and not os.path.islink(path):
                if st.st_size > min_size:
                    found.append((st.st_size, Path(path)))

    found.sort(key=lambda item: item[0], reverse=True)
    return found[:limit]


def large_file_report(root: Path, min_size: int, limit: int) -> str:
    """Render ``find_large_files`` as one ``size<TAB>path`` line per file."""
    rows = find_large_files(root, min_size, limit)
    if not rows:
        return f"No files larger than {format_size(min_size)} under {root}"
    return "\n".join(f"{format_size(size)}\t{path}" for size, path in rows)
