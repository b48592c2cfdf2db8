"""Tests for in-process filesystem operations."""

import os
import subprocess
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from reclaim.fsops import (
    clear_directory,
    find_large_files,
    format_size,
    large_file_report,
    remove_files_older_than,
    remove_matching_files,
    remove_paths,
    shred_matching_files,
    truncate_file,
)


def touch(path: Path, content: str = "data") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


def test_remove_matching_files_is_recursive(tmp_path):
    old = touch(tmp_path / "messages.1")
    gz = touch(tmp_path / "nginx" / "access.log.2.gz")
    stale = touch(tmp_path / "app" / "app.log.old")
    keep = touch(tmp_path / "messages")

    remove_matching_files(tmp_path, ("*.gz", "*.1", "*.old"))

    assert not old.exists() and not gz.exists() and not stale.exists()
    assert keep.exists()


def test_remove_matching_files_protects_kept_paths(tmp_path):
    active = touch(tmp_path / "cleanup.old")
    remove_matching_files(tmp_path, ("*.old",), keep=(active,))
    assert active.exists()


def test_remove_matching_files_twice_is_harmless(tmp_path):
    touch(tmp_path / "a.gz")
    remove_matching_files(tmp_path, ("*.gz",))
    remove_matching_files(tmp_path, ("*.gz",))


def test_remove_matching_files_missing_root(tmp_path):
    remove_matching_files(tmp_path / "missing", ("*.gz",))


def test_truncate_keeps_inode(tmp_path):
    log = touch(tmp_path / "secure", "x" * 100)
    inode = log.stat().st_ino
    truncate_file(log)
    assert log.stat().st_size == 0
    assert log.stat().st_ino == inode


def test_clear_directory_keeps_directory(tmp_path):
    touch(tmp_path / "tmp" / "a.txt")
    touch(tmp_path / "tmp" / "nested" / "b.txt")
    (tmp_path / "tmp" / "link").symlink_to(tmp_path / "tmp" / "nested")

    clear_directory(tmp_path / "tmp")

    assert (tmp_path / "tmp").is_dir()
    assert list((tmp_path / "tmp").iterdir()) == []


def test_clear_missing_directory(tmp_path):
    clear_directory(tmp_path / "missing")


def test_remove_paths_reports_failures_after_trying_all(tmp_path):
    first = touch(tmp_path / "first")
    second = touch(tmp_path / "second")
    real_unlink = Path.unlink

    def unlink(self, *args, **kwargs):
        if self.name == "first":
            raise PermissionError(13, "Permission denied")
        return real_unlink(self, *args, **kwargs)

    with patch.object(Path, "unlink", unlink):
        with pytest.raises(OSError, match="Could not remove .*first"):
            remove_paths([first, second])

    assert first.exists()
    assert not second.exists()


def test_remove_paths_continues_when_entry_vanishes_mid_tree(tmp_path, monkeypatch):
    tree = tmp_path / "session"
    touch(tree / "a.tmp")
    touch(tree / "b.tmp")
    touch(tree / "nested" / "c.tmp")
    real_unlink = os.unlink

    def unlink(path, *args, **kwargs):
        real_unlink(path, *args, **kwargs)
        if os.path.basename(path) == "a.tmp":
            raise FileNotFoundError(2, "No such file or directory", path)

    monkeypatch.setattr(os, "unlink", unlink)
    remove_paths([tree])
    monkeypatch.undo()

    assert not tree.exists()


def test_remove_paths_reports_failure_inside_tree(tmp_path, monkeypatch):
    tree = tmp_path / "session"
    touch(tree / "locked.tmp")
    touch(tree / "other.tmp")
    real_unlink = os.unlink

    def unlink(path, *args, **kwargs):
        if os.path.basename(path) == "locked.tmp":
            raise PermissionError(13, "Permission denied", path)
        return real_unlink(path, *args, **kwargs)

    monkeypatch.setattr(os, "unlink", unlink)
    with pytest.raises(OSError, match="Could not remove .*locked.tmp: Permission denied"):
        remove_paths([tree])
    monkeypatch.undo()

    assert (tree / "locked.tmp").exists()
    assert not (tree / "other.tmp").exists()


def test_remove_files_older_than(tmp_path):
    old = touch(tmp_path / "1700000000.M1.host")
    new = touch(tmp_path / "1700000001.M2.host")
    eight_days_ago = time.time() - 8 * 86400
    os.utime(old, (eight_days_ago, eight_days_ago))

    remove_files_older_than(tmp_path, 7)

    assert not old.exists()
    assert new.exists()


@patch("reclaim.fsops.subprocess.run")
def test_shred_targets_only_matching_files(mock_run, tmp_path):
    mock_run.return_value = subprocess.CompletedProcess([], 0, stdout="", stderr="")
    tmp_file = touch(tmp_path / "tmp" / "session.tmp")
    touch(tmp_path / "tmp" / "keep.txt")
    temp_file = touch(tmp_path / "var_tmp" / "deep" / "x.temp")

    shred_matching_files([tmp_path / "tmp", tmp_path / "var_tmp"], ("*.tmp", "*.temp"))

    shredded = sorted(c.args[0][2] for c in mock_run.call_args_list)
    assert shredded == sorted([str(tmp_file), str(temp_file)])


@patch("reclaim.fsops.subprocess.run")
def test_shred_failures_are_swallowed(mock_run, tmp_path):
    touch(tmp_path / "a.tmp")
    touch(tmp_path / "b.tmp")
    mock_run.side_effect = [
        subprocess.CompletedProcess([], 1, stdout="", stderr="shred: failed"),
        OSError("shred vanished"),
    ]

    shred_matching_files([tmp_path], ("*.tmp",))

    assert mock_run.call_count == 2


def test_find_large_files_sorted_and_limited(tmp_path):
    touch(tmp_path / "small", "x" * 5)
    touch(tmp_path / "medium", "x" * 50)
    touch(tmp_path / "big" / "large", "x" * 500)
    touch(tmp_path / "huge", "x" * 5000)

    found = find_large_files(tmp_path, min_size=10, limit=2)

    assert [size for size, _ in found] == [5000, 500]
    assert found[0][1] == tmp_path / "huge"


def test_find_large_files_skips_symlinks(tmp_path):
    target = touch(tmp_path / "real", "x" * 100)
    (tmp_path / "alias").symlink_to(target)
    assert find_large_files(tmp_path, min_size=10, limit=20) == [(100, target)]


def test_large_file_report(tmp_path):
    touch(tmp_path / "disk.img", "x" * 2048)
    assert large_file_report(tmp_path, 1024, 20) == f"2.0K\t{tmp_path / 'disk.img'}"
    assert large_file_report(tmp_path, 1024 * 1024, 20).startswith("No files larger than 1.0M")


def test_format_size():
    assert format_size(512) == "512B"
    assert format_size(100 * 1024 * 1024) == "100.0M"
    assert format_size(3 * 1024 ** 4) == "3.0T"
