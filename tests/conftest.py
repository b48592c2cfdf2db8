import subprocess
from collections import namedtuple

import pytest

from reclaim import actions
from reclaim.config import RunConfig
from reclaim.distro import DistroTag
from reclaim.logsink import LogSink

MB = 1024 * 1024
DiskUsage = namedtuple("DiskUsage", "total used free")

DF_OUTPUT = "Filesystem      Size  Used Avail Use% Mounted on\n/dev/sda1        40G   20G   20G  50% /\n"
RPM_KERNELS = "kernel-5.14.0-70.el9.x86_64\nkernel-5.14.0-162.el9.x86_64\n"


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / "log" / "system_cleanup.log"


@pytest.fixture
def make_config(log_path):
    """Build a RunConfig logging into the test directory."""

    def _make(**overrides):
        values = {"log_path": str(log_path), "target_distro": DistroTag.CENTOS}
        values.update(overrides)
        return RunConfig(**values)

    return _make


@pytest.fixture
def sink(log_path):
    log_sink = LogSink(str(log_path), max_size=10 * MB)
    yield log_sink
    log_sink.close()


@pytest.fixture
def read_log(log_path):
    def _read():
        return log_path.read_text(encoding="utf-8") if log_path.exists() else ""

    return _read


@pytest.fixture
def sandbox(tmp_path, monkeypatch):
    """Point every cleanup target at a scratch tree instead of the host."""
    root = tmp_path / "host"
    log_dir = root / "var" / "log"
    (log_dir / "audit").mkdir(parents=True)
    tmp_dirs = (root / "tmp", root / "var" / "tmp")
    for d in tmp_dirs:
        d.mkdir(parents=True)
    mail_dir = root / "root" / "Maildir" / "new"
    mail_dir.mkdir(parents=True)
    lost_found = root / "lost+found"
    lost_found.mkdir()

    monkeypatch.setattr(actions, "LOG_DIR", log_dir)
    monkeypatch.setattr(
        actions,
        "ACTIVE_LOG_FILES",
        tuple(log_dir / name for name in ("messages", "secure", "maillog", "cron", "dmesg"))
        + (log_dir / "audit" / "audit.log",),
    )
    monkeypatch.setattr(actions, "MYSQL_SLOW_LOG", root / "var" / "lib" / "mysql" / "slow-query.log")
    monkeypatch.setattr(actions, "TEMP_DIRS", tmp_dirs)
    monkeypatch.setattr(actions, "CORE_DUMP_DIR", root)
    monkeypatch.setattr(actions, "MAIL_DIR", mail_dir)
    monkeypatch.setattr(actions, "LOST_FOUND_DIR", lost_found)
    monkeypatch.setattr(actions, "AUDIT_ROOT", root)
    return root


@pytest.fixture
def fake_run(monkeypatch):
    """Replace subprocess.run with a recorder that answers the queries reclaim makes."""
    calls = []

    def _run(argv, *args, **kwargs):
        calls.append(list(argv))
        stdout = ""
        if argv[0] == "df":
            stdout = DF_OUTPUT
        elif argv[:2] == ["rpm", "-q"]:
            stdout = RPM_KERNELS
        return subprocess.CompletedProcess(argv, 0, stdout=stdout, stderr="")

    monkeypatch.setattr(subprocess, "run", _run)
    return calls


@pytest.fixture
def free_space(monkeypatch):
    """Set the free space reported for /, in MB."""

    def _set(free_mb):
        monkeypatch.setattr(
            "reclaim.space.shutil.disk_usage",
            lambda path: DiskUsage(100_000 * MB, 0, free_mb * MB),
        )

    return _set
