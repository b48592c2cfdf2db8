"""
Distribution detection for reclaim.

Maps /etc/os-release onto the small set of distributions whose package
tooling reclaim knows how to drive. Resolution never fails; anything it
cannot place becomes ``DistroTag.UNKNOWN``.
"""

import logging
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

OS_RELEASE_PATH = Path("/etc/os-release")
REDHAT_RELEASE_PATH = Path("/etc/redhat-release")


class DistroTag(Enum):
    """Supported distributions."""

    CENTOS = "centos"
    RHEL = "rhel"
    FEDORA = "fedora"
    DEBIAN = "debian"
    UBUNTU = "ubuntu"
    UNKNOWN = "unknown"

    @property
    def is_rpm(self) -> bool:
        return self in (DistroTag.CENTOS, DistroTag.RHEL, DistroTag.FEDORA)

    @property
    def is_deb(self) -> bool:
        return self in (DistroTag.DEBIAN, DistroTag.UBUNTU)

    @classmethod
    def from_id(cls, value: str) -> "DistroTag":
        """Map an os-release identifier to a tag, ``UNKNOWN`` if unsupported."""
        try:
            return cls(value.strip().strip("\"'").lower())
        except ValueError:
            return cls.UNKNOWN


def parse_os_release(text: str) -> dict[str, str]:
    """Parse os-release ``KEY=value`` lines into a dict with unquoted values."""
    fields = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        fields[key.strip()] = value.strip().strip("\"'")
    return fields


def resolve_distro(
    os_release: Path = OS_RELEASE_PATH,
    redhat_release: Path = REDHAT_RELEASE_PATH,
) -> DistroTag:
    """Detect the running distribution.

    ``ID`` wins when it is supported; otherwise each entry of ``ID_LIKE`` is
    tried in order, so derivatives such as Rocky or Mint resolve to their
    parent. Without an os-release file, a Red Hat release file still
    identifies the rpm family.
    """
    try:
        text = os_release.read_text(encoding="utf-8")
    except FileNotFoundError:
        if redhat_release.exists():
            return DistroTag.RHEL
        return DistroTag.UNKNOWN
    except OSError as e:
        logger.debug("Cannot read %s: %s", os_release, e)
        return DistroTag.UNKNOWN

    fields = parse_os_release(text)
    tag = DistroTag.from_id(fields.get("ID", ""))
    if tag is not DistroTag.UNKNOWN:
        return tag

    for candidate in fields.get("ID_LIKE", "").split():
        tag = DistroTag.from_id(candidate)
        if tag is not DistroTag.UNKNOWN:
            return tag

    return DistroTag.UNKNOWN
