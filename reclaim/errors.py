"""Exception taxonomy for reclaim.

Two tiers: ``FatalError`` subclasses abort the whole run with exit
status 1, everything else is logged and the run continues.
"""


class ReclaimError(Exception):
    """Base class for reclaim errors."""


class FatalError(ReclaimError):
    """An error that terminates the run."""


class RootRequiredError(FatalError):
    """The effective user is not root."""

    def __init__(self, message: str = "This script must be run as root"):
        super().__init__(message)


class InsufficientSpaceError(FatalError):
    """Free space on the root filesystem is below the configured minimum."""

    def __init__(self, free_mb: int):
        self.free_mb = free_mb
        super().__init__(f"Insufficient disk space ({free_mb} MB free), aborting")


class CommandFailedError(FatalError):
    """A command run with ``critical=True`` failed."""


class UnsupportedDistroError(ReclaimError):
    """A distro-specific action was planned on an unsupported distribution."""

    def __init__(self, action: str, distro: str):
        self.action = action
        self.distro = distro
        super().__init__(f"{action} is not supported on distribution '{distro}'")


class ActionSkipped(ReclaimError):
    """Raised by an action planner when there is nothing to do.

    Never treated as a failure. The message is logged at info level, or as
    a warning when the skip was forced by an error such as an unreadable
    target.
    """

    def __init__(self, message: str, warning: bool = False):
        self.warning = warning
        super().__init__(message)
