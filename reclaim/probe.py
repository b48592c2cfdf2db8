"""Existence checks shared by every cleanup action.

Absence of a target or an optional tool is never a failure, so each check
answers with a tri-state instead of a bool: present, absent, or error when
the question itself could not be answered (for example, stat was denied).
"""

import logging
import os
import shutil
import stat
from enum import Enum
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


class Presence(Enum):
    PRESENT = "present"
    ABSENT = "absent"
    ERROR = "error"


class PathKind(Enum):
    FILE = "file"
    DIRECTORY = "directory"
    ANY = "any"


def path_presence(path: Union[str, Path], kind: PathKind = PathKind.ANY) -> Presence:
    """Check whether ``path`` exists and is of the expected kind.

    A path of the wrong kind counts as absent: a directory where a log file
    is expected has nothing to truncate.
    """
    try:
        mode = os.stat(path).st_mode
    except FileNotFoundError:
        return Presence.ABSENT
    except OSError as e:
        logger.debug("Cannot stat %s: %s", path, e)
        return Presence.ERROR

    if kind is PathKind.FILE and not stat.S_ISREG(mode):
        return Presence.ABSENT
    if kind is PathKind.DIRECTORY and not stat.S_ISDIR(mode):
        return Presence.ABSENT
    return Presence.PRESENT


def tool_presence(name: str) -> Presence:
    """Check whether an executable is available on PATH."""
    try:
        found = shutil.which(name)
    except OSError as e:
        logger.debug("Cannot search PATH for %s: %s", name, e)
        return Presence.ERROR
    return Presence.PRESENT if found else Presence.ABSENT


def first_present_tool(*names: str) -> str | None:
    """Return the first of ``names`` found on PATH."""
    for name in names:
        if tool_presence(name) is Presence.PRESENT:
            return name
    return None
