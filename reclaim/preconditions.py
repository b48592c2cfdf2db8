"""Checks that must pass before any cleanup runs."""

import os
from typing import Callable

from reclaim.config import RunConfig
from reclaim.errors import InsufficientSpaceError, RootRequiredError
from reclaim.space import SpaceMeasurement, measure_free_space


def is_root() -> bool:
    return os.geteuid() == 0


def check_preconditions(
    config: RunConfig,
    measure: Callable[[], SpaceMeasurement] = measure_free_space,
) -> SpaceMeasurement:
    """Verify root privileges and enough free space on /.

    Root is checked first. Returns the measurement taken for the space check.

    Raises:
        RootRequiredError: The effective user is not root
        InsufficientSpaceError: Free space is below ``config.min_free_space_mb``
    """
    if not is_root():
        raise RootRequiredError()

    measurement = measure()
    if measurement.free_mb < config.min_free_space_mb:
        raise InsufficientSpaceError(measurement.free_mb)
    return measurement
