"""Tests for the root and free-space checks."""

from unittest.mock import MagicMock, patch

import pytest

from reclaim.errors import FatalError, InsufficientSpaceError, RootRequiredError
from reclaim.preconditions import check_preconditions
from reclaim.space import SpaceMeasurement


@patch("reclaim.preconditions.os.geteuid", return_value=1000)
def test_non_root_rejected_before_measuring(mock_euid, make_config):
    measure = MagicMock()
    with pytest.raises(RootRequiredError, match="This script must be run as root"):
        check_preconditions(make_config(), measure=measure)
    measure.assert_not_called()


@patch("reclaim.preconditions.os.geteuid", return_value=0)
def test_insufficient_space(mock_euid, make_config):
    with pytest.raises(InsufficientSpaceError) as excinfo:
        check_preconditions(make_config(), measure=lambda: SpaceMeasurement(500))
    assert str(excinfo.value) == "Insufficient disk space (500 MB free), aborting"
    assert isinstance(excinfo.value, FatalError)


@patch("reclaim.preconditions.os.geteuid", return_value=0)
def test_threshold_is_inclusive(mock_euid, make_config):
    measurement = check_preconditions(make_config(), measure=lambda: SpaceMeasurement(1024))
    assert measurement.free_mb == 1024


@patch("reclaim.preconditions.os.geteuid", return_value=0)
def test_custom_threshold(mock_euid, make_config):
    with pytest.raises(InsufficientSpaceError):
        check_preconditions(make_config(min_free_space_mb=4096), measure=lambda: SpaceMeasurement(2048))
