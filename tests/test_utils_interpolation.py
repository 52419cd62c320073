"""Test the interpolation primitives"""

import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from satprops.utils.interpolation import interpolate_in_depth, linear_interpolation


@pytest.mark.parametrize(
    "xpoint, expected_value, expected_deriv",
    [
        (-1.0, 0.0, 0.0),
        (0.0, 0.0, 1.0),
        (0.25, 0.25, 1.0),
        (0.5, 0.5, 3.0),
        (0.75, 1.25, 3.0),
        (1.0, 2.0, 3.0),
        (2.0, 2.0, 0.0),
    ],
)
def test_linear_interpolation(xpoint, expected_value, expected_deriv):
    """Value and derivative, right-sided derivative at interior points"""
    xvalues = np.array([0.0, 0.5, 1.0])
    yvalues = np.array([0.0, 0.5, 2.0])
    value, deriv = linear_interpolation(xvalues, yvalues, xpoint)
    assert np.isclose(value, expected_value)
    assert np.isclose(deriv, expected_deriv)


@given(st.floats(min_value=-0.5, max_value=1.5))
def test_linear_interpolation_matches_numpy(xpoint):
    xvalues = np.array([0.0, 0.2, 0.7, 1.0])
    yvalues = np.array([1.0, 0.5, 0.1, 0.0])
    value, _ = linear_interpolation(xvalues, yvalues, xpoint)
    assert np.isclose(value, np.interp(xpoint, xvalues, yvalues))


def test_interpolate_in_depth():
    depths = [1000.0, 2000.0]
    values = [0.1, 0.3]
    cell_depths = np.array([900.0, 1000.0, 1500.0, 2000.0, 2100.0])
    result = interpolate_in_depth(depths, values, cell_depths)
    assert np.isnan(result[0])
    assert np.allclose(result[1:4], [0.1, 0.2, 0.3])
    assert np.isnan(result[4])


def test_interpolate_in_depth_nan_values():
    """Rows without values are skipped, all-NaN gives only NaN"""
    result = interpolate_in_depth(
        [1000, 1500, 2000], [0.1, np.nan, 0.3], np.array([1500.0])
    )
    assert np.isclose(result[0], 0.2)
    all_nan = interpolate_in_depth([1000, 2000], [np.nan, np.nan], np.array([1500.0]))
    assert np.isnan(all_nan).all()


def test_interpolate_in_depth_single_row():
    result = interpolate_in_depth([1000], [0.2], np.array([1000.0, 1001.0]))
    assert result[0] == 0.2
    assert np.isnan(result[1])


def test_interpolate_in_depth_not_increasing():
    with pytest.raises(ValueError, match="not increasing"):
        interpolate_in_depth([2000, 1000], [0.1, 0.2], np.array([1500.0]))
