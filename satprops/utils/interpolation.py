"""Interpolation primitives for tabulated saturation functions and
depth tables"""

import logging
from typing import Sequence, Tuple

import numpy as np
from scipy.interpolate import interp1d

logger = logging.getLogger(__name__)


def linear_interpolation(
    xvalues: np.ndarray, yvalues: np.ndarray, xpoint: float
) -> Tuple[float, float]:
    """Evaluate a piecewise linear function and its derivative.

    Outside the tabulated interval the function is extrapolated
    constantly, and the derivative is zero. At a tabulated point the
    derivative is taken from the segment to the right, except at the last
    point where the last segment is used.

    Args:
        xvalues: Strictly increasing x data, at least two values
        yvalues: y data, same length as xvalues
        xpoint: Where to evaluate

    Returns:
        Tuple with the interpolated value and the derivative
    """
    if xpoint < xvalues[0]:
        return float(yvalues[0]), 0.0
    if xpoint > xvalues[-1]:
        return float(yvalues[-1]), 0.0
    idx = int(np.searchsorted(xvalues, xpoint, side="right")) - 1
    idx = min(max(idx, 0), len(xvalues) - 2)
    slope = (yvalues[idx + 1] - yvalues[idx]) / (xvalues[idx + 1] - xvalues[idx])
    return float(yvalues[idx] + slope * (xpoint - xvalues[idx])), float(slope)


def interpolate_in_depth(
    depths: Sequence[float], values: Sequence[float], cell_depths: np.ndarray
) -> np.ndarray:
    """Linear interpolation of a property versus depth table.

    Depths outside the span of the table give NaN, there is no
    extrapolation. Rows with NaN in the value column are ignored.

    Args:
        depths: Increasing depth column
        values: Property values for each depth
        cell_depths: Depths to interpolate at

    Returns:
        Array of the same length as cell_depths.
    """
    depths = np.asarray(depths, dtype=float)
    values = np.asarray(values, dtype=float)
    cell_depths = np.asarray(cell_depths, dtype=float)
    valid = ~np.isnan(values)
    depths = depths[valid]
    values = values[valid]
    if len(depths) == 0:
        return np.full(len(cell_depths), np.nan)
    if (np.diff(depths) < 0).any():
        raise ValueError("Depth column in depth table is not increasing")
    if len(depths) == 1:
        return np.where(np.isclose(cell_depths, depths[0]), values[0], np.nan)
    interpolator = interp1d(
        depths,
        values,
        kind="linear",
        bounds_error=False,
        fill_value=np.nan,
        assume_sorted=True,
    )
    return interpolator(cell_depths)
