"""Utility functions for locating endpoints in tabulated relperm curves"""

import logging

import numpy as np

logger = logging.getLogger(__name__)


def critical_saturation(saturations: np.ndarray, relperm: np.ndarray) -> float:
    """Locate the critical saturation of an increasing relperm curve

    This is the largest saturation where the relperm is zero before it
    becomes positive. If the first relperm value is positive, the first
    saturation is returned.

    Args:
        saturations: Increasing saturation values
        relperm: Relperm values, non-decreasing

    Returns:
        The critical saturation.
    """
    positive = np.nonzero(np.asarray(relperm) > 0.0)[0]
    if len(positive) == 0:
        logger.warning("Relperm curve is zero everywhere")
        return float(saturations[-1])
    return float(saturations[max(positive[0] - 1, 0)])


def immobile_saturation(saturations: np.ndarray, relperm: np.ndarray) -> float:
    """Locate where a decreasing relperm curve becomes zero

    This is the smallest saturation from which the relperm stays zero
    for all larger saturations, typically ``1 - sorw`` for a krow curve
    as a function of water saturation. If the last relperm value is
    positive, the last saturation is returned.

    Args:
        saturations: Increasing saturation values
        relperm: Relperm values, non-increasing

    Returns:
        The saturation at which the curve reaches zero.
    """
    positive = np.nonzero(np.asarray(relperm) > 0.0)[0]
    if len(positive) == 0:
        logger.warning("Relperm curve is zero everywhere")
        return float(saturations[0])
    return float(saturations[min(positive[-1] + 1, len(saturations) - 1)])
