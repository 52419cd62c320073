"""Test module for locating endpoints in relperm curves"""

import numpy as np
import pytest

from satprops.utils.relperm import critical_saturation, immobile_saturation


@pytest.mark.parametrize(
    "relperm, expected",
    [
        pytest.param([0, 0, 0.1, 0.5, 1], 0.25, id="two_zeros"),
        pytest.param([0, 0.1, 0.2, 0.5, 1], 0.0, id="one_zero"),
        pytest.param([0.1, 0.2, 0.3, 0.5, 1], 0.0, id="no_zero"),
        pytest.param([0, 0, 0, 0, 1], 0.75, id="late"),
        pytest.param([0, 0, 0, 0, 0], 1.0, id="all_zero"),
    ],
)
def test_critical_saturation(relperm, expected):
    sat = np.linspace(0, 1, 5)
    assert critical_saturation(sat, np.array(relperm)) == expected


@pytest.mark.parametrize(
    "relperm, expected",
    [
        pytest.param([1, 0.5, 0.1, 0, 0], 0.75, id="two_zeros"),
        pytest.param([1, 0.5, 0.2, 0.1, 0], 1.0, id="last_zero"),
        pytest.param([1, 0.5, 0.2, 0.1, 0.05], 1.0, id="no_zero"),
        pytest.param([1, 0, 0, 0, 0], 0.25, id="early"),
        pytest.param([0, 0, 0, 0, 0], 0.0, id="all_zero"),
    ],
)
def test_immobile_saturation(relperm, expected):
    sat = np.linspace(0, 1, 5)
    assert immobile_saturation(sat, np.array(relperm)) == expected
