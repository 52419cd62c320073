"""Test saturation history tracking and scanning curves"""

import copy

import numpy as np
import pandas as pd
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from satprops import (
    CellRegionMap,
    CurveFamily,
    HysteresisState,
    PhaseUsage,
    RegionTable,
    SaturationOptions,
    SaturationProps,
)
from satprops.utils.testing import corey_swof


def hysteresis_options():
    return SaturationOptions(
        satopts="HYSTER", ehystr=[0.1, 0, 1.0, 0.1, "KR"], endscale=True
    )


@pytest.fixture
def wo_hyst(wo_table):
    """Oil-water with an imbibition critical oil saturation of 0.3,
    while the drainage curve has 0.2"""
    return SaturationProps(
        wo_table.phase_usage,
        [wo_table],
        CellRegionMap(2, 1),
        options=hysteresis_options(),
        scaling_arrays={"ISOWCR": [0.3, 0.3]},
    )


def test_state():
    state = HysteresisState()
    assert state.get(CurveFamily.WATER_OIL) == (-1.0, 0.0)
    assert state.get(CurveFamily.GAS) == (-1.0, 0.0)
    state.set(CurveFamily.GAS, 0.4, 0.1)
    assert state.sg_max == 0.4
    assert state.sg_shift == 0.1
    assert "sg_max=0.4" in repr(state)
    with pytest.raises(ValueError):
        state.get(CurveFamily.WATER)
    with pytest.raises(ValueError):
        state.set(CurveFamily.GAS_OIL, 0.4, 0.1)


def test_no_hysteresis(wo_table):
    props = SaturationProps(wo_table.phase_usage, [wo_table], CellRegionMap(1, 1))
    assert not props.hysteresis
    assert props.hysteresis_state(0) is None
    assert props.imbibition_transforms(0) is None
    # No effect:
    props.update_hysteresis_state([0.3, 0.7], [0])


def test_initial_state_is_drainage(wo_hyst, wo_table):
    """Without saturation history, the drainage curves are used"""
    assert wo_hyst.hysteresis
    assert wo_hyst.hysteresis_state(0).so_max == -1.0
    relperm, _ = wo_hyst.relative_permeability([0.5, 0.5], [0])
    assert relperm[1] == pytest.approx(wo_table.krow(0.5))


def test_maximum_oil_saturation(wo_hyst):
    """The maximum oil saturation is the complement of the minimum water
    saturation seen"""
    water_saturations = [0.5, 0.3, 0.4, 0.25, 0.6, 0.35]
    for swat in water_saturations:
        wo_hyst.update_hysteresis_state([swat, 1 - swat], [0])
    assert wo_hyst.hysteresis_state(0).so_max == pytest.approx(
        1 - min(water_saturations)
    )
    # The other cell has no history:
    assert wo_hyst.hysteresis_state(1).so_max == -1.0


def test_scanning_curve(wo_hyst, wo_table):
    """Below the historical maximum the imbibition curve is followed,
    shifted to meet the drainage curve at the maximum"""
    wo_hyst.update_hysteresis_state([0.3, 0.7], [0])
    state = wo_hyst.hysteresis_state(0)
    assert state.so_max == pytest.approx(0.7)
    # imbibition krow(so) = krow_table(1 - (0.2 + (so - 0.3) * 7 / 6))
    assert state.so_shift == pytest.approx(0.3 + 0.5 * 6 / 7 - 0.7, abs=1e-6)

    drainage_at_max = wo_table.krow(0.3)
    just_below, _ = wo_hyst.relative_permeability([0.3 + 1e-7, 0.7 - 1e-7], [0])
    assert just_below[1] == pytest.approx(drainage_at_max, abs=1e-5)

    scanning, _ = wo_hyst.relative_permeability([0.5, 0.5], [0])
    assert scanning[1] < wo_table.krow(0.5)
    table_so = 0.2 + (0.5 + state.so_shift - 0.3) * 7 / 6
    assert scanning[1] == pytest.approx(wo_table.krow(1 - table_so), abs=1e-6)

    # At and above the maximum, drainage again:
    at_max, _ = wo_hyst.relative_permeability([0.3, 0.7], [0])
    assert at_max[1] == pytest.approx(drainage_at_max)
    # Water follows the drainage curve:
    assert scanning[0] == pytest.approx(wo_table.krw(0.5))


def test_transforms_unchanged(wo_hyst):
    drainage = copy.deepcopy(vars(wo_hyst.transforms(0).watoil))
    imbibition = copy.deepcopy(vars(wo_hyst.imbibition_transforms(0).watoil))
    for swat in [0.5, 0.3, 0.6, 0.2]:
        wo_hyst.update_hysteresis_state([swat, 1 - swat], [0])
    assert vars(wo_hyst.transforms(0).watoil) == drainage
    assert vars(wo_hyst.imbibition_transforms(0).watoil) == imbibition


@settings(max_examples=50, deadline=None)
@given(st.lists(st.floats(min_value=0.1, max_value=0.9), min_size=1, max_size=15))
def test_monotone_maximum(water_saturations):
    """The historical maximum never decreases"""
    table = RegionTable(PhaseUsage("water,oil"), swof=corey_swof())
    props = SaturationProps(
        table.phase_usage,
        [table],
        CellRegionMap(1, 1),
        options=hysteresis_options(),
        scaling_arrays={"ISOWCR": [0.3]},
    )
    so_max = -1.0
    for swat in water_saturations:
        props.update_hysteresis_state([swat, 1 - swat], [0])
        assert props.hysteresis_state(0).so_max >= so_max
        so_max = props.hysteresis_state(0).so_max
    assert so_max == pytest.approx(1 - min(water_saturations))


def test_gas_history(wog_table):
    props = SaturationProps(
        wog_table.phase_usage,
        [wog_table],
        CellRegionMap(1, 1),
        options=hysteresis_options(),
        scaling_arrays={"ISGCR": [0.1]},
    )
    for sats in [[0.3, 0.5, 0.2], [0.3, 0.3, 0.4], [0.3, 0.6, 0.1]]:
        props.update_hysteresis_state(sats, [0])
    state = props.hysteresis_state(0)
    assert state.sg_max == pytest.approx(0.4)
    assert state.so_max == pytest.approx(0.6)
    # Gas below its maximum follows the (lower) imbibition curve:
    relperm, _ = props.relative_permeability([0.3, 0.5, 0.2], [0])
    assert relperm[2] < wog_table.krg(0.2)
    assert relperm[2] > 0.0


def test_imbibition_target_out_of_range(wo_table):
    """If the drainage value can not be reached on the imbibition curve,
    the shift takes the saturation to the end of the interval"""
    props = SaturationProps(
        wo_table.phase_usage,
        [wo_table],
        CellRegionMap(1, 1),
        options=hysteresis_options(),
        scaling_arrays={"ISOWCR": [0.3]},
    )
    # Drainage krow is zero at so=0.15, as is the imbibition curve at 0:
    props.update_hysteresis_state([0.85, 0.15], [0])
    state = props.hysteresis_state(0)
    assert state.so_max == pytest.approx(0.15)
    assert state.so_shift == pytest.approx(-0.15)


@pytest.mark.parametrize("keyword", ["KRW", "IKRW", "KRORW", "KRO"])
def test_hysteresis_and_relperm_scaling(wo_table, keyword):
    with pytest.raises(ValueError, match="can not be combined"):
        SaturationProps(
            wo_table.phase_usage,
            [wo_table],
            CellRegionMap(1, 1),
            options=hysteresis_options(),
            scaling_arrays={keyword: [0.5]},
        )


def test_hysteresis_and_relperm_depth_table(wo_table):
    with pytest.raises(ValueError, match="ENKRVD"):
        SaturationProps(
            wo_table.phase_usage,
            [wo_table],
            CellRegionMap(1, 1),
            options=hysteresis_options(),
            enkrvd=[pd.DataFrame({"DEPTH": [1.0, 2.0], "KRW": [0.5, 0.5]})],
            cell_depths=[1.5],
        )


def test_flat_batch_update(wo_hyst):
    wo_hyst.update_hysteresis_state(np.array([0.3, 0.7, 0.4, 0.6]), [1, 0])
    assert wo_hyst.hysteresis_state(1).so_max == pytest.approx(0.7)
    assert wo_hyst.hysteresis_state(0).so_max == pytest.approx(0.6)


def test_depth_tables_only_scale_drainage(wo_table):
    """Imbibition endpoints are not read from ENPTVD, cells without
    imbibition keywords keep the table endpoints on the imbibition curve"""
    props = SaturationProps(
        wo_table.phase_usage,
        [wo_table],
        CellRegionMap(1, 1),
        options=hysteresis_options(),
        enptvd=[pd.DataFrame({"DEPTH": [1000.0, 2000.0], "SOWCR": [0.3, 0.3]})],
        cell_depths=[1500.0],
    )
    drainage = props.transforms(0).watoil
    assert not drainage.do_not_scale
    assert drainage.scr == pytest.approx(0.3)

    imbibition = props.imbibition_transforms(0).watoil
    assert imbibition.do_not_scale
    assert imbibition.scr == pytest.approx(wo_table.sowcr)
    assert props.imbibition_transforms(0).wat.do_not_scale
