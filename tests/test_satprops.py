"""Test relperm and capillary pressure evaluation for cells"""

import numpy as np
import pytest

from satprops import (
    CellRegionMap,
    PhaseUsage,
    RegionTable,
    SaturationOptions,
    SaturationProps,
)
from satprops.utils.testing import corey_sgof, corey_swof, numerical_jacobian


def make_props(table, number_of_cells=1, scaling_arrays=None, **kwargs):
    """Endpoint scaled evaluator for cells sharing one table"""
    return SaturationProps(
        table.phase_usage,
        [table],
        CellRegionMap(number_of_cells, 1),
        options=SaturationOptions(
            endscale=True, scalecrs=kwargs.pop("scalecrs", False)
        ),
        scaling_arrays=scaling_arrays,
        **kwargs,
    )


def test_plain_evaluation(wo_table):
    props = SaturationProps(wo_table.phase_usage, [wo_table], CellRegionMap(2, 1))
    assert props.num_phases == 2
    assert props.number_of_cells == 2
    assert not props.endpoint_scaling
    assert props.transforms(0) is None
    relperm, deriv = props.relative_permeability([0.5, 0.5, 0.9, 0.1], [0, 1])
    assert deriv is None
    assert relperm == pytest.approx(
        [wo_table.krw(0.5), wo_table.krow(0.5), wo_table.krw(0.9), wo_table.krow(0.9)]
    )
    pcvalues, _ = props.capillary_pressure([0.5, 0.5], [1])
    assert pcvalues == pytest.approx([wo_table.pcow(0.5), 0.0])


def test_critical_saturation_scaling(wo_table):
    """Relperm is zero at and below the scaled critical saturation"""
    props = make_props(wo_table, scaling_arrays={"SWCR": [0.3]})
    sats = [0.3, 0.7, 0.25, 0.75, 0.31, 0.69]
    relperm, _ = props.relative_permeability(sats, [0, 0, 0])
    assert relperm[0] == 0.0
    assert relperm[2] == 0.0
    assert relperm[4] > 0.0
    # Same maximum as the table:
    relperm, _ = props.relative_permeability([1.0, 0.0], [0])
    assert relperm[0] == pytest.approx(wo_table.krwmax)


def test_zero_relperm_at_table_critical_saturation(wo_table):
    """Without scaling, water relperm is zero at the tabulated swcr"""
    props = SaturationProps(wo_table.phase_usage, [wo_table], CellRegionMap(1, 1))
    swcr = wo_table.swcr
    relperm, _ = props.relative_permeability([swcr, 1.0 - swcr], [0])
    assert relperm[wo_table.phase_usage.pos("water")] == 0.0
    assert relperm[wo_table.phase_usage.pos("oil")] > 0.0


@pytest.mark.parametrize("phases", ["water,oil", "oil,gas", "water,oil,gas"])
def test_unscaled_transforms_equal_plain(phases):
    """Endpoint scaling without any scaling data gives identical results"""
    usage = PhaseUsage(phases)
    table = RegionTable(
        usage,
        swof=corey_swof() if usage.water else None,
        sgof=corey_sgof() if usage.gas else None,
    )
    plain = SaturationProps(usage, [table], CellRegionMap(1, 1))
    scaled = make_props(table)
    assert scaled.transforms(0) is not None
    rng = np.random.default_rng(seed=1)
    for _ in range(20):
        sats = rng.dirichlet(np.ones(usage.num_phases))
        for method in ["relative_permeability", "capillary_pressure"]:
            plain_values, plain_deriv = getattr(plain, method)(sats, [0], True)
            scaled_values, scaled_deriv = getattr(scaled, method)(sats, [0], True)
            assert (plain_values == scaled_values).all()
            assert (plain_deriv == scaled_deriv).all()


def test_jacobian_oil_water(wo_table):
    props = make_props(wo_table, scaling_arrays={"SWCR": [0.25], "SWU": [0.95]})
    sats = np.array([0.45, 0.55])
    _, analytic = props.cell_relperm(0, sats)
    numeric = numerical_jacobian(lambda s: props.cell_relperm(0, s)[0], sats, (0,))
    assert np.allclose(analytic, numeric, atol=1e-5)
    # Oil relperm decreases with water saturation:
    assert analytic[1, 0] < 0
    # Oil saturation is the dependent saturation:
    assert (analytic[:, 1] == 0).all()

    _, analytic = props.cell_capillary_pressure(0, sats)
    numeric = numerical_jacobian(
        lambda s: props.cell_capillary_pressure(0, s)[0], sats, (0,)
    )
    assert np.allclose(analytic, numeric, atol=1e-5)


def test_jacobian_oil_gas(oilgas):
    table = RegionTable(oilgas, sgof=corey_sgof())
    props = make_props(table, scaling_arrays={"SGCR": [0.1]})
    # Oil at position 0, gas at 1
    sats = np.array([0.8, 0.2])
    _, analytic = props.cell_relperm(0, sats)
    numeric = numerical_jacobian(lambda s: props.cell_relperm(0, s)[0], sats, (1,))
    assert np.allclose(analytic, numeric, atol=1e-5)
    assert analytic[1, 1] > 0
    assert analytic[0, 1] < 0


def test_jacobian_three_phase(wog_table):
    props = make_props(wog_table, scaling_arrays={"SWCR": [0.25], "SGCR": [0.1]})
    sats = np.array([0.45, 0.35, 0.2])
    relperm, analytic = props.cell_relperm(0, sats)
    numeric = numerical_jacobian(
        lambda s: props.cell_relperm(0, s)[0], sats, (0, 2)
    )
    assert np.allclose(analytic, numeric, atol=1e-5)
    assert (analytic[:, 1] == 0).all()
    # Oil relperm is a weighted average of krow and krog:
    krow = wog_table.krow(0.65)
    krog = wog_table.krog(0.55)
    assert min(krow, krog) <= relperm[1] <= max(krow, krog)

    _, analytic = props.cell_capillary_pressure(0, sats)
    numeric = numerical_jacobian(
        lambda s: props.cell_capillary_pressure(0, s)[0], sats, (0, 2)
    )
    assert np.allclose(analytic, numeric, atol=1e-5)


def test_segregated_oil_limits(wog_table):
    props = SaturationProps(wog_table.phase_usage, [wog_table], CellRegionMap(1, 1))
    # No gas, only the water-oil curve:
    relperm, _ = props.cell_relperm(0, np.array([0.4, 0.6, 0.0]))
    assert relperm[1] == pytest.approx(wog_table.krow(0.4))
    # Water at connate, only the gas-oil curve:
    relperm, _ = props.cell_relperm(0, np.array([0.1, 0.6, 0.3]))
    assert relperm[1] == pytest.approx(wog_table.krog(0.3))
    # Neither mobile water nor gas:
    relperm, deriv = props.cell_relperm(0, np.array([0.1, 0.9, 0.0]))
    assert relperm[1] == pytest.approx(wog_table.krog(0.0))
    assert np.isfinite(deriv).all()


def test_derivative_layout(wog_table):
    """Derivative matrices are flattened column major per cell"""
    props = make_props(
        wog_table, number_of_cells=2, scaling_arrays={"SWCR": [0.25, 0.3]}
    )
    sats = np.array([0.45, 0.35, 0.2, 0.3, 0.3, 0.4])
    _, deriv = props.relative_permeability(sats, [0, 1], derivatives=True)
    assert len(deriv) == 2 * 9
    for idx, cell in enumerate([0, 1]):
        _, cell_deriv = props.cell_relperm(cell, sats[3 * idx : 3 * (idx + 1)])
        block = deriv[9 * idx : 9 * (idx + 1)]
        assert np.array_equal(block.reshape((3, 3), order="F"), cell_deriv)
        # Entry (i, j) is at i + num_phases * j:
        assert block[0 + 3 * 2] == cell_deriv[0, 2]
        assert block[1 + 3 * 0] == cell_deriv[1, 0]


def test_saturation_range_plain(wog_table):
    props = SaturationProps(wog_table.phase_usage, [wog_table], CellRegionMap(2, 1))
    smin, smax = props.saturation_range([1, 0])
    assert smin == pytest.approx([0.1, 0.0, 0.0] * 2)
    assert smax == pytest.approx([1.0, 0.9, 0.9] * 2)


def test_saturation_range_scaled(wo_table):
    props = make_props(
        wo_table,
        number_of_cells=2,
        scaling_arrays={
            "SWL": [0.15, np.nan],
            "SWCR": [0.25, np.nan],
            "SWU": [0.95, np.nan],
        },
    )
    smin, smax = props.saturation_range([0, 1])
    assert smin == pytest.approx([0.15, 0.05, 0.1, 0.0])
    assert smax == pytest.approx([0.95, 0.85, 1.0, 0.9])
    assert (smin <= smax).all()


def test_saturation_range_three_phase(wog_table):
    """Oil minimum is clipped at zero in three-phase runs"""
    props = make_props(wog_table, scaling_arrays={"SGCR": [0.1], "SGU": [0.8]})
    smin, smax = props.saturation_range([0])
    assert smin == pytest.approx([0.1, 0.0, 0.0])
    assert smax == pytest.approx([1.0, 0.9, 0.8])


def test_regions(oilwater, wo_table):
    other = RegionTable(oilwater, swof=corey_swof(swcr=0.3), tag="other")
    props = SaturationProps(
        oilwater, [wo_table, other], CellRegionMap(2, 2, satnum=[2, 1])
    )
    assert props.table(0) is other
    assert props.table(1) is wo_table
    relperm, _ = props.relative_permeability([0.25, 0.75, 0.25, 0.75], [0, 1])
    assert relperm[0] == 0.0
    assert relperm[2] > 0.0


def test_invalid_setup(wo_table, wog_table):
    with pytest.raises(ValueError, match="At least one region table"):
        SaturationProps(wo_table.phase_usage, [], CellRegionMap(1, 1))
    with pytest.raises(ValueError, match="Region map expects 2 tables, got 1"):
        SaturationProps(wo_table.phase_usage, [wo_table], CellRegionMap(1, 2))
    with pytest.raises(ValueError, match="has phases"):
        SaturationProps(wo_table.phase_usage, [wog_table], CellRegionMap(1, 1))
    with pytest.raises(ValueError, match="Found 2 regions. Maximum allowed is 1"):
        SaturationProps(
            wo_table.phase_usage,
            [wo_table],
            CellRegionMap(2, 1, endnum=[1, 2]),
            options=SaturationOptions(endscale=True),
        )


def test_endnum_with_more_tables(wo_table):
    props = SaturationProps(
        wo_table.phase_usage,
        [wo_table],
        CellRegionMap(2, 1, endnum=[1, 2]),
        options=SaturationOptions(endscale=["NODIR", "REVERS", 2]),
    )
    assert props.endpoint_scaling


def test_scaling_data_without_endscale(wo_table, caplog):
    props = SaturationProps(
        wo_table.phase_usage,
        [wo_table],
        CellRegionMap(1, 1),
        scaling_arrays={"SWCR": [0.3]},
    )
    assert "Endpoint scaling data ignored" in caplog.text
    assert props.transforms(0) is None


def test_invalid_cells(wo_table):
    props = SaturationProps(wo_table.phase_usage, [wo_table], CellRegionMap(2, 1))
    with pytest.raises(ValueError, match="Cell indices must be in"):
        props.relative_permeability([0.5, 0.5], [2])
    with pytest.raises(ValueError, match="Cell indices must be in"):
        props.saturation_range([-1])
    with pytest.raises(ValueError, match="Expected 4 saturations for 2 cells"):
        props.capillary_pressure([0.5, 0.5], [0, 1])


def test_empty_batch(wo_table):
    props = SaturationProps(wo_table.phase_usage, [wo_table], CellRegionMap(2, 1))
    relperm, deriv = props.relative_permeability([], [], derivatives=True)
    assert len(relperm) == 0
    assert len(deriv) == 0
