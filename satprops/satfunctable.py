"""Unscaled saturation function tables for one saturation region"""

from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

import satprops
from satprops.constants import EPSILON as epsilon
from satprops.epstransform import CurveFamily, EPSTransform
from satprops.phases import Phase, PhaseUsage
from satprops.utils.interpolation import linear_interpolation
from satprops.utils.relperm import critical_saturation, immobile_saturation

logger = satprops.getLogger_satprops(__name__)

SWOF_COLUMNS: List[str] = ["SW", "KRW", "KROW", "PCOW"]
SGOF_COLUMNS: List[str] = ["SG", "KRG", "KROG", "PCOG"]


class TabulatedCurve(object):
    """A piecewise linear function of saturation.

    Constant extrapolation outside the tabulated saturations, where the
    derivative is zero.

    Args:
        saturations: Strictly increasing saturation values.
        values: Function values, one for each saturation.
    """

    def __init__(self, saturations, values) -> None:
        self.saturations = np.asarray(saturations, dtype=float)
        self.values = np.asarray(values, dtype=float)
        if len(self.saturations) != len(self.values):
            raise ValueError("Saturations and values must have equal length")
        if len(self.saturations) < 2:
            raise ValueError("A tabulated curve needs at least two points")
        if (np.diff(self.saturations) <= 0).any():
            raise ValueError("Saturations must be strictly increasing")

    def evaluate(self, sat: float) -> Tuple[float, float]:
        """Value and derivative at a saturation"""
        return linear_interpolation(self.saturations, self.values, sat)

    def __call__(self, sat: float) -> float:
        return self.evaluate(sat)[0]

    def __repr__(self) -> str:
        return (
            f"TabulatedCurve([{self.saturations[0]:g}, {self.saturations[-1]:g}], "
            f"{len(self.saturations)} points)"
        )


def _normalize_table(
    dframe: pd.DataFrame, columns: List[str], name: str
) -> pd.DataFrame:
    """Uppercase the column names, check for required columns
    and add zero capillary pressure if not present"""
    if not isinstance(dframe, pd.DataFrame):
        raise TypeError(f"{name} table must be a pandas DataFrame")
    dframe = dframe.copy()
    dframe.columns = [str(col).strip().upper() for col in dframe.columns]
    for col in columns[:3]:
        if col not in dframe:
            raise ValueError(f"Column {col} is missing in {name} table")
    if columns[3] not in dframe:
        logger.debug("No %s column in %s, assuming zero", columns[3], name)
        dframe[columns[3]] = 0.0
    dframe = dframe[columns].astype(float)
    if dframe.isnull().values.any():
        raise ValueError(f"Missing values in {name} table")
    if len(dframe) < 2:
        raise ValueError(f"{name} table must have at least two rows")
    sat = dframe[columns[0]].values
    if (np.diff(sat) <= 0).any():
        raise ValueError(f"{columns[0]} must be strictly increasing in {name}")
    if sat[0] < -epsilon or sat[-1] > 1 + epsilon:
        raise ValueError(f"{columns[0]} must be within [0, 1] in {name}")
    for col in columns[1:3]:
        if (dframe[col] < -epsilon).any() or (dframe[col] > 1 + epsilon).any():
            raise ValueError(f"{col} must be within [0, 1] in {name}")
    return dframe.reset_index(drop=True)


class RegionTable(object):
    """Unscaled saturation functions for one saturation region, and the
    endpoints derived from them.

    Water and gas relperm are tabulated versus their own saturation, the
    oil relperm in the water-oil system (krow) versus water saturation and
    the oil relperm in the gas-oil system (krog) versus gas saturation.

    Saturation bounds are stored per active phase in ``smin`` and ``smax``,
    indexed by phase position. The oil range is the complement of the
    water and gas ranges.

    Args:
        phase_usage: Active phases.
        swof: Dataframe with columns SW, KRW, KROW and optionally PCOW.
            Required when water is active.
        sgof: Dataframe with columns SG, KRG, KROG and optionally PCOG.
            Required when gas is active.
        tag: Optional string identifier, used in log and error messages.
    """

    def __init__(
        self,
        phase_usage: PhaseUsage,
        swof: Optional[pd.DataFrame] = None,
        sgof: Optional[pd.DataFrame] = None,
        tag: str = "",
    ) -> None:
        self.phase_usage = phase_usage
        self.tag = tag

        self.krw: Optional[TabulatedCurve] = None
        self.krow: Optional[TabulatedCurve] = None
        self.pcow: Optional[TabulatedCurve] = None
        self.krg: Optional[TabulatedCurve] = None
        self.krog: Optional[TabulatedCurve] = None
        self.pcog: Optional[TabulatedCurve] = None

        if phase_usage.water:
            if swof is None:
                raise ValueError(f"Water is active, but no SWOF table given {tag}")
            swof = _normalize_table(swof, SWOF_COLUMNS, "SWOF")
            self.krw = TabulatedCurve(swof["SW"], swof["KRW"])
            self.krow = TabulatedCurve(swof["SW"], swof["KROW"])
            self.pcow = TabulatedCurve(swof["SW"], swof["PCOW"])
        elif swof is not None:
            logger.warning("SWOF table ignored, water is not active %s", tag)

        if phase_usage.gas:
            if sgof is None:
                raise ValueError(f"Gas is active, but no SGOF table given {tag}")
            sgof = _normalize_table(sgof, SGOF_COLUMNS, "SGOF")
            self.krg = TabulatedCurve(sgof["SG"], sgof["KRG"])
            self.krog = TabulatedCurve(sgof["SG"], sgof["KROG"])
            self.pcog = TabulatedCurve(sgof["SG"], sgof["PCOG"])
        elif sgof is not None:
            logger.warning("SGOF table ignored, gas is not active %s", tag)

        self._init_endpoints()
        self._check_endpoints()

    def _init_endpoints(self) -> None:
        """Derive saturation and relperm endpoints from the tables"""
        usage = self.phase_usage
        self.swl = self.swu = 0.0
        self.sgl = self.sgu = 0.0
        self.swcr = self.sowcr = self.sgcr = self.sogcr = 0.0
        self.krwr = self.krgr = self.krorw = self.krorg = 0.0
        self.krwmax = self.krgmax = self.kromax = 0.0
        self.pcwmax = self.pcgmax = 0.0

        if usage.water:
            self.swl = float(self.krw.saturations[0])
            self.swu = float(self.krw.saturations[-1])
        if usage.gas:
            self.sgl = float(self.krg.saturations[0])
            self.sgu = float(self.krg.saturations[-1])

        # The complementary minimum only applies with all three phases:
        sgl_oil = self.sgl if usage.three_phase else 0.0
        swl_oil = self.swl if usage.three_phase else 0.0

        if usage.water:
            self.swcr = critical_saturation(self.krw.saturations, self.krw.values)
            sw_zero_krow = immobile_saturation(self.krow.saturations, self.krow.values)
            self.sowcr = 1.0 - sw_zero_krow - sgl_oil
            self.krwr = self.krw(1.0 - self.sowcr - sgl_oil)
            self.krorw = self.krow(self.swcr)
            self.krwmax = float(self.krw.values[-1])
            self.pcwmax = float(self.pcow.values[0])
        if usage.gas:
            self.sgcr = critical_saturation(self.krg.saturations, self.krg.values)
            sg_zero_krog = immobile_saturation(self.krog.saturations, self.krog.values)
            self.sogcr = 1.0 - sg_zero_krog - swl_oil
            self.krgr = self.krg(1.0 - self.sogcr - swl_oil)
            self.krorg = self.krog(self.sgcr)
            self.krgmax = float(self.krg.values[-1])
            self.pcgmax = float(self.pcog.values[-1])
        if usage.water:
            self.kromax = float(self.krow.values[0])
        else:
            self.kromax = float(self.krog.values[0])

        self.smin = np.zeros(usage.num_phases)
        self.smax = np.zeros(usage.num_phases)
        if usage.water:
            self.smin[usage.pos(Phase.WATER)] = self.swl
            self.smax[usage.pos(Phase.WATER)] = self.swu
        if usage.gas:
            self.smin[usage.pos(Phase.GAS)] = self.sgl
            self.smax[usage.pos(Phase.GAS)] = self.sgu
        self.smax[usage.pos(Phase.OIL)] = 1.0 - self.swl - self.sgl
        self.smin[usage.pos(Phase.OIL)] = max(0.0, 1.0 - self.swu - self.sgu)

        logger.debug("Endpoints for region %s: %s", self.tag, str(self.endpoints()))

    def _check_endpoints(self) -> None:
        usage = self.phase_usage
        checks = []
        if usage.water:
            checks.append(("swcr", usage.pos(Phase.WATER), self.swcr))
            checks.append(("sowcr", usage.pos(Phase.OIL), self.sowcr))
        if usage.gas:
            checks.append(("sgcr", usage.pos(Phase.GAS), self.sgcr))
            checks.append(("sogcr", usage.pos(Phase.OIL), self.sogcr))
        for name, pos, value in checks:
            if not self.smin[pos] - epsilon <= value <= self.smax[pos] + epsilon:
                raise ValueError(
                    f"Critical saturation {name}={value:g} outside "
                    f"[{self.smin[pos]:g}, {self.smax[pos]:g}] {self.tag}"
                )

    def endpoints(self) -> Dict[str, float]:
        """Dictionary of the scalar endpoints of the table"""
        return {
            "swl": self.swl,
            "swu": self.swu,
            "sgl": self.sgl,
            "sgu": self.sgu,
            "swcr": self.swcr,
            "sowcr": self.sowcr,
            "sgcr": self.sgcr,
            "sogcr": self.sogcr,
            "krwr": self.krwr,
            "krgr": self.krgr,
            "krorw": self.krorw,
            "krorg": self.krorg,
            "krwmax": self.krwmax,
            "krgmax": self.krgmax,
            "kromax": self.kromax,
            "pcwmax": self.pcwmax,
            "pcgmax": self.pcgmax,
        }

    def _relperm_curve(self, family: CurveFamily) -> TabulatedCurve:
        curve = {
            CurveFamily.WATER: self.krw,
            CurveFamily.WATER_OIL: self.krow,
            CurveFamily.GAS: self.krg,
            CurveFamily.GAS_OIL: self.krog,
        }[family]
        if curve is None:
            raise ValueError(f"No table for {family.name} in region {self.tag}")
        return curve

    def _complementary_minimum(self, family: CurveFamily) -> float:
        """Minimum saturation of the third phase, subtracted when converting
        oil saturation to the table saturation of an oil curve"""
        if not self.phase_usage.three_phase:
            return 0.0
        if family == CurveFamily.WATER_OIL:
            return self.sgl
        return self.swl

    def family_relperm(
        self,
        family: CurveFamily,
        sat: float,
        transform: Optional[EPSTransform] = None,
    ) -> Tuple[float, float]:
        """Relative permeability of one curve family and its derivative.

        Args:
            family: Which curve to evaluate
            sat: Physical saturation of the phase the curve belongs to,
                oil saturation for the WATER_OIL and GAS_OIL families.
            transform: Endpoint scaling for the cell, None for the plain
                table.

        Returns:
            Tuple with relperm and the derivative with respect to sat.
        """
        curve = self._relperm_curve(family)
        if transform is None or transform.do_not_scale:
            table_sat = sat
            dtable_sat = 1.0
        else:
            table_sat = transform.scale_sat(sat)
            dtable_sat = transform.scale_sat_deriv(sat)

        if family.oil:
            relperm, deriv = curve.evaluate(
                1.0 - table_sat - self._complementary_minimum(family)
            )
            deriv = -deriv * dtable_sat
        else:
            relperm, deriv = curve.evaluate(table_sat)
            deriv = deriv * dtable_sat

        if transform is not None:
            deriv = transform.scale_kr_deriv(sat, deriv)
            relperm = transform.scale_kr(sat, relperm)
        return relperm, deriv

    def family_capillary_pressure(
        self,
        family: CurveFamily,
        sat: float,
        transform: Optional[EPSTransform] = None,
    ) -> Tuple[float, float]:
        """Capillary pressure and its derivative.

        Only the WATER (pcow versus water saturation) and GAS (pcog versus
        gas saturation) families carry capillary pressure.
        """
        if family == CurveFamily.WATER:
            curve = self.pcow
        elif family == CurveFamily.GAS:
            curve = self.pcog
        else:
            raise ValueError(f"No capillary pressure for {family.name}")
        if curve is None:
            raise ValueError(f"No table for {family.name} in region {self.tag}")

        if transform is None:
            return curve.evaluate(sat)
        pcvalue, deriv = curve.evaluate(transform.scale_sat_pc(sat))
        deriv = deriv * transform.scale_sat_pc_deriv(sat)
        return pcvalue * transform.pc_factor, deriv * transform.pc_factor

    def __repr__(self) -> str:
        return f"RegionTable({self.tag!r}, {str(self.phase_usage)})"
