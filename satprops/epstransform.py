"""Endpoint scaling transforms for saturation function curves"""

import enum
from typing import Optional


class CurveFamily(enum.Enum):
    """The four curve families that are endpoint scaled independently.

    The value is the attribute name in EPSTransforms.
    """

    WATER = "wat"
    WATER_OIL = "watoil"
    GAS = "gas"
    GAS_OIL = "gasoil"

    @property
    def oil(self) -> bool:
        """True for the oil relperm curves (krow and krog)"""
        return self in (CurveFamily.WATER_OIL, CurveFamily.GAS_OIL)


class EPSTransform(object):
    """Remapping of one saturation function curve for one cell.

    The saturation arguments to all methods are physical (cell) saturations
    of the phase the curve family belongs to: water saturation for the
    water curve, gas saturation for the gas curve and oil saturation for
    both oil curves. The table_* attributes hold the unscaled anchors in
    the table domain that the physical endpoints map onto.

    Relperm saturations are mapped piecewise linearly, ``[scr, smax]`` onto
    ``[table_scr, table_smax]`` for two-point scaling, and with a break
    point ``sr -> table_sr`` for three-point scaling. Capillary pressure
    saturations are mapped linearly from ``[smin, smax]`` onto
    ``[table_smin, table_smax]``.

    When do_not_scale is set, saturations are not remapped at all, but
    relperm value scaling and the capillary pressure factor still apply.
    """

    def __init__(self) -> None:
        self.do_not_scale: bool = True
        self.do_3pt: bool = False
        self.smin: float = 0.0
        self.smax: float = 1.0
        self.scr: float = 0.0
        self.sr: float = 1.0
        self.slope1: float = 1.0
        self.slope2: float = 1.0
        self.do_kr_max: bool = False
        self.do_kr_crit: bool = False
        self.do_sat_interp: bool = False
        self.krsr: float = 1.0
        self.krmax: float = 1.0
        self.kr_slope_crit: float = 1.0
        self.kr_slope_max: float = 1.0
        self.pc_factor: float = 1.0

        self.table_smin: float = 0.0
        self.table_scr: float = 0.0
        self.table_sr: float = 1.0
        self.table_smax: float = 1.0
        self.table_krsr: float = 1.0

    def scale_sat(self, sat: float) -> float:
        """Map a physical saturation to the table domain for relperm lookup"""
        if self.do_not_scale:
            return sat
        if sat <= self.scr:
            return self.table_scr
        if self.do_3pt:
            if sat <= self.sr:
                return self.table_scr + (sat - self.scr) * self.slope1
            if sat <= self.smax:
                return self.table_sr + (sat - self.sr) * self.slope2
            return self.table_smax
        if sat >= self.smax:
            return self.table_smax
        return self.table_scr + (sat - self.scr) * self.slope1

    def scale_sat_deriv(self, sat: float) -> float:
        """Derivative of scale_sat() with respect to the physical saturation"""
        if self.do_not_scale:
            return 1.0
        if sat <= self.scr or sat >= self.smax:
            return 0.0
        if self.do_3pt and sat > self.sr:
            return self.slope2
        return self.slope1

    def scale_sat_inv(self, table_sat: float) -> float:
        """Map a table domain saturation back to the physical domain.

        Inverse of scale_sat() on ``[scr, smax]``.
        """
        if self.do_not_scale:
            return table_sat
        if table_sat <= self.table_scr:
            return self.scr
        if self.do_3pt:
            if table_sat <= self.table_sr:
                return self.scr + (table_sat - self.table_scr) / self.slope1
            if table_sat <= self.table_smax:
                return self.sr + (table_sat - self.table_sr) / self.slope2
            return self.smax
        if table_sat >= self.table_smax:
            return self.smax
        return self.scr + (table_sat - self.table_scr) / self.slope1

    def scale_sat_pc(self, sat: float) -> float:
        """Map a physical saturation to the table domain for capillary
        pressure lookup"""
        if self.do_not_scale:
            return sat
        if sat <= self.smin:
            return self.table_smin
        if sat <= self.smax:
            return self.table_smin + (sat - self.smin) * self.pc_slope
        return self.table_smax

    def scale_sat_pc_deriv(self, sat: float) -> float:
        if self.do_not_scale:
            return 1.0
        if sat <= self.smin or sat > self.smax:
            return 0.0
        return self.pc_slope

    @property
    def pc_slope(self) -> float:
        """Slope of the capillary pressure saturation map"""
        return (self.table_smax - self.table_smin) / (self.smax - self.smin)

    def scale_kr(self, sat: float, relperm: float) -> float:
        """Scale a relperm value looked up in the table.

        Args:
            sat: Physical saturation
            relperm: Table relperm at scale_sat(sat)
        """
        if self.do_kr_crit:
            if sat <= self.scr:
                return 0.0
            if sat <= self.sr:
                return relperm * self.kr_slope_crit
            if sat <= self.smax:
                if self.do_sat_interp:
                    return self.krsr + (sat - self.sr) * self.kr_slope_max
                return self.krsr + (relperm - self.table_krsr) * self.kr_slope_max
            return self.krmax
        if self.do_kr_max:
            return relperm * self.kr_slope_max
        return relperm

    def scale_kr_deriv(self, sat: float, relperm_deriv: float) -> float:
        """Scale a relperm derivative, the derivative of scale_kr() when
        relperm_deriv is the derivative of the looked up value with respect
        to the physical saturation"""
        if self.do_kr_crit:
            if sat <= self.scr:
                return 0.0
            if sat <= self.sr:
                return relperm_deriv * self.kr_slope_crit
            if sat <= self.smax:
                if self.do_sat_interp:
                    return self.kr_slope_max
                return relperm_deriv * self.kr_slope_max
            return 0.0
        if self.do_kr_max:
            return relperm_deriv * self.kr_slope_max
        return relperm_deriv

    def __repr__(self) -> str:
        if self.do_not_scale:
            return f"EPSTransform(do_not_scale, pc_factor={self.pc_factor:g})"
        return (
            f"EPSTransform(smin={self.smin:g}, scr={self.scr:g}, sr={self.sr:g}, "
            f"smax={self.smax:g}, slope1={self.slope1:g}, slope2={self.slope2:g}, "
            f"pc_factor={self.pc_factor:g})"
        )


class EPSTransforms(object):
    """The endpoint scaling transforms for all curve families of one cell.

    Families not relevant for the active phases are None.
    """

    def __init__(self) -> None:
        self.wat: Optional[EPSTransform] = None
        self.watoil: Optional[EPSTransform] = None
        self.gas: Optional[EPSTransform] = None
        self.gasoil: Optional[EPSTransform] = None

    def get(self, family: CurveFamily) -> Optional[EPSTransform]:
        return getattr(self, family.value)

    def set(self, family: CurveFamily, transform: EPSTransform) -> None:
        setattr(self, family.value, transform)
