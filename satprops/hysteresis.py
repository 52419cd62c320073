"""Saturation history and scanning curves for relperm hysteresis"""

from typing import List, Tuple

from scipy.optimize import brentq

import satprops
from satprops.constants import EPSILON as epsilon
from satprops.epstransform import CurveFamily, EPSTransform, EPSTransforms
from satprops.satfunctable import RegionTable

logger = satprops.getLogger_satprops(__name__)

# The non-wetting curves follow scanning curves, the others
# always use the drainage curve:
SCANNING_FAMILIES: List[CurveFamily] = [CurveFamily.WATER_OIL, CurveFamily.GAS]


class HysteresisState(object):
    """Saturation history for one cell.

    so_max is the largest oil saturation seen in the water-oil system and
    sg_max the largest gas saturation. A negative maximum means no
    history. The shifts are added to the saturation before evaluating the
    imbibition curve below the historical maximum.
    """

    def __init__(self) -> None:
        self.so_max: float = -1.0
        self.so_shift: float = 0.0
        self.sg_max: float = -1.0
        self.sg_shift: float = 0.0

    def get(self, family: CurveFamily) -> Tuple[float, float]:
        """Historical maximum and shift for a scanning curve family"""
        if family == CurveFamily.WATER_OIL:
            return self.so_max, self.so_shift
        if family == CurveFamily.GAS:
            return self.sg_max, self.sg_shift
        raise ValueError(f"No saturation history for {family.name}")

    def set(self, family: CurveFamily, sat_max: float, shift: float) -> None:
        if family == CurveFamily.WATER_OIL:
            self.so_max, self.so_shift = sat_max, shift
        elif family == CurveFamily.GAS:
            self.sg_max, self.sg_shift = sat_max, shift
        else:
            raise ValueError(f"No saturation history for {family.name}")

    def __repr__(self) -> str:
        return (
            f"HysteresisState(so_max={self.so_max:g}, so_shift={self.so_shift:g}, "
            f"sg_max={self.sg_max:g}, sg_shift={self.sg_shift:g})"
        )


class HysteresisTracker(object):
    """Drainage/imbibition branch selection for every cell.

    While the non-wetting saturation is at or above its historical
    maximum, the drainage curve is followed. Below it, the imbibition
    curve (the drainage table with the imbibition endpoint scaling) is
    evaluated at a shifted saturation, chosen such that the scanning
    curve meets the drainage curve at the historical maximum.

    The transforms are never modified, only the history evolves.

    Args:
        imbibition_transforms: Imbibition endpoint scaling, one
            EPSTransforms per cell.
    """

    def __init__(self, imbibition_transforms: List[EPSTransforms]) -> None:
        self.imbibition_transforms = imbibition_transforms
        self.states: List[HysteresisState] = [
            HysteresisState() for _ in imbibition_transforms
        ]

    def __len__(self) -> int:
        return len(self.states)

    def state(self, cell: int) -> HysteresisState:
        return self.states[cell]

    def imbibition(self, cell: int, family: CurveFamily) -> EPSTransform:
        return self.imbibition_transforms[cell].get(family)

    def relperm(
        self,
        cell: int,
        table: RegionTable,
        family: CurveFamily,
        sat: float,
        drainage: EPSTransform,
    ) -> Tuple[float, float]:
        """Relperm and derivative on the active branch for a cell"""
        if family not in SCANNING_FAMILIES:
            return table.family_relperm(family, sat, drainage)
        sat_max, shift = self.states[cell].get(family)
        if sat >= sat_max:
            return table.family_relperm(family, sat, drainage)
        return table.family_relperm(
            family, sat + shift, self.imbibition(cell, family)
        )

    def update(
        self,
        cell: int,
        table: RegionTable,
        family: CurveFamily,
        sat: float,
        drainage: EPSTransform,
    ) -> None:
        """Record a new saturation for a cell.

        Only a saturation above the historical maximum changes the state,
        the maximum never decreases.
        """
        if family not in SCANNING_FAMILIES:
            return
        state = self.states[cell]
        sat_max, _ = state.get(family)
        if sat <= sat_max:
            return

        target = table.family_relperm(family, sat, drainage)[0]
        imbibition = self.imbibition(cell, family)

        def residual(imb_sat: float) -> float:
            return table.family_relperm(family, imb_sat, imbibition)[0] - target

        if residual(1.0) <= 0.0:
            imb_sat = 1.0
        elif residual(0.0) >= 0.0:
            imb_sat = 0.0
        else:
            imb_sat = brentq(residual, 0.0, 1.0, xtol=epsilon)
        state.set(family, sat, imb_sat - sat)
        logger.debug(
            "Cell %d: New %s maximum %g, shift %g",
            cell,
            family.name,
            sat,
            imb_sat - sat,
        )
