"""Relative permeability and capillary pressure evaluation per cell"""

from typing import Dict, List, Optional, Sequence, Set, Tuple

import numpy as np
import pandas as pd

import satprops
from satprops.constants import (
    PC_LOW_THRESHOLD,
    RELPERM_KEYWORDS,
    SEGREGATION_EPSILON,
)
from satprops.epstransform import CurveFamily, EPSTransform, EPSTransforms
from satprops.hysteresis import HysteresisState, HysteresisTracker
from satprops.options import SaturationOptions
from satprops.phases import Phase, PhaseUsage
from satprops.regions import CellRegionMap
from satprops.satfunctable import RegionTable
from satprops.scaling import EndpointScalingBuilder

logger = satprops.getLogger_satprops(__name__)

# Keywords that can not be combined with hysteresis:
RELPERM_VALUE_KEYWORDS: List[str] = (
    RELPERM_KEYWORDS + ["I" + keyword for keyword in RELPERM_KEYWORDS] + ["ENKRVD"]
)


class SaturationProps(object):
    """Relative permeability and capillary pressure for a set of cells.

    Saturations and outputs are flat arrays with the active phases of each
    cell stored consecutively, ``[phase + num_phases * index]``. Derivative
    matrices ``m[i, j] = d value_i / d s_j`` are stored per cell in column
    major order, ``[i + num_phases * j + num_phases**2 * index]``.

    Depending on the options, curves are evaluated directly from the region
    tables, through the endpoint scaling of each cell, or on the branch
    selected by the saturation history of each cell (hysteresis).

    Args:
        phase_usage: Active phases.
        tables: One RegionTable for each saturation region.
        region_map: Region indices per cell.
        options: Endpoint scaling and hysteresis switches. Default
            is no scaling and no hysteresis.
        scaling_arrays: Dictionary from scaling keyword to one value per
            cell, NaN for cells without a value.
        enptvd: Saturation endpoint versus depth tables, one per endpoint
            region.
        enkrvd: Relperm endpoint versus depth tables, one per endpoint
            region.
        cell_depths: Cell centroid depths, used with depth tables.
    """

    def __init__(
        self,
        phase_usage: PhaseUsage,
        tables: List[RegionTable],
        region_map: CellRegionMap,
        options: Optional[SaturationOptions] = None,
        scaling_arrays: Optional[Dict[str, Sequence[float]]] = None,
        enptvd: Optional[Sequence[pd.DataFrame]] = None,
        enkrvd: Optional[Sequence[pd.DataFrame]] = None,
        cell_depths: Optional[Sequence[float]] = None,
    ) -> None:
        if not tables:
            raise ValueError("At least one region table is required")
        if region_map.num_tables != len(tables):
            raise ValueError(
                f"Region map expects {region_map.num_tables} tables, "
                f"got {len(tables)}"
            )
        for table in tables:
            if table.phase_usage.phase_used != phase_usage.phase_used:
                raise ValueError(
                    f"Region table {table.tag} has phases {str(table.phase_usage)}, "
                    f"expected {str(phase_usage)}"
                )
        if options is None:
            options = SaturationOptions()

        self.phase_usage = phase_usage
        self.tables = tables
        self.region_map = region_map
        self.options = options

        self._transforms: Optional[List[EPSTransforms]] = None
        self._tracker: Optional[HysteresisTracker] = None
        self._calibrated: Set[int] = set()

        if options.endpoint_scaling:
            if region_map.max_endpoint_region + 1 > options.num_endscale_tables:
                raise ValueError(
                    f"ENDNUM: Found {region_map.max_endpoint_region + 1} regions. "
                    f"Maximum allowed is {options.num_endscale_tables} "
                    "(item 3 of keyword ENDSCALE)"
                )
            builder = EndpointScalingBuilder(
                phase_usage,
                tables,
                region_map,
                scaling_arrays=scaling_arrays,
                enptvd=enptvd,
                enkrvd=enkrvd,
                cell_depths=cell_depths,
                three_point=options.three_point,
            )
            if options.hysteresis:
                combined = set(builder.configured_keywords()) & set(
                    RELPERM_VALUE_KEYWORDS
                )
                if combined:
                    raise ValueError(
                        "Hysteresis and relperm value scaling can not be combined, "
                        f"found {sorted(combined)}"
                    )
            self._transforms = builder.build()
            if options.hysteresis:
                if region_map.imb_region_of is None:
                    logger.info("No IMBNUM given, imbibition scaled from drainage")
                self._tracker = HysteresisTracker(builder.build(imbibition=True))
        elif scaling_arrays or enptvd is not None or enkrvd is not None:
            logger.warning("Endpoint scaling data ignored, ENDSCALE is not active")

        logger.info(
            "Saturation properties for %d cells, %d region(s), phases %s, "
            "endpoint scaling: %s, hysteresis: %s",
            region_map.number_of_cells,
            len(tables),
            str(phase_usage),
            self.endpoint_scaling,
            self.hysteresis,
        )

    @property
    def num_phases(self) -> int:
        return self.phase_usage.num_phases

    @property
    def number_of_cells(self) -> int:
        return self.region_map.number_of_cells

    @property
    def endpoint_scaling(self) -> bool:
        """True if endpoint scaling is active"""
        return self.options.endpoint_scaling

    @property
    def hysteresis(self) -> bool:
        """True if hysteresis is active"""
        return self._tracker is not None

    def transforms(self, cell: int) -> Optional[EPSTransforms]:
        """The drainage transforms for a cell, None without endpoint scaling
        (and before any initial saturation calibration)"""
        if self._transforms is None:
            return None
        return self._transforms[cell]

    def imbibition_transforms(self, cell: int) -> Optional[EPSTransforms]:
        if self._tracker is None:
            return None
        return self._tracker.imbibition_transforms[cell]

    def hysteresis_state(self, cell: int) -> Optional[HysteresisState]:
        """Saturation history of a cell, None without hysteresis"""
        if self._tracker is None:
            return None
        return self._tracker.state(cell)

    def table(self, cell: int) -> RegionTable:
        """The region table used by a cell"""
        return self.tables[self.region_map.region_of[cell]]

    def _check_cells(self, cells: Sequence[int]) -> np.ndarray:
        cells = np.asarray(cells, dtype=int).reshape(-1)
        if len(cells) and (cells.min() < 0 or cells.max() >= self.number_of_cells):
            raise ValueError(
                f"Cell indices must be in [0, {self.number_of_cells}), "
                f"got [{cells.min()}, {cells.max()}]"
            )
        return cells

    def _check_saturations(self, saturations: Sequence[float], num: int) -> np.ndarray:
        saturations = np.asarray(saturations, dtype=float).reshape(-1)
        if len(saturations) != num * self.num_phases:
            raise ValueError(
                f"Expected {num * self.num_phases} saturations for {num} cells, "
                f"got {len(saturations)}"
            )
        return saturations

    def _transform(self, cell: int, family: CurveFamily) -> Optional[EPSTransform]:
        if self._transforms is None:
            return None
        return self._transforms[cell].get(family)

    def _family_relperm(
        self, cell: int, family: CurveFamily, sat: float
    ) -> Tuple[float, float]:
        table = self.table(cell)
        transform = self._transform(cell, family)
        if self._tracker is not None:
            return self._tracker.relperm(cell, table, family, sat, transform)
        return table.family_relperm(family, sat, transform)

    def _water_minimum(self, cell: int) -> float:
        """Connate water saturation of a cell"""
        transform = self._transform(cell, CurveFamily.WATER)
        if transform is None or transform.do_not_scale:
            return self.table(cell).swl
        return transform.smin

    def cell_relperm(
        self, cell: int, sats: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Relperm and derivative matrix for one cell.

        Args:
            cell: Cell index
            sats: Saturations of the active phases

        Returns:
            Relperm per phase, and the matrix of derivatives
            ``m[i, j] = d kr_i / d s_j``.
        """
        usage = self.phase_usage
        relperm = np.zeros(usage.num_phases)
        deriv = np.zeros((usage.num_phases, usage.num_phases))
        opos = usage.pos(Phase.OIL)

        if usage.three_phase:
            wpos = usage.pos(Phase.WATER)
            gpos = usage.pos(Phase.GAS)
            swat = sats[wpos]
            sgas = sats[gpos]
            soil = 1.0 - swat - sgas
            relperm[wpos], deriv[wpos, wpos] = self._family_relperm(
                cell, CurveFamily.WATER, swat
            )
            relperm[gpos], deriv[gpos, gpos] = self._family_relperm(
                cell, CurveFamily.GAS, sgas
            )
            krow, dkrow = self._family_relperm(cell, CurveFamily.WATER_OIL, soil)
            krog, dkrog = self._family_relperm(cell, CurveFamily.GAS_OIL, soil)

            # Oil relperm weighted by the mobile water and gas saturations,
            # segregated flow
            mobile_water = swat - self._water_minimum(cell)
            dmobile_water = 1.0 if mobile_water > 0.0 else 0.0
            mobile_water = max(mobile_water, 0.0)
            total = mobile_water + sgas
            if total > SEGREGATION_EPSILON:
                xwat = mobile_water / total
                dxwat_dsw = dmobile_water * sgas / total ** 2
                dxwat_dsg = -mobile_water / total ** 2
            else:
                xwat = mobile_water / SEGREGATION_EPSILON
                dxwat_dsw = dmobile_water / SEGREGATION_EPSILON
                dxwat_dsg = 0.0
            xgas = 1.0 - xwat
            relperm[opos] = xwat * krow + xgas * krog
            dkro_dso = xwat * dkrow + xgas * dkrog
            deriv[opos, wpos] = dxwat_dsw * (krow - krog) - dkro_dso
            deriv[opos, gpos] = dxwat_dsg * (krow - krog) - dkro_dso
        elif usage.oil_water:
            wpos = usage.pos(Phase.WATER)
            swat = sats[wpos]
            relperm[wpos], deriv[wpos, wpos] = self._family_relperm(
                cell, CurveFamily.WATER, swat
            )
            relperm[opos], dkro_dso = self._family_relperm(
                cell, CurveFamily.WATER_OIL, 1.0 - swat
            )
            deriv[opos, wpos] = -dkro_dso
        else:
            gpos = usage.pos(Phase.GAS)
            sgas = sats[gpos]
            relperm[gpos], deriv[gpos, gpos] = self._family_relperm(
                cell, CurveFamily.GAS, sgas
            )
            relperm[opos], dkro_dso = self._family_relperm(
                cell, CurveFamily.GAS_OIL, 1.0 - sgas
            )
            deriv[opos, gpos] = -dkro_dso
        return relperm, deriv

    def cell_capillary_pressure(
        self, cell: int, sats: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Capillary pressure and derivative matrix for one cell.

        The oil phase has zero capillary pressure, water has pcow and
        gas has pcog.
        """
        usage = self.phase_usage
        table = self.table(cell)
        pcvalues = np.zeros(usage.num_phases)
        deriv = np.zeros((usage.num_phases, usage.num_phases))
        for phase, family in [
            (Phase.WATER, CurveFamily.WATER),
            (Phase.GAS, CurveFamily.GAS),
        ]:
            if not usage.phase_used[phase]:
                continue
            pos = usage.pos(phase)
            pcvalues[pos], deriv[pos, pos] = table.family_capillary_pressure(
                family, sats[pos], self._transform(cell, family)
            )
        return pcvalues, deriv

    def relative_permeability(
        self,
        saturations: Sequence[float],
        cells: Sequence[int],
        derivatives: bool = False,
    ) -> Tuple[np.ndarray, Optional[np.ndarray]]:
        """Relative permeability for a batch of cells.

        Derivatives with respect to the oil saturation are zero, the oil
        saturation is regarded as the dependent one.

        Args:
            saturations: Saturations of the active phases, num_phases
                values for each entry in cells.
            cells: Cell indices.
            derivatives: Also compute the derivative matrices.

        Returns:
            Tuple with relperm values (same layout as saturations) and
            derivatives (num_phases**2 values per cell, column major),
            or None if not requested.
        """
        cells = self._check_cells(cells)
        saturations = self._check_saturations(saturations, len(cells))
        nph = self.num_phases
        relperm = np.zeros(len(cells) * nph)
        deriv = np.zeros(len(cells) * nph * nph) if derivatives else None
        for idx, cell in enumerate(cells):
            cell_relperm, cell_deriv = self.cell_relperm(
                cell, saturations[nph * idx : nph * (idx + 1)]
            )
            relperm[nph * idx : nph * (idx + 1)] = cell_relperm
            if derivatives:
                deriv[nph * nph * idx : nph * nph * (idx + 1)] = cell_deriv.flatten(
                    order="F"
                )
        return relperm, deriv

    def capillary_pressure(
        self,
        saturations: Sequence[float],
        cells: Sequence[int],
        derivatives: bool = False,
    ) -> Tuple[np.ndarray, Optional[np.ndarray]]:
        """Capillary pressure for a batch of cells, same layout as
        relative_permeability()"""
        cells = self._check_cells(cells)
        saturations = self._check_saturations(saturations, len(cells))
        nph = self.num_phases
        pcvalues = np.zeros(len(cells) * nph)
        deriv = np.zeros(len(cells) * nph * nph) if derivatives else None
        for idx, cell in enumerate(cells):
            cell_pc, cell_deriv = self.cell_capillary_pressure(
                cell, saturations[nph * idx : nph * (idx + 1)]
            )
            pcvalues[nph * idx : nph * (idx + 1)] = cell_pc
            if derivatives:
                deriv[nph * nph * idx : nph * nph * (idx + 1)] = cell_deriv.flatten(
                    order="F"
                )
        return pcvalues, deriv

    def saturation_range(self, cells: Sequence[int]) -> Tuple[np.ndarray, np.ndarray]:
        """Minimum and maximum saturation per phase for a batch of cells.

        With endpoint scaling, the oil range is the complement of the
        scaled water and gas ranges.

        Returns:
            Tuple with minimum and maximum saturations, num_phases values
            per cell.
        """
        cells = self._check_cells(cells)
        usage = self.phase_usage
        nph = self.num_phases
        smin = np.zeros(len(cells) * nph)
        smax = np.zeros(len(cells) * nph)
        opos = usage.pos(Phase.OIL)
        for idx, cell in enumerate(cells):
            table = self.table(cell)
            if not self.endpoint_scaling:
                smin[nph * idx : nph * (idx + 1)] = table.smin
                smax[nph * idx : nph * (idx + 1)] = table.smax
                continue
            smin[nph * idx + opos] = 1.0
            smax[nph * idx + opos] = 1.0
            for phase, family in [
                (Phase.WATER, CurveFamily.WATER),
                (Phase.GAS, CurveFamily.GAS),
            ]:
                if not usage.phase_used[phase]:
                    continue
                pos = usage.pos(phase)
                transform = self._transform(cell, family)
                if transform.do_not_scale:
                    smin[nph * idx + pos] = table.smin[pos]
                    smax[nph * idx + pos] = table.smax[pos]
                else:
                    smin[nph * idx + pos] = transform.smin
                    smax[nph * idx + pos] = transform.smax
                smin[nph * idx + opos] -= smax[nph * idx + pos]
                smax[nph * idx + opos] -= smin[nph * idx + pos]
            if usage.three_phase:
                smin[nph * idx + opos] = max(0.0, smin[nph * idx + opos])
        return smin, smax

    def update_hysteresis_state(
        self, saturations: Sequence[float], cells: Sequence[int]
    ) -> None:
        """Update the saturation history of a batch of cells.

        Does nothing unless hysteresis is active.
        """
        if self._tracker is None:
            return
        cells = self._check_cells(cells)
        saturations = self._check_saturations(saturations, len(cells))
        usage = self.phase_usage
        nph = self.num_phases
        for idx, cell in enumerate(cells):
            sats = saturations[nph * idx : nph * (idx + 1)]
            table = self.table(cell)
            swat = sats[usage.pos(Phase.WATER)] if usage.water else 0.0
            sgas = sats[usage.pos(Phase.GAS)] if usage.gas else 0.0
            if usage.water:
                self._tracker.update(
                    cell,
                    table,
                    CurveFamily.WATER_OIL,
                    1.0 - swat - sgas,
                    self._transform(cell, CurveFamily.WATER_OIL),
                )
            if usage.gas:
                self._tracker.update(
                    cell,
                    table,
                    CurveFamily.GAS,
                    sgas,
                    self._transform(cell, CurveFamily.GAS),
                )

    def calibrate_initial_saturation(
        self, cell: int, pcow: float, swat: float
    ) -> float:
        """Calibrate the capillary pressure of a cell to an initial
        water saturation.

        The water capillary pressure of the cell is scaled such that it
        equals pcow at swat. Can only be called once per cell.

        Args:
            cell: Cell index
            pcow: Oil pressure minus water pressure
            swat: Initial water saturation

        Returns:
            The water saturation to use, swat clamped to the water
            range if needed.
        """
        if not self.phase_usage.water:
            raise ValueError("Initial water saturation calibration requires water")
        self._check_cells([cell])
        if cell in self._calibrated:
            raise ValueError(f"Cell {cell}: Capillary pressure is already calibrated")
        if self._transforms is None:
            logger.debug("Creating unscaled transforms for calibration")
            self._transforms = EndpointScalingBuilder(
                self.phase_usage, self.tables, self.region_map
            ).build()
        self._calibrated.add(cell)

        transform = self._transforms[cell].wat
        if swat <= transform.smin:
            return transform.smin
        if pcow < PC_LOW_THRESHOLD:
            return transform.smax
        pcvalue = self.table(cell).family_capillary_pressure(
            CurveFamily.WATER, swat, transform
        )[0]
        if pcvalue > PC_LOW_THRESHOLD:
            transform.pc_factor *= pcow / pcvalue
        return swat
