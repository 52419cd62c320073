"""Set up endpoint scaling transforms for every cell"""

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

import satprops
from satprops.constants import EPSILON as epsilon
from satprops.constants import (
    IMBIBITION_SCALING_KEYWORDS,
    KR_ENDPOINT_TOLERANCE,
    PCMAX_ZERO_LIMIT,
    RELPERM_KEYWORDS,
    SATURATION_KEYWORDS,
    SCALING_KEYWORDS,
)
from satprops.epstransform import CurveFamily, EPSTransform, EPSTransforms
from satprops.phases import Phase, PhaseUsage
from satprops.regions import CellRegionMap
from satprops.satfunctable import RegionTable
from satprops.utils.interpolation import interpolate_in_depth

logger = satprops.getLogger_satprops(__name__)

# Phase that must be active for a scaling keyword to have any effect
KEYWORD_PHASE: Dict[str, Phase] = {
    "SWL": Phase.WATER,
    "SWU": Phase.WATER,
    "SWCR": Phase.WATER,
    "SGL": Phase.GAS,
    "SGU": Phase.GAS,
    "SGCR": Phase.GAS,
    "SOWCR": Phase.WATER,
    "SOGCR": Phase.GAS,
    "KRW": Phase.WATER,
    "KRG": Phase.GAS,
    "KRO": Phase.OIL,
    "KRWR": Phase.WATER,
    "KRGR": Phase.GAS,
    "KRORW": Phase.WATER,
    "KRORG": Phase.GAS,
    "PCW": Phase.WATER,
    "PCG": Phase.GAS,
}


def base_keyword(keyword: str) -> str:
    """Strip the imbibition prefix from a scaling keyword.

    Raises ValueError for unknown keywords"""
    keyword = keyword.strip().upper()
    if keyword in SCALING_KEYWORDS:
        return keyword
    if keyword in IMBIBITION_SCALING_KEYWORDS:
        return keyword[1:]
    raise ValueError(f"Unknown scaling keyword: {keyword}")


def _cell_value(values: Optional[np.ndarray], cell: int) -> Optional[float]:
    """The value for one cell, None if not configured for that cell"""
    if values is None or np.isnan(values[cell]):
        return None
    return float(values[cell])


def _normalize_depth_tables(
    tables: Optional[Sequence[pd.DataFrame]], name: str, columns: List[str]
) -> List[pd.DataFrame]:
    if tables is None:
        return []
    if isinstance(tables, pd.DataFrame):
        tables = [tables]
    normalized = []
    for idx, table in enumerate(tables):
        if not isinstance(table, pd.DataFrame):
            raise TypeError(f"{name} table {idx + 1} must be a pandas DataFrame")
        table = table.copy()
        table.columns = [str(col).strip().upper() for col in table.columns]
        if "DEPTH" not in table:
            raise ValueError(f"{name} table {idx + 1} has no DEPTH column")
        unknown = set(table.columns) - set(columns) - {"DEPTH"}
        if unknown:
            raise ValueError(
                f"Unknown columns in {name} table {idx + 1}: {sorted(unknown)}"
            )
        normalized.append(table.astype(float))
    return normalized


class EndpointScalingBuilder(object):
    """Combine region table endpoints with per-cell scaling data into
    one EPSTransform per cell and curve family.

    Scaling data for a keyword can be given directly as one value per cell
    (NaN for cells without a value), and cells without a direct value
    can be filled by linear interpolation in depth tables, enptvd for the
    saturation endpoints and enkrvd for the relperm endpoints. There is
    one depth table per endpoint region.

    Args:
        phase_usage: Active phases.
        tables: Region tables, indexed by the region map.
        region_map: Region indices per cell.
        scaling_arrays: Dictionary from scaling keyword (case insensitive,
            imbibition keywords prefixed with I) to one value per cell.
        enptvd: Saturation endpoint versus depth tables, with a DEPTH
            column and any of the saturation keywords as columns.
        enkrvd: Relperm endpoint versus depth tables, with a DEPTH column
            and any of the relperm keywords as columns.
        cell_depths: Cell centroid depth, one value per cell. Required
            if depth tables are given.
        three_point: Use three-point scaling of saturations.
    """

    def __init__(
        self,
        phase_usage: PhaseUsage,
        tables: List[RegionTable],
        region_map: CellRegionMap,
        scaling_arrays: Optional[Dict[str, Sequence[float]]] = None,
        enptvd: Optional[Sequence[pd.DataFrame]] = None,
        enkrvd: Optional[Sequence[pd.DataFrame]] = None,
        cell_depths: Optional[Sequence[float]] = None,
        three_point: bool = False,
    ) -> None:
        self.phase_usage = phase_usage
        self.tables = tables
        self.region_map = region_map
        self.three_point = three_point
        self.number_of_cells = region_map.number_of_cells

        self.scaling_arrays: Dict[str, np.ndarray] = {}
        for keyword, values in (scaling_arrays or {}).items():
            keyword = keyword.strip().upper()
            base_keyword(keyword)
            if values is None:
                continue
            array = np.asarray(values, dtype=float)
            if array.shape != (self.number_of_cells,):
                raise ValueError(
                    f"Scaling keyword {keyword} has {array.size} values, "
                    f"expected {self.number_of_cells}"
                )
            self.scaling_arrays[keyword] = array

        self.enptvd = _normalize_depth_tables(enptvd, "ENPTVD", SATURATION_KEYWORDS)
        self.enkrvd = _normalize_depth_tables(enkrvd, "ENKRVD", RELPERM_KEYWORDS)

        if cell_depths is not None:
            cell_depths = np.asarray(cell_depths, dtype=float)
            if cell_depths.shape != (self.number_of_cells,):
                raise ValueError(
                    f"Got {cell_depths.size} cell depths, "
                    f"expected {self.number_of_cells}"
                )
        self.cell_depths: Optional[np.ndarray] = cell_depths

        for name, depth_tables in [("ENPTVD", self.enptvd), ("ENKRVD", self.enkrvd)]:
            if not depth_tables:
                continue
            if self.cell_depths is None:
                raise ValueError(f"{name} requires cell depths")
            if region_map.max_endpoint_region >= len(depth_tables):
                raise ValueError(
                    f"ENDNUM: Found region {region_map.max_endpoint_region + 1}, "
                    f"but only {len(depth_tables)} {name} table(s)"
                )

    def configured_keywords(self) -> List[str]:
        """Scaling keywords and depth table keywords that are given,
        regardless of phase activity and values"""
        keywords = sorted(self.scaling_arrays)
        if self.enptvd:
            keywords.append("ENPTVD")
        if self.enkrvd:
            keywords.append("ENKRVD")
        return keywords

    def resolve_scaling_array(self, keyword: str) -> Optional[np.ndarray]:
        """Per-cell values for a scaling keyword.

        Direct values take precedence, cells without direct values are
        filled from the depth table of the cell's endpoint region. Outside
        the depth span of a table, cells get no value (NaN). Imbibition
        keywords are never read from depth tables.

        Args:
            keyword: Scaling keyword, case insensitive, possibly with
                the imbibition prefix.

        Returns:
            Array with one value per cell, NaN where there is no value,
            or None if the keyword has no value in any cell or belongs
            to an inactive phase.
        """
        keyword = keyword.strip().upper()
        base = base_keyword(keyword)
        if not self.phase_usage.phase_used[KEYWORD_PHASE[base]]:
            return None

        values = np.full(self.number_of_cells, np.nan)
        if keyword in self.scaling_arrays:
            values = self.scaling_arrays[keyword].copy()

        # Depth tables only hold drainage endpoints:
        if keyword != base:
            depth_tables = []
        elif base in SATURATION_KEYWORDS:
            depth_tables = self.enptvd
        elif base in RELPERM_KEYWORDS:
            depth_tables = self.enkrvd
        else:
            depth_tables = []

        missing = np.isnan(values)
        if missing.any():
            endnum = self.region_map.endpoint_region_of
            for region, table in enumerate(depth_tables):
                if base not in table:
                    continue
                column = table[base].where(table[base] >= 0.0)
                if column.isnull().all():
                    continue
                cells = missing & (endnum == region)
                if cells.any():
                    values[cells] = interpolate_in_depth(
                        table["DEPTH"].values, column.values, self.cell_depths[cells]
                    )

        if np.isnan(values).all():
            return None
        logger.info("Scaling parameter '%s' assigned", keyword)
        return values

    def build(self, imbibition: bool = False) -> List[EPSTransforms]:
        """Compute the transforms for all cells.

        Args:
            imbibition: Use the imbibition keywords (prefixed with I)

        Returns:
            List with one EPSTransforms per cell.
        """
        prefix = "I" if imbibition else ""
        arrays = {
            keyword: self.resolve_scaling_array(prefix + keyword)
            for keyword in SCALING_KEYWORDS
        }
        usage = self.phase_usage
        transforms = []
        for cell in range(self.number_of_cells):
            table = self.tables[self.region_map.region_of[cell]]
            cell_transforms = EPSTransforms()

            def value(keyword: str) -> Optional[float]:
                return _cell_value(arrays[keyword], cell)

            if usage.water:
                s0_tab = table.sgl if usage.three_phase else -1.0
                cell_transforms.wat = self.init_transform(
                    cell,
                    False,
                    (table.swl, table.swcr, table.swu, table.sowcr, s0_tab),
                    (table.krwr, table.krwmax, table.pcwmax),
                    (value("SWL"), value("SWCR"), value("SWU"), value("SOWCR")),
                    value("SGL"),
                    (value("KRWR"), value("KRW"), value("PCW")),
                )
                cell_transforms.watoil = self.init_transform(
                    cell,
                    True,
                    (0.0, table.sowcr, table.swl, table.swcr, s0_tab),
                    (table.krorw, table.kromax, 0.0),
                    (None, value("SOWCR"), value("SWL"), value("SWCR")),
                    value("SGL"),
                    (value("KRORW"), value("KRO"), None),
                )
            if usage.gas:
                s0_tab = table.swl if usage.three_phase else -1.0
                cell_transforms.gas = self.init_transform(
                    cell,
                    False,
                    (table.sgl, table.sgcr, table.sgu, table.sogcr, s0_tab),
                    (table.krgr, table.krgmax, table.pcgmax),
                    (value("SGL"), value("SGCR"), value("SGU"), value("SOGCR")),
                    value("SWL"),
                    (value("KRGR"), value("KRG"), value("PCG")),
                )
                cell_transforms.gasoil = self.init_transform(
                    cell,
                    True,
                    (0.0, table.sogcr, table.sgl, table.sgcr, s0_tab),
                    (table.krorg, table.kromax, 0.0),
                    (None, value("SOGCR"), value("SGL"), value("SGCR")),
                    value("SWL"),
                    (value("KRORG"), value("KRO"), None),
                )
            transforms.append(cell_transforms)

        num_scaled = sum(
            1
            for cell_transforms in transforms
            for family in CurveFamily
            if cell_transforms.get(family) is not None
            and not cell_transforms.get(family).do_not_scale
        )
        logger.debug(
            "%s transforms for %d cells, %d scaled curves",
            "Imbibition" if imbibition else "Drainage",
            self.number_of_cells,
            num_scaled,
        )
        return transforms

    def init_transform(
        self,
        cell: int,
        oil: bool,
        sat_tab: Tuple[float, float, float, float, float],
        values_tab: Tuple[float, float, float],
        sat_cell: Tuple[
            Optional[float], Optional[float], Optional[float], Optional[float]
        ],
        s0_cell: Optional[float],
        values_cell: Tuple[Optional[float], Optional[float], Optional[float]],
    ) -> EPSTransform:
        """Compute the transform for one cell and one curve family.

        For the oil curves (krow, krog), the saturations are oil
        saturations. The maximum is then computed as the complement of
        the minimum saturation of the displacing phase (su) and of the
        third phase (s0).

        Args:
            cell: Cell index, used in error messages.
            oil: True for the oil curves.
            sat_tab: Table values for minimum, critical, maximum, and
                critical displacing saturation, and the minimum saturation
                of the third phase (negative in two-phase runs).
            values_tab: Table relperm at the critical displacing
                saturation, maximum relperm and maximum capillary pressure.
            sat_cell: Cell values for the saturations in sat_tab
                (None if not scaled).
            s0_cell: Cell value for the minimum saturation of the third
                phase.
            values_cell: Cell values for values_tab.
        """
        sl_tab, scr_tab, su_tab, sxcr_tab, s0_tab = sat_tab
        krsr_tab, krmax_tab, pcmax_tab = values_tab
        sl, scr, su, sxcr = sat_cell
        krsr, krmax, pcmax = values_cell
        two_phase = s0_tab < 0.0
        if two_phase:
            s0_cell = None
            s0_tab = 0.0

        def cell_or_table(cell_value: Optional[float], table_value: float) -> float:
            return table_value if cell_value is None else cell_value

        # Table anchors:
        s_r = 1.0 - sxcr_tab - s0_tab
        s_max = 1.0 - su_tab - s0_tab if oil else su_tab

        data = EPSTransform()
        data.do_3pt = self.three_point
        data.table_smin = sl_tab
        data.table_scr = scr_tab
        data.table_sr = s_r
        data.table_smax = s_max
        data.table_krsr = krsr_tab

        if (
            scr is None
            and su is None
            and (sxcr is None or not self.three_point)
            and s0_cell is None
        ):
            data.do_not_scale = True
            data.smin = sl_tab
            data.smax = s_max
            data.scr = scr_tab
            data.sr = s_r
        else:
            data.do_not_scale = False
            data.scr = cell_or_table(scr, scr_tab)
            if self.three_point:
                data.sr = 1.0 - cell_or_table(sxcr, sxcr_tab) - cell_or_table(
                    s0_cell, s0_tab
                )
            if oil:
                data.smin = sl_tab
                data.smax = 1.0 - cell_or_table(su, su_tab) - cell_or_table(
                    s0_cell, s0_tab
                )
            else:
                data.smin = cell_or_table(sl, sl_tab)
                data.smax = cell_or_table(su, su_tab)
            if data.smax - data.scr < epsilon:
                raise ValueError(
                    f"Cell {cell}: Scaled maximum saturation {data.smax:g} "
                    f"is not above scaled critical saturation {data.scr:g}"
                )
            if not oil and data.smax - data.smin < epsilon:
                raise ValueError(
                    f"Cell {cell}: Scaled saturation range "
                    f"[{data.smin:g}, {data.smax:g}] is empty"
                )

            if self.three_point:
                first_width = data.sr - data.scr
                second_width = data.smax - data.sr
                if first_width > epsilon:
                    data.slope1 = (s_r - scr_tab) / first_width
                if second_width > epsilon:
                    data.slope2 = (s_max - s_r) / second_width
                if first_width <= epsilon:
                    data.slope1 = data.slope2
                if second_width <= epsilon:
                    data.slope2 = data.slope1
            else:
                data.slope1 = data.slope2 = (s_max - scr_tab) / (data.smax - data.scr)
                # Inverse map of the table displacing saturation, anchor
                # for relperm value scaling:
                if abs(s_max - scr_tab) > epsilon:
                    data.sr = data.scr + (s_r - scr_tab) * (data.smax - data.scr) / (
                        s_max - scr_tab
                    )
                else:
                    data.sr = data.scr

        data.do_kr_max = krmax is not None
        data.do_kr_crit = krsr is not None
        data.do_sat_interp = False
        data.krsr = cell_or_table(krsr, krsr_tab)
        data.krmax = cell_or_table(krmax, krmax_tab)
        data.kr_slope_crit = data.krsr / krsr_tab if abs(krsr_tab) > epsilon else 1.0
        data.kr_slope_max = data.krmax / krmax_tab if abs(krmax_tab) > epsilon else 1.0
        if data.do_kr_crit:
            if data.sr > data.smax - KR_ENDPOINT_TOLERANCE:
                logger.debug(
                    "Cell %d: Displacing saturation at maximum, "
                    "ignoring critical relperm",
                    cell,
                )
                data.do_kr_crit = False
            elif abs(krmax_tab - krsr_tab) > KR_ENDPOINT_TOLERANCE:
                data.kr_slope_max = (data.krmax - data.krsr) / (krmax_tab - krsr_tab)
            else:
                data.do_sat_interp = True
                data.kr_slope_max = (data.krmax - data.krsr) / (data.smax - data.sr)

        if (
            abs(pcmax_tab) < PCMAX_ZERO_LIMIT
            or pcmax is None
            or pcmax_tab * pcmax < 0.0
        ):
            data.pc_factor = 1.0
        else:
            data.pc_factor = pcmax / pcmax_tab
        return data
