"""Mapping from grid cells to saturation function regions"""

from typing import Optional, Sequence

import numpy as np

import satprops

logger = satprops.getLogger_satprops(__name__)


def _region_array(
    name: str, values: Sequence[int], number_of_cells: int
) -> np.ndarray:
    """Convert 1-based region numbers to a 0-based integer array"""
    array = np.asarray(values)
    if array.ndim != 1 or len(array) != number_of_cells:
        raise ValueError(
            f"{name} has {array.size} values, expected {number_of_cells} (one per cell)"
        )
    if len(array) and not np.all(np.equal(np.mod(array, 1), 0)):
        raise ValueError(f"{name} must contain integers")
    return array.astype(int) - 1


class CellRegionMap(object):
    """Region indices for each cell.

    Region numbers are given 1-based, as in simulator input, and stored
    0-based.

    Args:
        number_of_cells: Number of grid cells
        num_tables: Number of saturation function tables (regions)
        satnum: Saturation region per cell. All cells in region 1 if None.
        imbnum: Imbibition region per cell, only recorded. The imbibition
            curve is always endpoint scaled from the drainage table of
            the cell.
        endnum: Endpoint depth table region per cell. Region number 0
            disables depth table lookup for that cell. All cells use the
            first depth table if None.
    """

    def __init__(
        self,
        number_of_cells: int,
        num_tables: int,
        satnum: Optional[Sequence[int]] = None,
        imbnum: Optional[Sequence[int]] = None,
        endnum: Optional[Sequence[int]] = None,
    ) -> None:
        if number_of_cells < 0:
            raise ValueError("Number of cells can not be negative")
        if num_tables < 1:
            raise ValueError("At least one saturation function table is required")
        self.number_of_cells = number_of_cells
        self.num_tables = num_tables

        if satnum is None:
            self.region_of = np.zeros(number_of_cells, dtype=int)
        else:
            self.region_of = _region_array("SATNUM", satnum, number_of_cells)
            self._check_range("SATNUM", self.region_of)

        self.imb_region_of: Optional[np.ndarray] = None
        if imbnum is not None:
            self.imb_region_of = _region_array("IMBNUM", imbnum, number_of_cells)
            self._check_range("IMBNUM", self.imb_region_of)

        if endnum is None:
            self.endpoint_region_of = np.zeros(number_of_cells, dtype=int)
        else:
            self.endpoint_region_of = _region_array("ENDNUM", endnum, number_of_cells)
            if (self.endpoint_region_of < -1).any():
                raise ValueError("ENDNUM must be non-negative")

        logger.debug(
            "Region map for %d cells, %d table(s)", number_of_cells, num_tables
        )

    def _check_range(self, name: str, regions: np.ndarray) -> None:
        if len(regions) == 0:
            return
        if regions.min() < 0:
            raise ValueError(f"{name} must be at least 1, got {regions.min() + 1}")
        if regions.max() >= self.num_tables:
            raise ValueError(
                f"{name} region {regions.max() + 1} exceeds "
                f"the number of tables ({self.num_tables})"
            )

    @property
    def max_endpoint_region(self) -> int:
        """Largest 0-based endpoint region index in use, -1 if none"""
        if len(self.endpoint_region_of) == 0:
            return -1
        return int(self.endpoint_region_of.max())

    def __len__(self) -> int:
        return self.number_of_cells
