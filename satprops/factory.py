"""Factory functions for creating the satprops objects from tabular data"""

import zipfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import openpyxl
import pandas as pd
import xlrd

from satprops import getLogger_satprops
from satprops.constants import IMBIBITION_SCALING_KEYWORDS, SCALING_KEYWORDS

from .options import SaturationOptions
from .phases import Phase, PhaseUsage
from .regions import CellRegionMap
from .satfunctable import SGOF_COLUMNS, SWOF_COLUMNS, RegionTable
from .satprops import SaturationProps

logger = getLogger_satprops(__name__)

SATFUNC_KEYWORDS: Dict[str, List[str]] = {"SWOF": SWOF_COLUMNS, "SGOF": SGOF_COLUMNS}

REGION_COLUMNS: List[str] = ["SATNUM", "IMBNUM", "ENDNUM"]

SATURATION_COLUMNS: Dict[Phase, str] = {
    Phase.WATER: "SW",
    Phase.OIL: "SO",
    Phase.GAS: "SG",
}

EXCEL_ENGINES: Dict[str, str] = {"xlsx": "openpyxl", "xls": "xlrd"}


def read_tabular(
    inputfile: Union[str, Path, pd.DataFrame], sheet_name: Optional[str] = None
) -> pd.DataFrame:
    """Read a CSV, XLS or XLSX file into a dataframe.

    Dataframes are passed through (as a copy). Column names are
    converted to uppercase, and all-empty rows and columns are removed.

    Args:
        inputfile: Filename or a pandas DataFrame.
        sheet_name: Sheet-name, only used when loading xlsx files.
    """
    if isinstance(inputfile, pd.DataFrame):
        input_df = inputfile.copy()
    elif isinstance(inputfile, (str, Path)):
        if not Path(inputfile).is_file():
            raise IOError("File not found " + str(inputfile))
        input_df = _read_file(Path(inputfile), sheet_name)
    else:
        raise ValueError("Unsupported argument " + str(inputfile))

    input_df.columns = [str(colname).strip().upper() for colname in input_df.columns]

    # Empty cells in Excel/LibreOffice can give all-NaN rows and columns
    input_df = input_df.dropna(axis="columns", how="all")
    input_df = input_df.dropna(axis="index", how="all")
    return input_df.reset_index(drop=True)


def _read_file(path: Path, sheet_name: Optional[str]) -> pd.DataFrame:
    file_format = infer_tabular_file_format(path)
    if not file_format:
        raise ValueError(f"Could not read {path} as CSV, XLS or XLSX")

    if file_format == "csv":
        if sheet_name is not None:
            logger.warning(
                "Sheet name only relevant for XLSX files, ignoring %s", sheet_name
            )
        logger.info("Parsed CSV file %s", path)
        return pd.read_csv(path, skipinitialspace=True, encoding="utf-8")

    excel_options: Dict[str, Any] = {"engine": EXCEL_ENGINES[file_format]}
    if sheet_name:
        excel_options["sheet_name"] = sheet_name
    try:
        dframe = pd.read_excel(path, **excel_options)
    except (KeyError, ValueError) as err:
        if not sheet_name:
            raise
        raise ValueError(
            f"Non-existing sheet-name {sheet_name} provided for {path}"
        ) from err
    logger.info(
        "Parsed %s file %s, sheet %s",
        file_format.upper(),
        path,
        sheet_name or "(first)",
    )
    return dframe


def _check_region_column(dframe: pd.DataFrame, column: str) -> None:
    """Check that a region column has only integers, and convert it"""
    if dframe[column].isnull().sum() > 0:
        raise ValueError(
            f"Found not-a-number in the {column} column. This could be due to "
            "merged cells in XLSX, which is not supported."
        )
    values = dframe[column].values
    try:
        if not np.all(np.equal(np.mod(values.astype(float), 1), 0)):
            raise ValueError(f"{column} must contain only integers")
    except (TypeError, ValueError) as err:
        raise ValueError(f"{column} must contain only integers") from err
    dframe[column] = dframe[column].astype(int)


class SatPropsFactory(object):
    """Class for implementing the factories for satprops objects

    Methods are implemented as static methods, with no class state.
    """

    @staticmethod
    def load_satfunc_df(
        inputfile: Union[str, Path, pd.DataFrame], sheet_name: Optional[str] = None
    ) -> pd.DataFrame:
        """Read saturation function tables from CSV or XLSX file.

        The tables are in long format, with a KEYWORD column telling if a
        row is part of a SWOF table (columns SW, KRW, KROW, PCOW) or a SGOF
        table (columns SG, KRG, KROG, PCOG), and a SATNUM column telling
        which table. Column headers and keyword values are case
        insensitive. The PC columns are optional.

        Args:
            inputfile: Filename for XLSX or CSV file, or a pandas DataFrame.
            sheet_name: Sheet-name, only used when loading xlsx files.

        Returns:
            Dataframe sorted on KEYWORD and SATNUM, rows within a table
            in their original order.
        """
        input_df = read_tabular(inputfile, sheet_name)
        if input_df.empty:
            raise ValueError("Saturation function input is empty")
        for column in ["KEYWORD", "SATNUM"]:
            if column not in input_df:
                raise ValueError(
                    f"{column} must be present in saturation function data"
                )

        input_df["KEYWORD"] = input_df["KEYWORD"].astype(str).str.strip().str.upper()
        unknown = set(input_df["KEYWORD"]) - set(SATFUNC_KEYWORDS)
        if unknown:
            raise ValueError(f"Unsupported saturation function keyword(s): {unknown}")

        _check_region_column(input_df, "SATNUM")
        if min(input_df["SATNUM"]) != 1:
            raise ValueError("SATNUM must start at 1")
        for keyword in input_df["KEYWORD"].unique():
            satnums = input_df[input_df["KEYWORD"] == keyword]["SATNUM"]
            if max(satnums) != len(satnums.unique()):
                raise ValueError(
                    f"Missing SATNUMs for {keyword}? Max SATNUM is not "
                    "equal to number of unique SATNUMS"
                )
            for column in SATFUNC_KEYWORDS[keyword][:3]:
                if column not in input_df:
                    raise ValueError(f"Column {column} is required for {keyword}")

        logger.info(
            "Loaded saturation functions %s for %d SATNUM(s)",
            ", ".join(sorted(input_df["KEYWORD"].unique())),
            input_df["SATNUM"].max(),
        )
        return input_df.sort_values(["KEYWORD", "SATNUM"], kind="mergesort")

    @staticmethod
    def load_cells_df(
        inputfile: Union[str, Path, pd.DataFrame], sheet_name: Optional[str] = None
    ) -> pd.DataFrame:
        """Read per cell data from CSV or XLSX file.

        One row per cell. Recognized (optional) columns are SATNUM, IMBNUM
        and ENDNUM for regions, DEPTH for the cell centroid depth, any
        endpoint scaling keyword (e.g. SWCR, ISWCR, KRW, PCW) and SW, SO
        and SG for saturations. Empty cells in scaling columns mean no
        scaling for that cell. Other columns are ignored.

        Args:
            inputfile: Filename for XLSX or CSV file, or a pandas DataFrame.
            sheet_name: Sheet-name, only used when loading xlsx files.
        """
        input_df = read_tabular(inputfile, sheet_name)
        if input_df.empty:
            raise ValueError("Cell input is empty")
        for column in REGION_COLUMNS:
            if column in input_df:
                _check_region_column(input_df, column)
        known = set(
            REGION_COLUMNS
            + ["DEPTH", "CELL"]
            + list(SATURATION_COLUMNS.values())
            + SCALING_KEYWORDS
            + IMBIBITION_SCALING_KEYWORDS
        )
        ignored = [column for column in input_df.columns if column not in known]
        if ignored:
            logger.warning("Ignoring unknown columns in cell data: %s", str(ignored))
        logger.info("Loaded data for %d cells", len(input_df))
        return input_df

    @staticmethod
    def create_region_tables(
        satfunc_df: pd.DataFrame, phase_usage: PhaseUsage
    ) -> List[RegionTable]:
        """Create one RegionTable for each SATNUM.

        Args:
            satfunc_df: Saturation function data as returned by
                load_satfunc_df().
            phase_usage: Active phases.
        """
        satfunc_df = SatPropsFactory.load_satfunc_df(satfunc_df)
        required = []
        if phase_usage.water:
            required.append("SWOF")
        if phase_usage.gas:
            required.append("SGOF")

        num_tables = None
        for keyword in required:
            keyword_df = satfunc_df[satfunc_df["KEYWORD"] == keyword]
            if keyword_df.empty:
                raise ValueError(
                    f"No {keyword} tables found, required for {phase_usage}"
                )
            keyword_tables = int(keyword_df["SATNUM"].max())
            if num_tables is None:
                num_tables = keyword_tables
            elif num_tables != keyword_tables:
                raise ValueError("Inconsistent number of tables in SWOF and SGOF")

        tables = []
        for satnum in range(1, num_tables + 1):
            tables_for_satnum: Dict[str, Optional[pd.DataFrame]] = {
                "SWOF": None,
                "SGOF": None,
            }
            for keyword in required:
                rows = satfunc_df[
                    (satfunc_df["KEYWORD"] == keyword)
                    & (satfunc_df["SATNUM"] == satnum)
                ]
                columns = [col for col in SATFUNC_KEYWORDS[keyword] if col in rows]
                tables_for_satnum[keyword] = (
                    rows[columns]
                    .dropna(axis="columns", how="all")
                    .dropna(axis="index", how="all")
                )
            try:
                tables.append(
                    RegionTable(
                        phase_usage,
                        swof=tables_for_satnum["SWOF"],
                        sgof=tables_for_satnum["SGOF"],
                        tag=f"SATNUM {satnum}",
                    )
                )
            except ValueError as err:
                raise ValueError(f"Error for SATNUM {satnum}: {str(err)}") from err
        return tables

    @staticmethod
    def create_options(
        params: Optional[Union[SaturationOptions, Dict[str, Any]]] = None
    ) -> SaturationOptions:
        """Create options from a dictionary, see SaturationOptions.from_dict()"""
        if isinstance(params, SaturationOptions):
            return params
        return SaturationOptions.from_dict(params)

    @staticmethod
    def split_depth_tables(
        tables: Optional[Union[pd.DataFrame, Sequence[pd.DataFrame]]]
    ) -> Optional[List[pd.DataFrame]]:
        """Split a depth table dataframe with an ENDNUM column into one
        dataframe per endpoint region. Lists are passed through."""
        if tables is None:
            return None
        if not isinstance(tables, pd.DataFrame):
            return list(tables)
        tables = read_tabular(tables)
        if "ENDNUM" not in tables:
            return [tables]
        _check_region_column(tables, "ENDNUM")
        if min(tables["ENDNUM"]) != 1 or max(tables["ENDNUM"]) != len(
            tables["ENDNUM"].unique()
        ):
            raise ValueError("ENDNUM in depth tables must be consecutive from 1")
        return [
            tables[tables["ENDNUM"] == endnum]
            .drop("ENDNUM", axis="columns")
            .sort_values("DEPTH")
            .reset_index(drop=True)
            for endnum in range(1, max(tables["ENDNUM"]) + 1)
        ]

    @staticmethod
    def create_saturation_props(
        satfunc_df: Union[str, Path, pd.DataFrame],
        phases: Union[str, Sequence[str], PhaseUsage],
        cells_df: Optional[Union[str, Path, pd.DataFrame]] = None,
        options: Optional[Union[SaturationOptions, Dict[str, Any]]] = None,
        enptvd: Optional[Union[pd.DataFrame, Sequence[pd.DataFrame]]] = None,
        enkrvd: Optional[Union[pd.DataFrame, Sequence[pd.DataFrame]]] = None,
    ) -> SaturationProps:
        """Create a SaturationProps object from tabular data.

        Args:
            satfunc_df: Saturation function tables, see load_satfunc_df().
            phases: Active phases, e.g. "water,oil,gas".
            cells_df: Cell data, see load_cells_df(). If not given,
                there is one cell for each SATNUM, in SATNUM order.
            options: Endpoint scaling and hysteresis switches.
            enptvd: Saturation endpoint versus depth table(s), a list with
                one dataframe per endpoint region, or one dataframe with
                an ENDNUM column.
            enkrvd: Relperm endpoint versus depth table(s), same form
                as enptvd.
        """
        if not isinstance(phases, PhaseUsage):
            phases = PhaseUsage(phases)
        tables = SatPropsFactory.create_region_tables(satfunc_df, phases)

        if cells_df is None:
            cells_df = pd.DataFrame({"SATNUM": range(1, len(tables) + 1)})
        cells_df = SatPropsFactory.load_cells_df(cells_df)

        region_map = CellRegionMap(
            len(cells_df),
            len(tables),
            satnum=cells_df["SATNUM"].values if "SATNUM" in cells_df else None,
            imbnum=cells_df["IMBNUM"].values if "IMBNUM" in cells_df else None,
            endnum=cells_df["ENDNUM"].values if "ENDNUM" in cells_df else None,
        )
        scaling_arrays = {
            column: cells_df[column].astype(float).values
            for column in cells_df.columns
            if column in SCALING_KEYWORDS + IMBIBITION_SCALING_KEYWORDS
        }
        if scaling_arrays:
            logger.debug("Scaling columns in cell data: %s", str(list(scaling_arrays)))
        cell_depths = cells_df["DEPTH"].values if "DEPTH" in cells_df else None

        return SaturationProps(
            phases,
            tables,
            region_map,
            options=SatPropsFactory.create_options(options),
            scaling_arrays=scaling_arrays,
            enptvd=SatPropsFactory.split_depth_tables(enptvd),
            enkrvd=SatPropsFactory.split_depth_tables(enkrvd),
            cell_depths=cell_depths,
        )

    @staticmethod
    def cell_saturations(cells_df: pd.DataFrame, phase_usage: PhaseUsage) -> np.ndarray:
        """Flat saturation array from the SW, SO and SG columns of cell data.

        The oil saturation is computed as the complement if not given.
        """
        saturations = np.zeros((len(cells_df), phase_usage.num_phases))
        for phase in [Phase.WATER, Phase.GAS]:
            if not phase_usage.phase_used[phase]:
                continue
            column = SATURATION_COLUMNS[phase]
            if column not in cells_df:
                raise ValueError(f"Column {column} with saturations is required")
            saturations[:, phase_usage.pos(phase)] = cells_df[column].astype(float)
        opos = phase_usage.pos(Phase.OIL)
        if "SO" in cells_df:
            saturations[:, opos] = cells_df["SO"].astype(float)
        else:
            saturations[:, opos] = 1.0 - saturations.sum(axis=1)
        if np.isnan(saturations).any():
            raise ValueError("Found not-a-number in saturation columns")
        return saturations.reshape(-1)


def infer_tabular_file_format(filename: Union[str, Path]) -> str:
    """Determine the file format of a file containing tabular data,
    distinguishes between csv, xls and xlsx

    The Excel engines are tried first, a file is CSV if it is non-empty
    and parses as UTF-8 CSV.

    Args:
        filename: Path to file

    Returns:
        One of "csv", "xlsx" or "xls". Empty string if nothing found out.
    """
    for file_format, engine in EXCEL_ENGINES.items():
        try:
            pd.read_excel(filename, engine=engine)
            return file_format
        except (
            ValueError,
            TypeError,
            OSError,
            zipfile.BadZipFile,
            openpyxl.utils.exceptions.InvalidFileException,
            xlrd.biffh.XLRDError,
        ):
            continue

    try:
        dframe = pd.read_csv(filename, encoding="utf-8")
    except UnicodeDecodeError:
        return ""
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as csverror:
        logger.error("Message from CSV parser: %s", str(csverror))
        return ""
    return "" if dframe.empty else "csv"
