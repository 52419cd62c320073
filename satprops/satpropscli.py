"""Command line tool for satprops"""

import argparse
import sys
import traceback
from pathlib import Path
from typing import Optional

import pandas as pd

from satprops import Phase, PhaseUsage, __version__, getLogger_satprops

from .factory import SatPropsFactory
from .options import SaturationOptions

EPILOG = """
The saturation function file should contain the tables in long format, with
a column KEYWORD telling whether the row belongs to a SWOF table (columns SW,
KRW, KROW and optionally PCOW) or a SGOF table (columns SG, KRG, KROG and
optionally PCOG), and a column SATNUM with consecutive integers starting at 1.
Column headers are case insensitive.

The cell file should contain one row per cell, with the saturations in the
columns SW and SG (SO is computed if not given). Optional columns are SATNUM,
IMBNUM and ENDNUM for regions, DEPTH, and any endpoint scaling keyword
(SWL, SWCR, SWU, SGL, SGCR, SGU, SOWCR, SOGCR, KRW, KRG, KRO, KRWR, KRGR,
KRORW, KRORG, PCW, PCG). Scaling columns are only used with --endscale, and
empty cells mean no scaling for that cell.

The output has one row per cell, with relative permeability, capillary
pressure and the saturation range for each active phase.
"""

PHASE_SUFFIX = {Phase.WATER: "W", Phase.OIL: "O", Phase.GAS: "G"}


def get_parser() -> argparse.ArgumentParser:
    """Construct the argparse parser for the command line script.

    Returns:
        argparse.Parser
    """
    parser = argparse.ArgumentParser(
        prog="satprops",
        description=(
            "satprops (" + __version__ + ") evaluates relative permeability "
            "and capillary pressure per cell, with optional endpoint scaling."
        ),
        epilog=EPILOG,
    )
    parser.add_argument(
        "satfuncfile",
        help="CSV or XLSX file with SWOF and/or SGOF tables",
    )
    parser.add_argument(
        "cellfile",
        help="CSV or XLSX file with one row per cell",
    )
    parser.add_argument(
        "--phases",
        default="water,oil,gas",
        help="Comma separated list of active phases. Default water,oil,gas",
    )
    parser.add_argument(
        "--endscale",
        action="store_true",
        default=False,
        help="Use endpoint scaling from the scaling columns in the cell file",
    )
    parser.add_argument(
        "--scalecrs",
        action="store_true",
        default=False,
        help="Use three-point scaling, only with --endscale",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print informational messages while processing input",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print debug information",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s (version " + __version__ + ")",
    )
    parser.add_argument(
        "-o",
        "--output",
        default="satprops.csv",
        help="Name of CSV file to produce, use '-' for stdout",
    )
    parser.add_argument(
        "--sheet_name",
        type=str,
        default=None,
        help="Sheet name if reading XLSX files. Defaults to first sheet",
    )
    return parser


def main() -> None:
    """Endpoint for the satprops command line utility.

    Translates from argparse API to the Python API"""
    parser = get_parser()
    args = parser.parse_args()

    try:
        satprops_main(
            satfuncfile=args.satfuncfile,
            cellfile=args.cellfile,
            phases=args.phases,
            endscale=args.endscale,
            scalecrs=args.scalecrs,
            verbose=args.verbose,
            debug=args.debug,
            output=args.output,
            sheet_name=args.sheet_name,
        )
    except (OSError, ValueError) as err:
        print("".join(traceback.format_tb(err.__traceback__)))
        sys.exit(str(err))


def satprops_main(
    satfuncfile: str,
    cellfile: str,
    phases: str = "water,oil,gas",
    endscale: bool = False,
    scalecrs: bool = False,
    verbose: bool = False,
    debug: bool = False,
    output: str = "satprops.csv",
    sheet_name: Optional[str] = None,
) -> pd.DataFrame:
    """A "main()" method not relying on argparse, usable for testing.

    Args:
        satfuncfile: Filename (CSV or XLSX) with saturation functions
        cellfile: Filename (CSV or XLSX) with cell data
        phases: Comma separated active phases
        endscale: Use endpoint scaling
        scalecrs: Use three-point scaling
        verbose: verbose or not
        debug: debug mode or not
        output: Output filename, "-" for stdout
        sheet_name: Which sheet in XLSX files

    Returns:
        The dataframe that was written.
    """
    logger = getLogger_satprops(
        __name__, {"debug": debug, "verbose": verbose, "output": output}
    )

    phase_usage = PhaseUsage(phases)
    satfunc_df = SatPropsFactory.load_satfunc_df(satfuncfile, sheet_name=sheet_name)
    cells_df = SatPropsFactory.load_cells_df(cellfile, sheet_name=sheet_name)
    logger.debug("Cell data:\n%s", cells_df.to_string(index=False))

    if scalecrs and not endscale:
        logger.warning("--scalecrs has no effect without --endscale")
    options = SaturationOptions(endscale=True if endscale else None, scalecrs=scalecrs)
    props = SatPropsFactory.create_saturation_props(
        satfunc_df, phase_usage, cells_df=cells_df, options=options
    )

    cells = range(len(cells_df))
    saturations = SatPropsFactory.cell_saturations(cells_df, phase_usage)
    relperm, _ = props.relative_permeability(saturations, cells)
    pcvalues, _ = props.capillary_pressure(saturations, cells)
    smin, smax = props.saturation_range(cells)

    nph = phase_usage.num_phases
    result = pd.DataFrame({"CELL": list(cells)})
    for phase in Phase:
        if not phase_usage.phase_used[phase]:
            continue
        pos = phase_usage.pos(phase)
        suffix = PHASE_SUFFIX[phase]
        result["S" + suffix] = saturations[pos::nph]
        result["KR" + suffix] = relperm[pos::nph]
        result["PC" + suffix] = pcvalues[pos::nph]
        result["S" + suffix + "MIN"] = smin[pos::nph]
        result["S" + suffix + "MAX"] = smax[pos::nph]

    if output == "-":
        print(result.to_csv(index=False), end="")
    else:
        if not Path(output).parent.exists():
            raise IOError(f"Output directory {Path(output).parent} does not exist")
        result.to_csv(output, index=False)
        print("Written to " + output)
    return result
