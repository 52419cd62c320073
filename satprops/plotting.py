"""Module for plotting the relative permeability and capillary pressure
curves of a cell, scaled curves together with the unscaled region curves.
"""

from pathlib import Path
from typing import Dict, Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from satprops import getLogger_satprops
from satprops.epstransform import CurveFamily
from satprops.satprops import SaturationProps

logger = getLogger_satprops(__name__)

# Data for configuring plot based on the two-phase system
PLOT_CONFIG_OPTIONS = {
    "WaterOil": {
        "axis": "SW",
        "kra_name": "KRW",
        "krb_name": "KROW",
        "kra_family": CurveFamily.WATER,
        "krb_family": CurveFamily.WATER_OIL,
        "kra_colour": "blue",
        "krb_colour": "green",
        "pc_name": "PCOW",
        "xlabel": "Sw",
        "ylabel": "krw, krow",
        "curves": "krw_krow",
    },
    "GasOil": {
        "axis": "SG",
        "kra_name": "KRG",
        "krb_name": "KROG",
        "kra_family": CurveFamily.GAS,
        "krb_family": CurveFamily.GAS_OIL,
        "kra_colour": "red",
        "krb_colour": "green",
        "pc_name": "PCOG",
        "xlabel": "Sg",
        "ylabel": "krg, krog",
        "curves": "krg_krog",
    },
}


def cell_curve_table(
    props: SaturationProps, cell: int, curve_type: str, npoints: int = 101
) -> pd.DataFrame:
    """Tabulate the curves of one two-phase system for a cell.

    The oil relperm is tabulated versus the water (or gas) saturation,
    with the oil saturation taken as the complement minus the minimum
    saturation of the third phase.

    Args:
        props: Evaluator holding the cell
        cell: Cell index
        curve_type: "WaterOil" or "GasOil"
        npoints: Number of saturation points

    Returns:
        Dataframe with the saturation column, the scaled relperm and pc
        columns, and the unscaled columns suffixed with _TABLE.
    """
    config = PLOT_CONFIG_OPTIONS[curve_type]
    table = props.table(cell)
    transforms = props.transforms(cell)
    saturations = np.linspace(0.0, 1.0, npoints)
    if curve_type == "WaterOil":
        complement = table.sgl if props.phase_usage.three_phase else 0.0
    else:
        complement = table.swl if props.phase_usage.three_phase else 0.0

    rows = []
    for sat in saturations:
        row = {config["axis"]: sat}
        for transform_name, suffix in [("scaled", ""), ("table", "_TABLE")]:
            kra_transform = krb_transform = None
            if transforms is not None and transform_name == "scaled":
                kra_transform = transforms.get(config["kra_family"])
                krb_transform = transforms.get(config["krb_family"])
            row[config["kra_name"] + suffix] = table.family_relperm(
                config["kra_family"], sat, kra_transform
            )[0]
            row[config["krb_name"] + suffix] = table.family_relperm(
                config["krb_family"], 1.0 - sat - complement, krb_transform
            )[0]
            row[config["pc_name"] + suffix] = table.family_capillary_pressure(
                config["kra_family"], sat, kra_transform
            )[0]
        rows.append(row)
    return pd.DataFrame(rows)


def format_relperm_plot(fig: plt.Figure, **kwargs) -> plt.Figure:
    """Formatting options for relative permeability plots."""
    ax = fig.gca()
    ax.set_xlabel(kwargs["xlabel"])
    ax.set_ylabel(kwargs["ylabel"])
    ax.set_xlim((0.0, 1.0))
    ax.set_ylim(bottom=0.0)
    ax.legend(
        loc="upper center",
        bbox_to_anchor=(0.5, -0.12),
        ncol=4,
    )
    return fig


def format_cap_pressure_plot(
    fig: plt.Figure, neg_pc: bool = False, **kwargs
) -> plt.Figure:
    """Formatting options for capillary pressure plots.

    Args:
        fig: Capillary pressure figure to be formatted
        neg_pc: True if the Pc curve has a negative part.
    """
    ax = fig.gca()
    ax.set_xlabel(kwargs["xlabel"])
    ax.set_ylabel(kwargs["pc_name"].lower().capitalize())
    ax.set_xlim((0.0, 1.0))
    if not neg_pc:
        ax.set_ylim(bottom=0.0)
    ax.legend()
    return fig


def plot_relperm(table: pd.DataFrame, cell: int, config: dict) -> plt.Figure:
    """Plot scaled (solid) and unscaled (dashed) relperm curves"""
    fig = plt.figure(figsize=(5, 5))
    plt.title(f"Cell {cell}")
    for name, colour in [
        (config["kra_name"], config["kra_colour"]),
        (config["krb_name"], config["krb_colour"]),
    ]:
        plt.plot(table[config["axis"]], table[name], label=name.lower(), color=colour)
        plt.plot(
            table[config["axis"]],
            table[name + "_TABLE"],
            label=name.lower() + " (table)",
            color=colour,
            linestyle="--",
        )
    return format_relperm_plot(fig, **config)


def plot_pc(table: pd.DataFrame, cell: int, config: dict) -> plt.Figure:
    """Plot scaled (solid) and unscaled (dashed) capillary pressure"""
    pc_name = config["pc_name"]
    fig = plt.figure(figsize=(5, 5))
    plt.title(f"Cell {cell}")
    plt.plot(table[config["axis"]], table[pc_name], label=pc_name.lower())
    plt.plot(
        table[config["axis"]],
        table[pc_name + "_TABLE"],
        label=pc_name.lower() + " (table)",
        linestyle="--",
    )
    neg_pc = min(table[pc_name].min(), table[pc_name + "_TABLE"].min()) < 0
    if not (abs(table[pc_name]) > 1e-6).any():
        logger.warning("Pc plots were requested, but Pc is zero.")
    return format_cap_pressure_plot(fig, neg_pc, **config)


def save_figure(fig: plt.Figure, fname: str, outdir: str) -> Path:
    """Save a figure as PNG in outdir, return the path"""
    fout = Path(outdir).joinpath(fname + ".png")
    fig.savefig(fout, bbox_inches="tight")
    logger.info("Figure saved to %s", str(fout))
    return fout


def plot_cell_curves(
    props: SaturationProps,
    cell: int,
    outdir: Optional[str] = None,
    npoints: int = 101,
) -> Dict[str, plt.Figure]:
    """Plot the relperm and capillary pressure curves of a cell.

    One relperm figure and one capillary pressure figure for each active
    two-phase system (water-oil and gas-oil).

    Args:
        props: Evaluator holding the cell
        cell: Cell index
        outdir: If given, figures are saved as PNG files in this
            directory, named after the curves and the cell index.
        npoints: Number of saturation points in each curve

    Returns:
        Dictionary from figure name to figure.
    """
    if not 0 <= cell < props.number_of_cells:
        raise ValueError(f"Cell {cell} does not exist")
    curve_types = []
    if props.phase_usage.water:
        curve_types.append("WaterOil")
    if props.phase_usage.gas:
        curve_types.append("GasOil")

    figures = {}
    for curve_type in curve_types:
        config = PLOT_CONFIG_OPTIONS[curve_type]
        table = cell_curve_table(props, cell, curve_type, npoints)
        figures[f"{config['curves']}_CELL_{cell}"] = plot_relperm(table, cell, config)
        figures[f"{config['pc_name'].lower()}_CELL_{cell}"] = plot_pc(
            table, cell, config
        )

    if outdir is not None:
        for fname, fig in figures.items():
            save_figure(fig, fname, outdir)
    return figures
