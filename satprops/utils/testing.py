"""Common functions and mock data for usage in satprops testing"""

from typing import Callable, Tuple

import numpy as np
import pandas as pd


def corey_swof(
    swl: float = 0.1,
    swcr: float = 0.2,
    sorw: float = 0.2,
    krwr: float = 0.6,
    krwmax: float = 0.8,
    kromax: float = 1.0,
    nw: float = 2.0,
    now: float = 2.0,
    pcmax: float = 2.0,
    num: int = 21,
) -> pd.DataFrame:
    """SWOF table with Corey curves.

    krw is zero up to swcr and reaches krwr at 1 - sorw, then increases
    linearly to krwmax at sw = 1. krow is kromax at swl and zero from
    1 - sorw. pcow decreases linearly from pcmax at swl to zero at 1.
    """
    sw_values = np.unique(
        np.round(np.concatenate([np.linspace(swl, 1.0, num), [swcr, 1.0 - sorw]]), 10)
    )
    mobile = (1.0 - sorw) - swcr
    krw = np.where(
        sw_values <= swcr,
        0.0,
        np.where(
            sw_values <= 1.0 - sorw,
            krwr * (np.clip(sw_values - swcr, 0.0, None) / mobile) ** nw,
            krwr + (krwmax - krwr) * (sw_values - (1.0 - sorw)) / max(sorw, 1e-12),
        ),
    )
    krow = np.where(
        sw_values >= 1.0 - sorw,
        0.0,
        kromax
        * (np.clip(1.0 - sorw - sw_values, 0.0, None) / (1.0 - sorw - swl)) ** now,
    )
    pcow = pcmax * (1.0 - sw_values) / (1.0 - swl)
    return pd.DataFrame({"SW": sw_values, "KRW": krw, "KROW": krow, "PCOW": pcow})


def corey_sgof(
    sgl: float = 0.0,
    sgcr: float = 0.05,
    sorg: float = 0.15,
    swl: float = 0.1,
    krgmax: float = 0.9,
    kromax: float = 1.0,
    ng: float = 2.0,
    nog: float = 2.0,
    pcmax: float = 0.5,
    num: int = 21,
) -> pd.DataFrame:
    """SGOF table with Corey curves, gas saturation up to 1 - swl.

    krg is zero up to sgcr and krgmax at the last gas saturation. krog is
    kromax at sgl and zero from 1 - swl - sorg. pcog increases linearly
    from zero at sgl to pcmax at the last gas saturation.
    """
    sgmax = 1.0 - swl
    sg_values = np.unique(
        np.round(
            np.concatenate([np.linspace(sgl, sgmax, num), [sgcr, sgmax - sorg]]), 10
        )
    )
    krg = np.where(
        sg_values <= sgcr,
        0.0,
        krgmax * (np.clip(sg_values - sgcr, 0.0, None) / (sgmax - sgcr)) ** ng,
    )
    krog = np.where(
        sg_values >= sgmax - sorg,
        0.0,
        kromax * (np.clip(sgmax - sorg - sg_values, 0.0, None) / (sgmax - sorg - sgl))
        ** nog,
    )
    pcog = pcmax * (sg_values - sgl) / (sgmax - sgl)
    return pd.DataFrame({"SG": sg_values, "KRG": krg, "KROG": krog, "PCOG": pcog})


def satfunc_long_df(num_satnums: int = 1) -> pd.DataFrame:
    """SWOF and SGOF tables in the long format read by the factory.

    Each SATNUM gets a slightly different water critical saturation."""
    frames = []
    for satnum in range(1, num_satnums + 1):
        swof = corey_swof(swcr=0.15 + 0.05 * satnum)
        swof.insert(0, "SATNUM", satnum)
        swof.insert(0, "KEYWORD", "SWOF")
        sgof = corey_sgof()
        sgof.insert(0, "SATNUM", satnum)
        sgof.insert(0, "KEYWORD", "SGOF")
        frames.extend([swof, sgof])
    return pd.concat(frames, ignore_index=True, sort=False)


def numerical_jacobian(
    func: Callable[[np.ndarray], np.ndarray],
    sats: np.ndarray,
    columns: Tuple[int, ...],
    delta: float = 1e-7,
) -> np.ndarray:
    """Central difference approximation of ``m[i, j] = d func_i / d s_j``

    Columns not in ``columns`` are left as zero.

    Args:
        func: Function from saturations (one cell) to values (one cell)
        sats: Saturations to differentiate at
        columns: Which saturations to perturb
        delta: Perturbation
    """
    sats = np.asarray(sats, dtype=float)
    jacobian = np.zeros((len(sats), len(sats)))
    for col in columns:
        upper = sats.copy()
        lower = sats.copy()
        upper[col] += delta
        lower[col] -= delta
        jacobian[:, col] = (func(upper) - func(lower)) / (2 * delta)
    return jacobian
