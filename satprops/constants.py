"""Constants used for satprops modules:

 * ``EPSILON``: Used as "a small number" for ensuring no floating point
   comparisons/errors pop up.

 * ``KR_ENDPOINT_TOLERANCE``: Distance below which two relperm endpoint
   values, or a displacing saturation and the maximum saturation, are
   regarded as equal when setting up relperm value scaling.

 * ``PCMAX_ZERO_LIMIT``: Tabulated maximal capillary pressures smaller than
   this (in absolute value) are not scaled.

 * ``PC_LOW_THRESHOLD``: Capillary pressure below which initial water
   saturation calibration regards the capillary pressure as zero.

 * ``SEGREGATION_EPSILON``: Lower bound for the sum of mobile water and gas
   saturation in the three-phase oil relperm model.

 * ``SCALING_KEYWORDS``: Recognized endpoint scaling keywords for the
   drainage curves. The imbibition variants are prefixed with an ``I``.
"""
from typing import List

EPSILON: float = 1e-08

KR_ENDPOINT_TOLERANCE: float = 1e-06

PCMAX_ZERO_LIMIT: float = 1e-08

PC_LOW_THRESHOLD: float = 1e-08

SEGREGATION_EPSILON: float = 1e-06

SATURATION_KEYWORDS: List[str] = [
    "SWL",
    "SWCR",
    "SWU",
    "SGL",
    "SGCR",
    "SGU",
    "SOWCR",
    "SOGCR",
]

RELPERM_KEYWORDS: List[str] = ["KRW", "KRG", "KRO", "KRWR", "KRGR", "KRORW", "KRORG"]

CAPILLARY_KEYWORDS: List[str] = ["PCW", "PCG"]

SCALING_KEYWORDS: List[str] = [
    "SWL",
    "SWU",
    "SWCR",
    "SGL",
    "SGU",
    "SGCR",
    "SOWCR",
    "SOGCR",
    "KRW",
    "KRG",
    "KRO",
    "KRWR",
    "KRGR",
    "KRORW",
    "KRORG",
    "PCW",
    "PCG",
]

IMBIBITION_SCALING_KEYWORDS: List[str] = ["I" + keyword for keyword in SCALING_KEYWORDS]
