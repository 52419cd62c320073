"""Switches for endpoint scaling and hysteresis"""

from typing import Any, Dict, List, Optional, Sequence, Union

import satprops

logger = satprops.getLogger_satprops(__name__)

# Defaulted items of the hysteresis and endpoint scaling keywords
EHYSTR_DEFAULTS: List[Any] = [0.1, 0, 1.0, 0.1, "BOTH"]
ENDSCALE_DEFAULTS: List[Any] = ["NODIR", "REVERS", 1, 20]


def _pad(items: Sequence[Any], defaults: List[Any], keyword: str) -> List[Any]:
    """Fill in defaulted trailing items of a keyword record"""
    items = list(items)
    if len(items) > len(defaults):
        raise ValueError(
            f"Keyword {keyword}: Too many items, expected at most {len(defaults)}"
        )
    return [
        item if item is not None else default
        for item, default in zip(items + defaults[len(items) :], defaults)
    ]


def _parse_switch(value: Union[bool, str, None]) -> bool:
    if isinstance(value, str):
        if value.strip().upper() in ["YES", "Y", "TRUE", "1"]:
            return True
        if value.strip().upper() in ["NO", "N", "FALSE", "0", ""]:
            return False
        raise ValueError(f"Keyword SCALECRS: Value '{value}' not understood")
    return bool(value)


class SaturationOptions(object):
    """Validated switches for endpoint scaling and hysteresis.

    Hysteresis requires the HYSTER switch in satopts, an ehystr record with
    relperm model 0 and limiting flag KR, and endpoint scaling.

    Args:
        satopts: Saturation function switches, a string or a list of
            strings. Only HYSTER is supported.
        ehystr: Hysteresis options record, items in simulator order
            (curvature parameter, relperm model, ..., limiting flag).
            Trailing items may be omitted to use defaults.
        endscale: Endpoint scaling record (direction, reversibility,
            number of depth tables, max nodes), or True to enable
            endpoint scaling with default items.
        scalecrs: True to enable three-point scaling.
    """

    def __init__(
        self,
        satopts: Optional[Union[str, Sequence[str]]] = None,
        ehystr: Optional[Sequence[Any]] = None,
        endscale: Optional[Union[bool, Sequence[Any]]] = None,
        scalecrs: Union[bool, str] = False,
    ) -> None:
        if isinstance(satopts, str):
            satopts = satopts.split()
        self.satopts: List[str] = [str(opt).strip().upper() for opt in satopts or []]
        hysteresis_switch = False
        for opt in self.satopts:
            if opt == "HYSTER":
                hysteresis_switch = True
            else:
                raise ValueError(f"Keyword SATOPTS: Switch {opt} not supported")

        self.ehystr: Optional[List[Any]] = None
        if ehystr is not None:
            self.ehystr = _pad(ehystr, EHYSTR_DEFAULTS, "EHYSTR")

        if endscale is None or endscale is False:
            self.endscale: Optional[List[Any]] = None
        elif endscale is True:
            self.endscale = list(ENDSCALE_DEFAULTS)
        else:
            self.endscale = _pad(endscale, ENDSCALE_DEFAULTS, "ENDSCALE")

        self._hysteresis = False
        if hysteresis_switch and self.ehystr is not None:
            self._check_ehystr()
            if self.endscale is None:
                raise ValueError(
                    "Hysteresis is only available through endpoint scaling, "
                    "keyword ENDSCALE is required"
                )
            self._hysteresis = True
        elif hysteresis_switch:
            raise ValueError(
                "Switch HYSTER of keyword SATOPTS is active, "
                "but keyword EHYSTR not found"
            )
        elif self.ehystr is not None:
            raise ValueError(
                "Found keyword EHYSTR, but switch HYSTER of keyword SATOPTS is not set"
            )

        self._three_point = False
        if self.endscale is not None:
            self._check_endscale()
            self._three_point = _parse_switch(scalecrs)
        elif _parse_switch(scalecrs):
            logger.warning("SCALECRS is ignored when endpoint scaling is not active")

        logger.debug(
            "Options: endpoint scaling=%s, three point=%s, hysteresis=%s",
            self.endpoint_scaling,
            self.three_point,
            self.hysteresis,
        )

    def _check_ehystr(self) -> None:
        relperm_model = self.ehystr[1]
        try:
            relperm_model = int(relperm_model)
        except (TypeError, ValueError) as err:
            raise ValueError(
                f"Keyword EHYSTR, item 2: Flag '{relperm_model}' is not an integer"
            ) from err
        if relperm_model != 0:
            raise ValueError(
                f"Keyword EHYSTR, item 2: Flag '{relperm_model}' found, "
                "only '0' is supported"
            )
        limiting_flag = str(self.ehystr[4]).strip().upper()
        if limiting_flag != "KR":
            raise ValueError(
                f"Keyword EHYSTR, item 5: Flag '{self.ehystr[4]}' found, "
                "only 'KR' is supported"
            )

    def _check_endscale(self) -> None:
        direction = str(self.endscale[0]).strip().upper()
        if direction != "NODIR":
            raise ValueError(
                f"Keyword ENDSCALE: Direction '{self.endscale[0]}' found, "
                "only 'NODIR' is supported"
            )
        reversibility = str(self.endscale[1]).strip().upper()
        if reversibility != "REVERS":
            raise ValueError(
                f"Keyword ENDSCALE: '{self.endscale[1]}' found, "
                "only 'REVERS' is supported"
            )
        if int(self.endscale[2]) < 1:
            raise ValueError(
                "Keyword ENDSCALE: Number of depth tables must be positive"
            )

    @property
    def hysteresis(self) -> bool:
        """True if hysteresis is active"""
        return self._hysteresis

    @property
    def endpoint_scaling(self) -> bool:
        """True if endpoint scaling is active"""
        return self.endscale is not None

    @property
    def three_point(self) -> bool:
        """True if endpoint scaling uses three-point scaling"""
        return self._three_point

    @property
    def num_endscale_tables(self) -> int:
        """Number of endpoint versus depth tables (regions), 0 without
        endpoint scaling"""
        if self.endscale is None:
            return 0
        return int(self.endscale[2])

    @staticmethod
    def from_dict(params: Optional[Dict[str, Any]]) -> "SaturationOptions":
        """Create options from a dictionary with (case insensitive) keys
        SATOPTS, EHYSTR, ENDSCALE and SCALECRS"""
        if params is None:
            return SaturationOptions()
        if not isinstance(params, dict):
            raise TypeError("Options must be given as a dictionary")
        params = {key.lower(): value for (key, value) in params.items()}
        unknown = set(params) - {"satopts", "ehystr", "endscale", "scalecrs"}
        if unknown:
            raise ValueError(f"Unknown option keyword(s): {sorted(unknown)}")
        return SaturationOptions(
            satopts=params.get("satopts"),
            ehystr=params.get("ehystr"),
            endscale=params.get("endscale"),
            scalecrs=params.get("scalecrs", False),
        )

    def __repr__(self) -> str:
        return (
            f"SaturationOptions(satopts={self.satopts}, ehystr={self.ehystr}, "
            f"endscale={self.endscale}, scalecrs={self.three_point})"
        )
