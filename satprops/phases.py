"""Active phases and their positions in saturation arrays"""

import enum
from typing import Dict, Iterable, Union

import satprops

logger = satprops.getLogger_satprops(__name__)


class Phase(enum.IntEnum):
    """The three black-oil phases, in canonical order"""

    WATER = 0
    OIL = 1
    GAS = 2


PHASE_ALIASES: Dict[str, Phase] = {
    "water": Phase.WATER,
    "aqua": Phase.WATER,
    "oil": Phase.OIL,
    "liquid": Phase.OIL,
    "gas": Phase.GAS,
    "vapour": Phase.GAS,
    "vapor": Phase.GAS,
}


def parse_phase(phase: Union[str, Phase]) -> Phase:
    """Convert a phase name (case insensitive) to a Phase"""
    if isinstance(phase, Phase):
        return phase
    if not isinstance(phase, str):
        raise TypeError(f"Phase must be a string or a Phase, got {phase!r}")
    try:
        return PHASE_ALIASES[phase.strip().lower()]
    except KeyError as err:
        raise ValueError(f"Unknown phase: {phase}") from err


class PhaseUsage(object):
    """Which phases are active, and where each active phase is located
    in saturation and output arrays.

    Active phases are numbered consecutively in the order water, oil, gas,
    so for a gas-oil run oil has position 0 and gas position 1.

    Oil must always be active, together with water, gas or both.

    Args:
        phases: Phase names ("water", "oil", "gas", case insensitive) or
            Phase values. A comma separated string is also accepted.
    """

    def __init__(self, phases: Union[str, Iterable[Union[str, Phase]]]) -> None:
        if isinstance(phases, str):
            phases = [phase for phase in phases.split(",") if phase.strip()]
        used = {parse_phase(phase) for phase in phases}

        if Phase.OIL not in used:
            raise ValueError("Oil phase must be active")
        if len(used) < 2:
            raise ValueError("At least two phases must be active, got only oil")

        self.phase_used: Dict[Phase, bool] = {phase: phase in used for phase in Phase}
        self.phase_pos: Dict[Phase, int] = {}
        num_phases = 0
        for phase in Phase:
            if self.phase_used[phase]:
                self.phase_pos[phase] = num_phases
                num_phases += 1
            else:
                self.phase_pos[phase] = -1
        self.num_phases: int = num_phases
        logger.debug("Active phases: %s", str(self))

    @property
    def water(self) -> bool:
        """True if water is active"""
        return self.phase_used[Phase.WATER]

    @property
    def gas(self) -> bool:
        """True if gas is active"""
        return self.phase_used[Phase.GAS]

    @property
    def three_phase(self) -> bool:
        return self.water and self.gas

    @property
    def oil_water(self) -> bool:
        return self.water and not self.gas

    @property
    def oil_gas(self) -> bool:
        return self.gas and not self.water

    def pos(self, phase: Union[str, Phase]) -> int:
        """Position of an active phase, ValueError if not active"""
        phase = parse_phase(phase)
        if not self.phase_used[phase]:
            raise ValueError(f"Phase {phase.name.lower()} is not active")
        return self.phase_pos[phase]

    def __str__(self) -> str:
        return ", ".join(
            phase.name.lower() for phase in Phase if self.phase_used[phase]
        )

    def __repr__(self) -> str:
        return f"PhaseUsage([{str(self)}])"
