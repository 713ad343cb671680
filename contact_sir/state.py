"""Health states, node views and edge records."""

from dataclasses import dataclass
from enum import IntEnum

import numpy as np

from contact_sir.errors import InvalidEdgeError


class HealthState(IntEnum):
    """SIR health state. Codes are ordered along the only legal path S -> I -> R."""

    SUSCEPTIBLE = 0
    INFECTED = 1
    RECOVERED = 2

    def can_transition_to(self, other: "HealthState") -> bool:
        """True if moving from this state to ``other`` is allowed within a run.

        Staying put is always allowed; otherwise the state may only advance
        one step (S -> I or I -> R). Recovered is absorbing.
        """
        return 0 <= int(other) - int(self) <= 1


# Lookup tables indexed [before, after]. Single-round moves come straight from
# can_transition_to; multi-round moves are its transitive closure.
_ONE_ROUND = np.array(
    [[before.can_transition_to(after) for after in HealthState] for before in HealthState]
)
_ANY_ROUNDS = _ONE_ROUND.copy()
for _ in HealthState:
    _ANY_ROUNDS = _ANY_ROUNDS | ((_ANY_ROUNDS.astype(int) @ _ONE_ROUND.astype(int)) > 0)


def illegal_transitions(before: np.ndarray, after: np.ndarray, single_round: bool = True) -> np.ndarray:
    """
    Node ids whose move from ``before`` to ``after`` is not allowed.

    Args:
        before: State codes at the start
        after: State codes at the end
        single_round: Compare one round apart; if False, allow any number
            of rounds in between (so S -> R is legal)

    Returns:
        Sorted array of offending node ids (empty if all moves are legal)
    """
    table = _ONE_ROUND if single_round else _ANY_ROUNDS
    return np.flatnonzero(~table[np.asarray(before, dtype=np.intp), np.asarray(after, dtype=np.intp)])


@dataclass(frozen=True)
class Interaction:
    """Contact between two people.

    Attributes:
        frequency: Contact rate proxy, positive integer
        strength: Interaction intensity in the open interval (0, 1)
    """

    frequency: int
    strength: float

    def __post_init__(self):
        if isinstance(self.frequency, bool) or int(self.frequency) != self.frequency or self.frequency < 1:
            raise InvalidEdgeError(f"frequency must be a positive integer, got {self.frequency!r}")
        if not 0.0 < self.strength < 1.0:
            raise InvalidEdgeError(f"strength must lie in (0, 1), got {self.strength!r}")


@dataclass(frozen=True)
class PersonState:
    """Read-only view of a single node."""

    id: int
    state: HealthState
