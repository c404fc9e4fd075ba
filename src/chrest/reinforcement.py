"""
Reinforcement learning theories.

A theory turns a vector of variables into a value that is added to the weight
of a link between a visual node and an action node.
"""

from enum import Enum
from typing import Sequence, Union

from chrest.exceptions import ReinforcementError


class ReinforcementLearningTheory(Enum):
    """
    Closed set of reinforcement theories, each with its expected variable count.

    PROFIT_SHARING_WITH_DISCOUNT_RATE expects, in order: the reward, the
    discount rate, the current time and the time the action was performed.
    The reward is discounted once per unit of time elapsed since the action.
    """

    PROFIT_SHARING_WITH_DISCOUNT_RATE = 4

    @property
    def number_of_variables(self) -> int:
        return self.value

    def correct_number_of_variables(self, variables: Sequence[float]) -> bool:
        return len(variables) == self.number_of_variables

    def calculate_reinforcement_value(self, variables: Sequence[float]) -> float:
        """
        Compute the reinforcement value for the given variables.

        Raises:
            ReinforcementError: If the number of variables is wrong
        """
        if not self.correct_number_of_variables(variables):
            raise ReinforcementError(
                f"{self.name} expects {self.number_of_variables} variables, "
                f"got {len(variables)}"
            )

        return _CALCULATIONS[self](*variables)

    @classmethod
    def from_name(cls, name: Union[str, "ReinforcementLearningTheory"]) -> "ReinforcementLearningTheory":
        """Look up a theory by its name (case-insensitive)."""
        if isinstance(name, cls):
            return name
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown reinforcement learning theory: {name}") from None


def _profit_sharing_with_discount_rate(reward: float, discount_rate: float,
                                       current_time: float, action_time: float) -> float:
    return reward * (discount_rate ** (current_time - action_time))


# One calculation per theory, keyed by member
_CALCULATIONS = {
    ReinforcementLearningTheory.PROFIT_SHARING_WITH_DISCOUNT_RATE: _profit_sharing_with_discount_rate,
}
