import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AuctionParams:
    """
    Configuration of one auction run. Immutable for the lifetime of the run.

    Attributes:
        wasserstein_power (float): Exponent q of the transport cost. The reported
                                   distance is cost ** (1 / q). Must be >= 1.
        internal_p (float): Exponent of the l_p ground distance between two points.
                            Must be >= 1, ``math.inf`` selects the max-norm.
        dim (int, optional): Number of leading coordinates used by the ground
                             distance. None uses all coordinates.
        delta (float): Target relative error. The run stops once the certified
                       bound drops to delta or below.
        initial_epsilon (float): Bid increment of the first phase. A non-positive
                                 value is replaced by a quarter of the largest
                                 pairwise cost seen by the oracle.
        epsilon_common_ratio (float): Divisor applied to epsilon after each phase.
                                      0 selects the default of 5.
        max_num_phases (int): Hard cap on the number of epsilon-scaling phases.
        tolerate_max_iter_exceeded (bool): Return the last phase's result instead
                                           of raising when the cap is reached.
        return_matching (bool): Fill ``AuctionResult.matching``.
        debug_checks (bool): Run the verification layer after every bid and phase.
    """

    wasserstein_power: float = 1.0
    internal_p: float = math.inf
    dim: Optional[int] = None
    delta: float = 0.01
    initial_epsilon: float = 0.0
    epsilon_common_ratio: float = 5.0
    max_num_phases: int = 1000
    tolerate_max_iter_exceeded: bool = False
    return_matching: bool = False
    debug_checks: bool = False

    def __post_init__(self):
        if not (1.0 <= self.wasserstein_power < math.inf):
            raise ValueError(f"wasserstein_power must be finite and >= 1, got {self.wasserstein_power}")
        if not self.internal_p >= 1.0:
            raise ValueError(f"internal_p must be >= 1, got {self.internal_p}")
        if self.dim is not None and self.dim < 1:
            raise ValueError(f"dim must be positive, got {self.dim}")
        if not self.delta > 0:
            raise ValueError(f"delta must be positive, got {self.delta}")
        if self.epsilon_common_ratio < 0 or 0 < self.epsilon_common_ratio <= 1:
            raise ValueError(f"epsilon_common_ratio must be > 1 (or 0 for the default), got {self.epsilon_common_ratio}")
        if self.max_num_phases < 1:
            raise ValueError(f"max_num_phases must be at least 1, got {self.max_num_phases}")
