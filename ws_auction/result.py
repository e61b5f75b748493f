import math


class AuctionResult:
    """
    Outcome and diagnostics of one auction run.

    Filled incrementally by ``AuctionRunnerGS.run``; only meaningful once the
    run has completed.

    Attributes:
        cost (float): Sum of d(bidder, item) ** q over the final matching
        distance (float): cost ** (1 / q)
        num_rounds (int): Total number of bids across all phases
        num_phases (int): Number of completed epsilon-scaling phases
        start_epsilon (float): Epsilon of the first phase
        final_epsilon (float): Epsilon of the last completed phase
        final_relative_error (float): Certified relative error of the final
                                      matching, ``math.inf`` if no bound was
                                      ever available
        epsilons (list): Epsilon of every completed phase
        relative_errors (list): Relative error bound of every completed phase,
                                None for phases where no bound applies
        prices (torch.Tensor): Item prices at the end of the run
        matching (list): (bidder_id, item_id) pairs, if requested
    """

    def __init__(self):
        self.cost = 0.0
        self.distance = 0.0
        self.num_rounds = 0
        self.num_phases = 0
        self.start_epsilon = 0.0
        self.final_epsilon = 0.0
        self.final_relative_error = math.inf
        self.epsilons = []
        self.relative_errors = []
        self.prices = None
        self.matching = []

    def compute_distance(self, wasserstein_power):
        self.distance = self.cost ** (1 / wasserstein_power)
        return self.distance

    def add_to_matching(self, bidder_id, item_id):
        self.matching.append((bidder_id, item_id))

    def clear_matching(self):
        self.matching = []

    def __repr__(self):
        return (f"AuctionResult(distance={self.distance:.6g}, cost={self.cost:.6g}, "
                f"final_relative_error={self.final_relative_error:.3g}, num_phases={self.num_phases}, "
                f"num_rounds={self.num_rounds}, start_epsilon={self.start_epsilon:.3g}, "
                f"final_epsilon={self.final_epsilon:.3g})")
