import logging
import math
from dataclasses import replace

import torch

from ws_auction import debug
from ws_auction.exceptions import AuctionError, ConvergenceError, DistanceNotComputedError, InvalidIndexError
from ws_auction.ledger import AssignmentLedger
from ws_auction.oracles import dist_lp, get_oracle
from ws_auction.params import AuctionParams
from ws_auction.result import AuctionResult

logger = logging.getLogger(__name__)


class AuctionRunnerGS:
    """
    Gauss-Seidel auction for the q-Wasserstein distance between two point sets.

    Points of the first set (bidders) compete for points of the second set
    (items). In every round one unassigned bidder asks the oracle for its best
    item and bid, takes the item and evicts its previous holder. A phase ends
    when every bidder holds an item. Phases are repeated with a geometrically
    decreasing bid increment epsilon (epsilon-scaling) until the certified
    relative error of the matching drops to ``params.delta``.

    After a phase at increment epsilon the matching costs at most N * epsilon
    more than the optimum, which yields the bound

        rel_error = (cost^(1/q) - (cost - N*eps)^(1/q)) / (cost - N*eps)^(1/q)

    whenever ``cost > N * eps``.

    Attributes:
        bidders (torch.Tensor): First point set, shape (N, k)
        items (torch.Tensor): Second point set, shape (N, k)
        num_bidders (int): Number of points N in each set
        params (AuctionParams): Configuration with defaults resolved
        oracle: Bid and price engine, see ``AuctionOracleBase``
        ledger (AssignmentLedger): Current bidder/item assignment
        result (AuctionResult): Outcome of the run
        is_distance_computed (bool): Whether run() has completed

    Example:
        >>> A = torch.tensor([[0., 0.], [1., 0.], [0., 2.]])
        >>> B = torch.tensor([[0., 1.], [2., 0.], [1., 2.]])
        >>> params = AuctionParams(wasserstein_power=2, internal_p=2, delta=0.01, return_matching=True)
        >>> runner = AuctionRunnerGS(A, B, params)
        >>> result = runner.run()
        >>> result.distance, result.matching
    """

    def __init__(self, bidders, items, params=None, prices=None, oracle="dense",
                 ground_distance=dist_lp, bidder_ids=None, item_ids=None, dtype=torch.float64):
        """
        Initialize the runner and its oracle.

        Args:
            bidders (array-like): First point set of shape (N, k), or (N,) for points on a line
            items (array-like): Second point set, same number of points as bidders
            params (AuctionParams, optional): Configuration. Defaults to AuctionParams().
            prices (array-like, optional): Initial item prices. Empty or None keeps zeros.
            oracle (str or type, optional): Oracle registry name ("dense", "lazy") or class.
                                           Defaults to "dense".
            ground_distance (callable, optional): Broadcasting distance
                                                  ``f(x, y, internal_p, dim) -> torch.Tensor``.
                                                  Defaults to ``dist_lp``.
            bidder_ids (sequence, optional): Caller-facing ids of the bidders. Defaults to indices.
            item_ids (sequence, optional): Caller-facing ids of the items. Defaults to indices.
            dtype (torch.dtype, optional): Floating point type of points, prices and costs.

        Raises:
            ValueError: If the point sets differ in size or the ids do not match them
        """
        params = AuctionParams() if params is None else params

        self.bidders = torch.as_tensor(bidders, dtype=dtype)
        self.items = torch.as_tensor(items, dtype=dtype)
        if self.bidders.ndim == 1:
            self.bidders = self.bidders.unsqueeze(1)
        if self.items.ndim == 1:
            self.items = self.items.unsqueeze(1)

        if self.bidders.shape[0] != self.items.shape[0]:
            raise ValueError(f"Point sets must have the same size, got {self.bidders.shape[0]} bidders "
                             f"and {self.items.shape[0]} items")

        self.num_bidders = self.bidders.shape[0]
        self.num_items = self.items.shape[0]

        self.bidder_ids = list(range(self.num_bidders)) if bidder_ids is None else list(bidder_ids)
        self.item_ids = list(range(self.num_items)) if item_ids is None else list(item_ids)
        if len(self.bidder_ids) != self.num_bidders or len(self.item_ids) != self.num_items:
            raise ValueError("bidder_ids and item_ids must have one entry per point")

        self.ground_distance = ground_distance

        oracle_cls = get_oracle(oracle) if isinstance(oracle, str) else oracle
        self.oracle = oracle_cls(self.bidders, self.items, params, ground_distance)
        if prices is not None and len(prices) > 0:
            self.oracle.set_prices(prices)

        # Resolve "0 means default" fields
        epsilon_common_ratio = params.epsilon_common_ratio if params.epsilon_common_ratio > 0 else 5.0
        initial_epsilon = params.initial_epsilon
        if initial_epsilon <= 0:
            initial_epsilon = self.oracle.max_val / 4
            logger.debug("Initial epsilon derived from largest cost %.6g: %.6g", self.oracle.max_val, initial_epsilon)
        self.params = replace(params, initial_epsilon=initial_epsilon, epsilon_common_ratio=epsilon_common_ratio)

        self.ledger = AssignmentLedger(self.num_bidders)
        self.result = AuctionResult()
        self.is_distance_computed = False
        self._has_run = False


    def run(self):
        """
        Compute the matching, cost and distance.

        Single use: a runner can only be run once.

        Returns:
            AuctionResult: The populated result

        Raises:
            ConvergenceError: If ``max_num_phases`` phases did not reach ``delta``
                              and ``tolerate_max_iter_exceeded`` is not set. The
                              best-effort result is attached as ``error.result``.
            AuctionError: If run() is called a second time
        """
        if self._has_run:
            raise AuctionError("AuctionRunnerGS is single use, run() was already called")
        self._has_run = True

        if self.num_bidders == 0:
            logger.debug("Empty point sets, nothing to match")
            self.result.final_relative_error = 0.0
        elif self.num_bidders == 1:
            # Only one bijection exists
            self.ledger.assign(0, 0)
            self.result.cost = self.get_item_bidder_cost(0, 0)
            self.result.final_relative_error = 0.0
        elif self.oracle.max_val == 0:
            logger.debug("All pairwise costs vanish, any bijection is optimal")
            for idx in range(self.num_bidders):
                self.ledger.assign(idx, idx)
            self.result.cost = 0.0
            self.result.final_relative_error = 0.0
        else:
            self._run_auction_phases()

        self.result.num_rounds = self.ledger.num_rounds
        self.result.compute_distance(self.params.wasserstein_power)

        if self.result.final_relative_error > self.params.delta:
            if not self.params.tolerate_max_iter_exceeded:
                raise ConvergenceError(
                    f"Maximum number of phases ({self.params.max_num_phases}) exceeded, "
                    f"relative error {self.result.final_relative_error:.3g} > delta {self.params.delta}. "
                    f"Current result is {self.result.distance:.6g}",
                    self.result)
            logger.warning("Maximum number of phases (%d) exceeded, returning distance %.6g "
                           "with relative error %.3g > delta %.3g",
                           self.params.max_num_phases, self.result.distance,
                           self.result.final_relative_error, self.params.delta)

        self.is_distance_computed = True

        if self.params.return_matching:
            self.result.clear_matching()
            for bidder_idx in range(self.num_bidders):
                self.result.add_to_matching(self.get_bidder_id(bidder_idx), self.get_bidders_item_id(bidder_idx))

        return self.result


    # Epsilon-scaling
    def _run_auction_phases(self):
        self.result.final_relative_error = math.inf

        self.oracle.set_epsilon(self.params.initial_epsilon)
        self.result.start_epsilon = self.oracle.get_epsilon()
        self.result.final_epsilon = self.oracle.get_epsilon()

        for phase_num in range(self.params.max_num_phases):
            if phase_num > 0:
                self.oracle.set_epsilon(self.oracle.get_epsilon() / self.params.epsilon_common_ratio)

            self._flush_assignment()
            self._run_auction_phase()

            eps = self.oracle.get_epsilon()
            current_cost = self._get_distance_to_qth_power()
            relative_error = self._relative_error(current_cost, eps)

            self.result.epsilons.append(eps)
            self.result.relative_errors.append(relative_error)
            self.result.final_epsilon = eps
            self.result.final_relative_error = math.inf if relative_error is None else relative_error

            logger.debug("Phase %d done: eps=%.4e cost=%.6g rel_error=%s rounds=%d",
                         phase_num, eps, current_cost,
                         "n/a" if relative_error is None else f"{relative_error:.3e}",
                         self.ledger.num_rounds)

            if relative_error is not None and relative_error <= self.params.delta:
                break

        self.result.prices = self.oracle.get_prices()

    def _relative_error(self, current_cost, eps):
        """
        Certified relative error of a matching found at increment eps.

        Returns None when ``cost <= N * eps``, where the bound says nothing.
        A zero-cost matching is optimal, its error is 0.
        """
        if current_cost == 0:
            return 0.0

        denominator = current_cost - self.num_bidders * eps
        if denominator <= 0:
            return None

        q = self.params.wasserstein_power
        numerator = current_cost ** (1 / q) - denominator ** (1 / q)
        return numerator / denominator ** (1 / q)

    def _flush_assignment(self):
        self.ledger.reset()
        self.oracle.adjust_prices()


    # Single phase
    def _run_auction_phase(self):
        """Let unassigned bidders bid, smallest index first, until the matching is perfect."""
        self.result.num_phases += 1
        unassigned = self.ledger.unassigned_bidders

        while len(unassigned) > 0:
            bidder_idx = unassigned.first()
            item_idx, bid_value = self.oracle.get_optimal_bid(bidder_idx)
            self.ledger.assign(item_idx, bidder_idx)
            self.oracle.set_price(item_idx, bid_value)

            if self.params.debug_checks:
                debug.sanity_check(self.ledger)

        if self.params.debug_checks:
            debug.check_perfect_matching(self.ledger)


    # Costs
    def _is_valid_idx(self, idx):
        return idx is not None and 0 <= idx < self.num_bidders

    def get_item_bidder_cost(self, item_idx, bidder_idx, tolerate_invalid_idx=False):
        """
        Cost d(bidder, item) ** q of a single pair.

        Args:
            item_idx (int or None): Item index
            bidder_idx (int or None): Bidder index
            tolerate_invalid_idx (bool, optional): Return 0 instead of raising when an
                                                   index is missing. Defaults to False.

        Raises:
            InvalidIndexError: If an index is None or out of range and not tolerated
        """
        if self._is_valid_idx(item_idx) and self._is_valid_idx(bidder_idx):
            d = self.ground_distance(self.bidders[bidder_idx], self.items[item_idx],
                                     self.params.internal_p, self.params.dim)
            return d.pow(self.params.wasserstein_power).item()
        if tolerate_invalid_idx:
            return 0.0
        raise InvalidIndexError(f"Invalid idx in get_item_bidder_cost, item_idx = {item_idx}, "
                                f"bidder_idx = {bidder_idx}")

    def _get_distance_to_qth_power(self):
        """Sum of costs over the current perfect matching, stored in ``result.cost``."""
        if self.params.debug_checks:
            debug.sanity_check(self.ledger)

        mu_i = self.ledger.as_tensor(device=self.items.device)
        D_i = self.ground_distance(self.bidders, self.items[mu_i], self.params.internal_p, self.params.dim)
        self.result.cost = D_i.pow(self.params.wasserstein_power).sum().item()
        return self.result.cost

    def get_wasserstein_cost(self):
        if not self.is_distance_computed:
            raise DistanceNotComputedError("Call run() before reading the cost")
        return self.result.cost

    def get_wasserstein_distance(self):
        if not self.is_distance_computed:
            raise DistanceNotComputedError("Call run() before reading the distance")
        return self.get_wasserstein_cost() ** (1 / self.params.wasserstein_power)


    # Ids
    def get_bidder_id(self, bidder_idx):
        return self.bidder_ids[bidder_idx]

    def get_bidders_item_id(self, bidder_idx):
        item_idx = self.ledger.bidders_to_items[bidder_idx]
        if item_idx is None:
            raise InvalidIndexError(f"Bidder {bidder_idx} has no item assigned")
        return self.item_ids[item_idx]
