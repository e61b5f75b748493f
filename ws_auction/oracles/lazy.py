from ws_auction.oracles.base import AuctionOracleBase
from ws_auction.oracles.distances import dist_lp


class LazyAuctionOracle(AuctionOracleBase):
    """
    Oracle that recomputes a bidder's cost row on every bid.

    Keeps memory linear in the number of points at the price of one row of
    ground distances per bid. Useful for point sets whose cost matrix does not
    fit in memory.
    """

    def __init__(self, bidders, items, params, ground_distance=dist_lp):
        super().__init__(bidders, items, params, ground_distance)

        # Largest cost, one row at a time
        for bidder_idx in range(self.num_bidders):
            row_max = self.get_cost_row(bidder_idx).max().item()
            if row_max > self.max_val:
                self.max_val = row_max

    def get_cost_row(self, bidder_idx):
        D_j = self.ground_distance(self.bidders[bidder_idx].unsqueeze(0), self.items,
                                   self.params.internal_p, self.params.dim)
        return D_j.pow(self.params.wasserstein_power)
