from ws_auction.oracles.base import AuctionOracleBase
from ws_auction.oracles.distances import dist_lp


class DenseAuctionOracle(AuctionOracleBase):
    """
    Oracle backed by the full (num_bidders, num_items) cost matrix.

    The matrix ``C_i_j = d(bidder_i, item_j) ** q`` is computed once at
    construction, so every bid is a single row lookup followed by a top-2.
    Memory grows quadratically with the number of points.
    """

    def __init__(self, bidders, items, params, ground_distance=dist_lp):
        super().__init__(bidders, items, params, ground_distance)

        D_i_j = ground_distance(bidders.unsqueeze(1), items.unsqueeze(0), params.internal_p, params.dim)
        self.C_i_j = D_i_j.pow(params.wasserstein_power)

        if self.C_i_j.numel() > 0:
            self.max_val = self.C_i_j.max().item()

    def get_cost_row(self, bidder_idx):
        return self.C_i_j[bidder_idx]
