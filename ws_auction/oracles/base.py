import torch

from ws_auction.oracles.distances import dist_lp


class AuctionOracleBase:
    """
    Bid and price engine of the Gauss-Seidel auction.

    The oracle owns the item prices and the current epsilon. Given a bidder,
    it finds the item with the smallest reduced cost (transport cost plus
    price) and the price that bidder is willing to pay for it. The runner only
    talks to the oracle through the following methods:

    - ``get_optimal_bid(bidder_idx) -> (item_idx, bid_value)``
    - ``set_price(item_idx, value)``
    - ``adjust_prices()``
    - ``get_epsilon()`` / ``set_epsilon(eps)``
    - ``get_prices()`` / ``set_prices(prices)``
    - attribute ``max_val``: the largest pairwise cost, used to derive the
      first epsilon

    Subclasses provide ``get_cost_row(bidder_idx)``, the costs
    ``d(bidder, item) ** q`` of one bidder against all items.

    Args:
        bidders (torch.Tensor): Bidder points of shape (num_bidders, k)
        items (torch.Tensor): Item points of shape (num_items, k)
        params (AuctionParams): Run configuration (q, internal_p, dim)
        ground_distance (callable, optional): Broadcasting distance with the
                                              signature of ``dist_lp``.
    """

    def __init__(self, bidders, items, params, ground_distance=dist_lp):
        self.bidders = bidders
        self.items = items
        self.params = params
        self.ground_distance = ground_distance

        self.num_bidders = bidders.shape[0]
        self.num_items = items.shape[0]

        self.prices = torch.zeros(self.num_items, dtype=items.dtype, device=items.device)
        self.epsilon = params.initial_epsilon
        self.max_val = 0.0

    def get_cost_row(self, bidder_idx):
        raise NotImplementedError

    def get_optimal_bid(self, bidder_idx):
        """
        Compute the bid of a single bidder at the current prices.

        The bidder picks the item with the largest value ``-(cost + price)``
        and raises its price by the gap to the second-best value plus epsilon,
        the largest increase that still keeps that item its (epsilon-)best choice.

        Returns:
            tuple: (item_idx, bid_value) with bid_value the new price of item_idx
        """
        value_j = -(self.get_cost_row(bidder_idx) + self.prices)

        if self.num_items == 1:
            return 0, self.prices[0].item() + self.epsilon

        top2 = value_j.topk(2)
        item_idx = top2.indices[0].item()
        best_value, second_value = top2.values.tolist()

        bid_value = self.prices[item_idx].item() + (best_value - second_value) + self.epsilon
        return item_idx, bid_value

    def set_price(self, item_idx, value):
        self.prices[item_idx] = value

    def adjust_prices(self):
        """
        Shift all prices so that the cheapest item costs zero.

        Bids only depend on price differences, so the shift leaves every
        bidder's preferences intact while keeping prices from drifting upwards
        over many phases.
        """
        if self.num_items == 0:
            return
        min_price = self.prices.min()
        if min_price != 0:
            self.prices -= min_price

    def get_epsilon(self):
        return self.epsilon

    def set_epsilon(self, eps):
        if not eps > 0:
            raise ValueError(f"epsilon must be positive, got {eps}")
        self.epsilon = eps

    def get_prices(self):
        return self.prices.clone()

    def set_prices(self, prices):
        prices = torch.as_tensor(prices, dtype=self.prices.dtype, device=self.prices.device)
        if prices.shape != self.prices.shape:
            raise ValueError(f"Expected {self.num_items} prices, got {tuple(prices.shape)}")
        self.prices = prices.clone()
