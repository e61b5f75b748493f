import math

import pytest
import torch

from ws_auction.oracles import DenseAuctionOracle, LazyAuctionOracle, dist_lp, get_oracle
from ws_auction.params import AuctionParams


def test_dist_lp_norms():
    x = torch.tensor([0.0, 0.0], dtype=torch.float64)
    y = torch.tensor([3.0, 4.0], dtype=torch.float64)
    assert dist_lp(x, y, 1).item() == pytest.approx(7.0)
    assert dist_lp(x, y, 2).item() == pytest.approx(5.0)
    assert dist_lp(x, y, math.inf).item() == pytest.approx(4.0)
    assert dist_lp(x, y, 2, dim=1).item() == pytest.approx(3.0)


def test_dist_lp_broadcasts_to_matrix():
    A = torch.rand(4, 3, dtype=torch.float64)
    B = torch.rand(5, 3, dtype=torch.float64)
    D = dist_lp(A.unsqueeze(1), B.unsqueeze(0), 2)
    assert D.shape == (4, 5)
    assert D[2, 3].item() == pytest.approx(torch.linalg.norm(A[2] - B[3]).item())


def _line_oracle(cls, eps=0.5):
    bidders = torch.tensor([[0.0], [10.0]], dtype=torch.float64)
    items = torch.tensor([[1.0], [4.0]], dtype=torch.float64)
    oracle = cls(bidders, items, AuctionParams(wasserstein_power=1.0))
    oracle.set_epsilon(eps)
    return oracle


@pytest.mark.parametrize("cls", [DenseAuctionOracle, LazyAuctionOracle])
def test_optimal_bid_raises_price_by_gap_plus_epsilon(cls):
    oracle = _line_oracle(cls)
    item, bid = oracle.get_optimal_bid(0)
    # costs of bidder 0 are [1, 4]: item 0, gap 3
    assert item == 0
    assert bid == pytest.approx(3.5)

    oracle.set_price(0, bid)
    item, bid = oracle.get_optimal_bid(0)
    # reduced costs are now [4.5, 4]
    assert item == 1
    assert bid == pytest.approx(0.5 + 0.5)


@pytest.mark.parametrize("cls", [DenseAuctionOracle, LazyAuctionOracle])
def test_max_val_is_largest_cost(cls):
    oracle = _line_oracle(cls)
    assert oracle.max_val == pytest.approx(9.0)


def test_lazy_and_dense_agree():
    g = torch.Generator().manual_seed(3)
    A = torch.rand(6, 2, generator=g, dtype=torch.float64)
    B = torch.rand(6, 2, generator=g, dtype=torch.float64)
    params = AuctionParams(wasserstein_power=2.0, internal_p=2.0)
    dense = DenseAuctionOracle(A, B, params)
    lazy = LazyAuctionOracle(A, B, params)
    dense.set_epsilon(0.01)
    lazy.set_epsilon(0.01)

    assert lazy.max_val == pytest.approx(dense.max_val)
    for b in range(6):
        d_item, d_bid = dense.get_optimal_bid(b)
        l_item, l_bid = lazy.get_optimal_bid(b)
        assert d_item == l_item
        assert d_bid == pytest.approx(l_bid)


def test_adjust_prices_shifts_minimum_to_zero():
    oracle = _line_oracle(DenseAuctionOracle)
    oracle.set_prices([3.0, 5.0])
    oracle.adjust_prices()
    assert oracle.get_prices().tolist() == [0.0, 2.0]


def test_get_prices_is_a_copy():
    oracle = _line_oracle(DenseAuctionOracle)
    prices = oracle.get_prices()
    prices[0] = 100.0
    assert oracle.get_prices()[0].item() == 0.0


def test_bad_prices_and_epsilon():
    oracle = _line_oracle(DenseAuctionOracle)
    with pytest.raises(ValueError):
        oracle.set_prices([1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        oracle.set_epsilon(0.0)


def test_single_item_bid():
    oracle = DenseAuctionOracle(torch.zeros(1, 1, dtype=torch.float64),
                                torch.ones(1, 1, dtype=torch.float64), AuctionParams())
    oracle.set_epsilon(0.25)
    assert oracle.get_optimal_bid(0) == (0, 0.25)


def test_registry():
    assert get_oracle("dense") is DenseAuctionOracle
    assert get_oracle("lazy") is LazyAuctionOracle
    with pytest.raises(ValueError, match="Unknown oracle name"):
        get_oracle("kd-tree")
