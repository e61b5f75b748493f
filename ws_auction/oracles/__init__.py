from .base import AuctionOracleBase
from .dense import DenseAuctionOracle
from .lazy import LazyAuctionOracle
from .distances import dist_lp


ORACLE_REGISTRY = {
                  "dense": DenseAuctionOracle,
                  "lazy": LazyAuctionOracle,
                  }

def get_oracle(name):
    """
    Get an oracle class by name.

    Available oracles:
    - "dense": caches the full cost matrix, one row lookup per bid
    - "lazy": recomputes the bidder's cost row on every bid, linear memory

    Args:
        name (str): Name of the oracle, one of "dense", "lazy"

    Returns:
        type: Oracle class, constructed as ``cls(bidders, items, params, ground_distance)``

    Raises:
        ValueError: If the oracle name is not recognized

    Example:
        >>> from ws_auction.oracles import get_oracle
        >>> runner = AuctionRunnerGS(A, B, params, oracle=get_oracle("lazy"))
    """
    try:
        return ORACLE_REGISTRY[name]
    except KeyError:
        raise ValueError(f"Unknown oracle name: {name}")


__all__ = ["AuctionOracleBase", "DenseAuctionOracle", "LazyAuctionOracle", "dist_lp", "get_oracle"]
