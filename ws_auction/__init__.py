"""
Wasserstein Auction Package

A PyTorch-based implementation of the Gauss-Seidel auction algorithm with
epsilon-scaling for computing q-Wasserstein distances between two point sets
of equal size, e.g. persistence diagrams padded with diagonal points.

The package supports:
- Epsilon-scaling with a certified relative-error stopping rule
- Pluggable bid/price oracles (dense cost matrix or lazily recomputed rows)
- Arbitrary l_p ground distances
- Persistence diagram distances with diagonal matching
- An optional verification layer for the assignment invariants

Main Components:
- AuctionRunnerGS: Epsilon-scaling auction orchestrator
- AuctionParams: Run configuration
- AuctionResult: Cost, distance, matching and diagnostics of a run
- wasserstein_distance: Distance between two persistence diagrams

Example Usage:
    >>> import torch
    >>> from ws_auction import AuctionRunnerGS, AuctionParams
    >>>
    >>> A = torch.rand(100, 2)
    >>> B = torch.rand(100, 2)
    >>> params = AuctionParams(wasserstein_power=2, internal_p=2, delta=1e-3)
    >>> result = AuctionRunnerGS(A, B, params).run()
    >>> print(result.distance, result.final_relative_error)
"""

from .core import AuctionRunnerGS
from .params import AuctionParams
from .result import AuctionResult
from .oracles import get_oracle
from .diagrams import wasserstein_distance, wasserstein_pairwise_distances
from .exceptions import (AuctionError, ConvergenceError, DistanceNotComputedError,
                         InvalidIndexError, InvariantError)

__version__ = "0.1"

__all__ = ["AuctionRunnerGS", "AuctionParams", "AuctionResult", "get_oracle",
           "wasserstein_distance", "wasserstein_pairwise_distances",
           "AuctionError", "ConvergenceError", "DistanceNotComputedError",
           "InvalidIndexError", "InvariantError"]
