import logging
import time

import torch
from ws_auction import AuctionParams, AuctionRunnerGS
from ws_auction.debug import print_matching

logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

# Two random point clouds in the plane
num_points = 200
dim = 2

torch.manual_seed(0)
A = torch.rand(num_points, dim, dtype=torch.float64)
B = torch.rand(num_points, dim, dtype=torch.float64) + 0.1

params = AuctionParams(wasserstein_power=2, internal_p=2, delta=1e-3, return_matching=True)

for oracle in ["dense", "lazy"]:
    runner = AuctionRunnerGS(A, B, params, oracle=oracle)
    tic = time.time()
    result = runner.run()
    toc = time.time()
    print(f"Time taken for auction ({oracle}): {toc - tic:.4f} seconds")

    print("=== Result ===")
    print(f"Distance                     : {result.distance:.6f}")
    print(f"Relative error               : {result.final_relative_error:.2e}")
    print(f"Phases / rounds              : {result.num_phases} / {result.num_rounds}")
    print(f"Epsilon                      : {result.start_epsilon:.2e} -> {result.final_epsilon:.2e}")

# Small instance, every matched pair
A_small, B_small = A[:5], B[:5]
runner = AuctionRunnerGS(A_small, B_small, params)
runner.run()
print_matching(runner)
