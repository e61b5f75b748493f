import time

import torch
from ws_auction import wasserstein_distance, wasserstein_pairwise_distances

# Random persistence diagrams: births in [0, 1), lifetimes in [0, 0.5)
num_diagrams = 5

torch.manual_seed(42)
diagrams = []
for k in range(num_diagrams):
    n = int(torch.randint(5, 30, (1,)))
    births = torch.rand(n, dtype=torch.float64)
    deaths = births + 0.5 * torch.rand(n, dtype=torch.float64)
    diagrams.append(torch.stack([births, deaths], dim=1))

tic = time.time()
d, matching = wasserstein_distance(diagrams[0], diagrams[1], tol=1e-4, p=2.0, return_matching=True)
toc = time.time()
print(f"Time taken for one distance: {toc - tic:.4f} seconds")
print(f"W_2(D0, D1) = {d:.6f}")
print(f"Points matched to the diagonal: {sum(1 for a, b in matching if a == -1 or b == -1)}")

tic = time.time()
D = wasserstein_pairwise_distances(diagrams, tol=1e-3, p=1.0)
toc = time.time()
print(f"Time taken for pairwise distances: {toc - tic:.4f} seconds")
print(D)
