import itertools

import pytest
import torch

from ws_auction.oracles import dist_lp


def brute_force_cost(A, B, q, internal_p, ground_distance=dist_lp):
    """Smallest transport cost over all bijections, by exhaustive search."""
    C_i_j = ground_distance(A.unsqueeze(1), B.unsqueeze(0), internal_p, None).pow(q)
    n = A.shape[0]
    best = None
    for perm in itertools.permutations(range(n)):
        cost = C_i_j[torch.arange(n), torch.tensor(perm, dtype=torch.long)].sum().item()
        if best is None or cost < best:
            best = cost
    return best


@pytest.fixture
def planar_triple():
    A = torch.tensor([[0.0, 0.0], [1.0, 0.0], [0.0, 2.0]], dtype=torch.float64)
    B = torch.tensor([[0.0, 1.0], [2.0, 0.0], [1.0, 2.0]], dtype=torch.float64)
    return A, B


@pytest.fixture
def random_points():
    def make(n, seed, dim=2):
        g = torch.Generator().manual_seed(seed)
        A = torch.randint(0, 10, (n, dim), generator=g).double()
        B = torch.randint(0, 10, (n, dim), generator=g).double()
        return A, B
    return make
