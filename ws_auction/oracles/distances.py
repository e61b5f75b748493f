import math


def dist_lp(x, y, internal_p=math.inf, dim=None):
    """
    l_p distance between points, broadcast over all leading dimensions.

    Points live in the last dimension of ``x`` and ``y``. Pairwise distances
    are obtained through broadcasting, e.g. ``dist_lp(A.unsqueeze(1), B.unsqueeze(0))``
    gives a matrix of shape (len(A), len(B)), and matched distances through
    ``dist_lp(A, B[mu_i])``.

    Args:
        x (torch.Tensor): Points of shape (..., k)
        y (torch.Tensor): Points of shape (..., k), broadcastable against x
        internal_p (float, optional): Exponent of the norm, ``math.inf`` for the max-norm.
        dim (int, optional): Only the first ``dim`` coordinates are compared.

    Returns:
        torch.Tensor: Distances of the broadcast shape without the last dimension
    """
    if dim is not None:
        x = x[..., :dim]
        y = y[..., :dim]

    diff = (x - y).abs()
    if math.isinf(internal_p):
        return diff.amax(dim=-1)
    if internal_p == 1:
        return diff.sum(dim=-1)
    return diff.pow(internal_p).sum(dim=-1).pow(1 / internal_p)
