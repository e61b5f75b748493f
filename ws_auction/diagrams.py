"""
Wasserstein distances between persistence diagrams.

A persistence diagram is a 2-column matrix of (birth, death) pairs. Two
diagrams of different sizes are compared by letting every point also be
matched to the diagonal: each diagram is padded with the diagonal projections
of the other one, after which both sides have the same number of points and
the auction runner applies.

Points are stored with a third column flagging diagonal points. The ground
distance between two diagonal points is zero, and between an off-diagonal
point and any diagonal point it is the distance of the off-diagonal point to
its own projection.
"""

import logging
import math

import torch

from ws_auction.core import AuctionRunnerGS
from ws_auction.oracles.distances import dist_lp
from ws_auction.params import AuctionParams

logger = logging.getLogger(__name__)

DIAGONAL_ID = -1


def validate_diagram(x, name="x"):
    """
    Convert a diagram to a (n, 2) float64 tensor and check it.

    Raises:
        ValueError: If x is not a 2-column matrix, has non-finite values, or
                    has a point dying before it is born
    """
    x = torch.as_tensor(x, dtype=torch.float64)
    if x.numel() == 0:
        return x.reshape(0, 2)
    if x.ndim != 2 or x.shape[1] != 2:
        raise ValueError(f"{name} must be a 2-column matrix of (birth, death) pairs, got shape {tuple(x.shape)}")
    if not torch.isfinite(x).all():
        raise ValueError(f"{name} contains non-finite birth or death values.")
    if (x[:, 1] < x[:, 0]).any():
        raise ValueError(f"{name} contains pairs with death prior to birth.")
    return x


def _off_diagonal(x):
    """Drop points with birth == death, keeping the original row index of the others."""
    keep = x[:, 0] < x[:, 1]
    rows = keep.nonzero(as_tuple=True)[0]
    return x[rows], rows.tolist()


def _project(x):
    mid = x.mean(dim=-1, keepdim=True)
    return mid.expand_as(x)


def augment_diagrams(x, y, x_ids=None, y_ids=None):
    """
    Pad two diagrams with each other's diagonal projections.

    Args:
        x (torch.Tensor): Off-diagonal points of the first diagram, shape (n, 2)
        y (torch.Tensor): Off-diagonal points of the second diagram, shape (m, 2)
        x_ids (list, optional): Caller ids of the rows of x. Defaults to indices.
        y_ids (list, optional): Caller ids of the rows of y. Defaults to indices.

    Returns:
        tuple: (A, B, a_ids, b_ids) where:
            - A (torch.Tensor): x followed by the projections of y, shape (n + m, 3)
            - B (torch.Tensor): y followed by the projections of x, shape (n + m, 3)
            - a_ids, b_ids (list): Caller ids, ``DIAGONAL_ID`` for diagonal points
    """
    n, m = x.shape[0], y.shape[0]
    x_ids = list(range(n)) if x_ids is None else list(x_ids)
    y_ids = list(range(m)) if y_ids is None else list(y_ids)

    def flagged(points, flag):
        return torch.cat([points, torch.full((points.shape[0], 1), flag, dtype=points.dtype)], dim=1)

    A = torch.cat([flagged(x, 0.0), flagged(_project(y), 1.0)], dim=0)
    B = torch.cat([flagged(y, 0.0), flagged(_project(x), 1.0)], dim=0)

    a_ids = x_ids + [DIAGONAL_ID] * m
    b_ids = y_ids + [DIAGONAL_ID] * n
    return A, B, a_ids, b_ids


def diagram_distance(a, b, internal_p=math.inf, dim=None):
    """
    Ground distance between augmented diagram points, broadcast like ``dist_lp``.

    ``dim`` is accepted for signature compatibility; only (birth, death) are compared.
    """
    a_diag = a[..., 2] > 0
    b_diag = b[..., 2] > 0
    a_pt = a[..., :2]
    b_pt = b[..., :2]

    d_ab = dist_lp(a_pt, b_pt, internal_p)
    d_a = dist_lp(a_pt, _project(a_pt), internal_p)
    d_b = dist_lp(b_pt, _project(b_pt), internal_p)

    d = torch.where(b_diag, d_a, d_ab)
    d = torch.where(a_diag, d_b, d)
    return torch.where(a_diag & b_diag, torch.zeros_like(d), d)


def wasserstein_distance(x, y, tol=1e-4, p=1.0, internal_p=math.inf, validate=True,
                         return_matching=False, oracle="dense", **params):
    """
    q-Wasserstein distance between two persistence diagrams.

    Points on the diagonal (birth == death) are ignored.

    Args:
        x (array-like): First diagram, shape (n, 2)
        y (array-like): Second diagram, shape (m, 2)
        tol (float, optional): Relative error tolerance, strictly positive. Defaults to 1e-4.
        p (float, optional): Wasserstein power q. Defaults to 1.0.
        internal_p (float, optional): Exponent of the ground l_p norm. Defaults to the max-norm.
        validate (bool, optional): Check the diagrams before matching. Defaults to True.
        return_matching (bool, optional): Also return the matching. Defaults to False.
        oracle (str or type, optional): Oracle used by the runner. Defaults to "dense".
        **params: Further ``AuctionParams`` fields (max_num_phases, initial_epsilon, ...)

    Returns:
        float or tuple: The distance, or (distance, matching) where matching is a list
                        of (row in x, row in y) pairs with ``DIAGONAL_ID`` standing for
                        a match to the diagonal

    Example:
        >>> x = [[0.0, 1.0], [0.5, 2.0]]
        >>> y = [[0.0, 1.1]]
        >>> wasserstein_distance(x, y, p=2.0)
    """
    if validate:
        x = validate_diagram(x, "x")
        y = validate_diagram(y, "y")
    else:
        x = torch.as_tensor(x, dtype=torch.float64).reshape(-1, 2)
        y = torch.as_tensor(y, dtype=torch.float64).reshape(-1, 2)

    x, x_rows = _off_diagonal(x)
    y, y_rows = _off_diagonal(y)

    if x.shape[0] == 0 and y.shape[0] == 0:
        return (0.0, []) if return_matching else 0.0

    A, B, a_ids, b_ids = augment_diagrams(x, y, x_rows, y_rows)
    auction_params = AuctionParams(wasserstein_power=p, internal_p=internal_p, delta=tol,
                                   return_matching=return_matching, **params)

    runner = AuctionRunnerGS(A, B, auction_params, oracle=oracle, ground_distance=diagram_distance,
                             bidder_ids=a_ids, item_ids=b_ids)
    result = runner.run()
    logger.debug("Diagram distance %.6g from %d + %d points: %r", result.distance, x.shape[0], y.shape[0], result)

    if return_matching:
        matching = [(a, b) for a, b in result.matching if not (a == DIAGONAL_ID and b == DIAGONAL_ID)]
        return result.distance, matching
    return result.distance


def wasserstein_pairwise_distances(diagrams, tol=1e-4, p=1.0, internal_p=math.inf, validate=True, **params):
    """
    Matrix of Wasserstein distances between all pairs in a list of diagrams.

    Args:
        diagrams (list): Persistence diagrams, each of shape (n_k, 2)
        tol, p, internal_p, validate, **params: As in ``wasserstein_distance``

    Returns:
        torch.Tensor: Symmetric matrix of shape (len(diagrams), len(diagrams)), zero diagonal
    """
    if validate:
        diagrams = [validate_diagram(d, f"x[{k}]") for k, d in enumerate(diagrams)]

    num_d = len(diagrams)
    D = torch.zeros(num_d, num_d, dtype=torch.float64)
    for k in range(num_d):
        for l in range(k + 1, num_d):
            D[k, l] = D[l, k] = wasserstein_distance(diagrams[k], diagrams[l], tol=tol, p=p,
                                                     internal_p=internal_p, validate=False, **params)
    return D
