import math

import pytest
import torch

from ws_auction.diagrams import (DIAGONAL_ID, augment_diagrams, diagram_distance, validate_diagram,
                                 wasserstein_distance, wasserstein_pairwise_distances)


def test_validate_rejects_death_before_birth():
    with pytest.raises(ValueError, match="death prior to birth"):
        validate_diagram([[0.0, 1.0], [2.0, 1.0]])


def test_validate_rejects_wrong_shape_and_infinite_points():
    with pytest.raises(ValueError):
        validate_diagram([[0.0, 1.0, 2.0]])
    with pytest.raises(ValueError):
        validate_diagram([[0.0, math.inf]])


def test_validate_accepts_empty():
    assert validate_diagram([]).shape == (0, 2)


def test_augment_pads_with_projections():
    x = torch.tensor([[0.0, 2.0]], dtype=torch.float64)
    y = torch.tensor([[1.0, 3.0], [0.0, 4.0]], dtype=torch.float64)
    A, B, a_ids, b_ids = augment_diagrams(x, y)

    assert A.shape == B.shape == (3, 3)
    assert A[:, 2].tolist() == [0.0, 1.0, 1.0]
    assert A[1, :2].tolist() == [2.0, 2.0]
    assert B[2, :2].tolist() == [1.0, 1.0]
    assert a_ids == [0, DIAGONAL_ID, DIAGONAL_ID]
    assert b_ids == [0, 1, DIAGONAL_ID]


def test_diagram_distance_cases():
    normal = torch.tensor([0.0, 2.0, 0.0], dtype=torch.float64)
    other = torch.tensor([1.0, 4.0, 0.0], dtype=torch.float64)
    diag = torch.tensor([7.0, 7.0, 1.0], dtype=torch.float64)

    assert diagram_distance(normal, other).item() == pytest.approx(2.0)
    # distance to its own projection (1, 1), wherever the diagonal point lies
    assert diagram_distance(normal, diag).item() == pytest.approx(1.0)
    assert diagram_distance(diag, normal, 2.0).item() == pytest.approx(math.sqrt(2.0))
    assert diagram_distance(diag, diag).item() == 0.0


def test_single_point_against_empty_diagram():
    assert wasserstein_distance([[0.0, 2.0]], []) == pytest.approx(1.0)


def test_points_on_the_diagonal_are_ignored():
    x = [[0.0, 4.0], [0.0, 1.0]]
    y = [[0.0, 4.2]]
    plain = wasserstein_distance(x, y, tol=1e-6)
    with_diagonal = wasserstein_distance(x + [[3.0, 3.0]], y + [[1.0, 1.0]], tol=1e-6)
    assert plain == pytest.approx(0.7, rel=1e-5)
    assert with_diagonal == pytest.approx(plain, rel=1e-5)


def test_matching_refers_to_diagram_rows():
    x = [[0.0, 4.0], [0.0, 1.0]]
    y = [[0.0, 4.2]]
    distance, matching = wasserstein_distance(x, y, tol=1e-6, return_matching=True)
    assert distance == pytest.approx(0.7, rel=1e-5)
    assert sorted(matching) == [(0, 0), (1, DIAGONAL_ID)]


def test_distance_is_symmetric():
    g = torch.Generator().manual_seed(1)
    births = torch.rand(5, generator=g, dtype=torch.float64)
    x = torch.stack([births, births + torch.rand(5, generator=g, dtype=torch.float64)], dim=1)
    births = torch.rand(3, generator=g, dtype=torch.float64)
    y = torch.stack([births, births + torch.rand(3, generator=g, dtype=torch.float64)], dim=1)

    forward = wasserstein_distance(x, y, tol=1e-6, p=2.0, internal_p=2.0)
    backward = wasserstein_distance(y, x, tol=1e-6, p=2.0, internal_p=2.0)
    assert forward == pytest.approx(backward, rel=1e-5)


def test_empty_diagrams():
    assert wasserstein_distance([], []) == 0.0
    assert wasserstein_distance([[1.0, 1.0]], [], return_matching=True) == (0.0, [])


def test_pairwise_distances():
    diagrams = [[[0.0, 2.0]], [[0.0, 2.5], [1.0, 1.5]], []]
    D = wasserstein_pairwise_distances(diagrams, tol=1e-6)

    assert D.shape == (3, 3)
    assert torch.equal(D, D.T)
    assert D.diagonal().tolist() == [0.0, 0.0, 0.0]
    assert D[0, 2].item() == pytest.approx(1.0)
    assert D[0, 1].item() == pytest.approx(wasserstein_distance(diagrams[0], diagrams[1], tol=1e-6))


def test_lazy_oracle_gives_same_distance():
    x = [[0.0, 4.0], [0.0, 1.0], [2.0, 3.0]]
    y = [[0.0, 4.2], [1.5, 3.5]]
    dense = wasserstein_distance(x, y, tol=1e-6, p=2.0)
    lazy = wasserstein_distance(x, y, tol=1e-6, p=2.0, oracle="lazy")
    assert lazy == pytest.approx(dense, rel=1e-5)
