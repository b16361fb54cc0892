import math

import numpy as np
import pytest

from conftest import random_matrix
from tsp_solver import (
    DegenerateInputError,
    InvalidMatrixError,
    RouteFinderError,
    SOLVERS,
    get_solver,
    solve,
    solve_tsp_brute_force,
    solve_tsp_held_karp,
    tour_length,
    validate_matrix,
)

SOLVER_FUNCS = [solve_tsp_brute_force, solve_tsp_held_karp]


def assert_valid_tour(tour, n):
    assert len(tour) == n + 1
    assert tour[0] == 1 and tour[-1] == 1
    assert sorted(tour[1:-1]) == list(range(2, n + 1))


@pytest.mark.parametrize("n", range(2, 9))
@pytest.mark.parametrize("seed", [0, 1, 2])
def test_solvers_agree(n, seed):
    matrix = random_matrix(n, seed)
    bf_length, bf_tour = solve_tsp_brute_force(matrix)
    hk_length, hk_tour = solve_tsp_held_karp(matrix)
    assert hk_length == pytest.approx(bf_length, abs=1e-9)
    assert_valid_tour(bf_tour, n)
    assert_valid_tour(hk_tour, n)


@pytest.mark.parametrize("n", [3, 5, 7])
def test_solvers_agree_on_symmetric_matrices(n):
    matrix = random_matrix(n, seed=42, symmetric=True)
    assert solve_tsp_held_karp(matrix)[0] == pytest.approx(solve_tsp_brute_force(matrix)[0], abs=1e-9)


@pytest.mark.parametrize("solver", SOLVER_FUNCS)
@pytest.mark.parametrize("n", [2, 4, 6, 8])
def test_reported_length_matches_tour(solver, n):
    matrix = random_matrix(n, seed=n)
    length, tour = solver(matrix)
    assert tour_length(matrix, tour) == pytest.approx(length, abs=1e-9)


@pytest.mark.parametrize("solver", SOLVER_FUNCS)
def test_solvers_are_deterministic(solver):
    matrix = random_matrix(6, seed=7)
    assert solver(matrix) == solver(matrix)


@pytest.mark.parametrize("solver", SOLVER_FUNCS)
def test_two_sites(solver):
    matrix = [[0.0, 3.5], [3.5, 0.0]]
    length, tour = solver(matrix)
    assert tour == [1, 2, 1]
    assert length == pytest.approx(7.0)


@pytest.mark.parametrize("solver", SOLVER_FUNCS)
def test_unit_square_takes_the_perimeter(solver, unit_square):
    length, tour = solver(unit_square)
    assert length == pytest.approx(4.0)
    assert length < 2 + 2 * math.sqrt(2)
    assert_valid_tour(tour, 4)


@pytest.mark.parametrize("solver", SOLVER_FUNCS)
def test_asymmetric_costs_follow_travel_direction(solver, asymmetric_matrix):
    length, tour = solver(asymmetric_matrix)
    assert length == pytest.approx(21.0)
    assert tour == [1, 2, 4, 3, 1]
    assert tour_length(asymmetric_matrix, tour) == pytest.approx(length)


@pytest.mark.parametrize("solver", SOLVER_FUNCS)
def test_solvers_accept_numpy_arrays(solver, asymmetric_matrix):
    length, tour = solver(np.array(asymmetric_matrix))
    assert isinstance(length, float)
    assert length == pytest.approx(21.0)
    assert tour == [1, 2, 4, 3, 1]


@pytest.mark.parametrize("solver", SOLVER_FUNCS)
@pytest.mark.parametrize("matrix", [[], [[0.0]]])
def test_solvers_reject_degenerate_input(solver, matrix):
    with pytest.raises(DegenerateInputError):
        solver(matrix)


def test_held_karp_handles_larger_inputs():
    n = 12
    matrix = random_matrix(n, seed=3, symmetric=True)
    length, tour = solve_tsp_held_karp(matrix)
    assert_valid_tour(tour, n)
    assert tour_length(matrix, tour) == pytest.approx(length)


@pytest.mark.parametrize("matrix", [None, [[0.0, 1.0], [1.0]], [[0.0, 1.0, 2.0], [1.0, 0.0, 2.0]], [1.0, 2.0]])
def test_validate_matrix_rejects_invalid_shapes(matrix):
    with pytest.raises(InvalidMatrixError):
        validate_matrix(matrix)


def test_validate_matrix_rejects_single_site():
    with pytest.raises(DegenerateInputError):
        validate_matrix([[0.0]])


def test_errors_share_a_base_class():
    assert issubclass(InvalidMatrixError, RouteFinderError)
    assert issubclass(DegenerateInputError, ValueError)


def test_validate_matrix_returns_size(unit_square):
    assert validate_matrix(unit_square) == 4


def test_get_solver_defaults_to_held_karp():
    assert get_solver() == ("held-karp", SOLVERS["held-karp"])
    assert get_solver(brute_force=True) == ("brute-force", solve_tsp_brute_force)


@pytest.mark.parametrize("brute_force", [False, True])
def test_solve_reports_timing_and_solver(brute_force, asymmetric_matrix):
    result = solve(asymmetric_matrix, brute_force=brute_force)
    assert result.length == pytest.approx(21.0)
    assert result.tour == [1, 2, 4, 3, 1]
    assert result.elapsed_seconds >= 0
    assert result.solver == ("brute-force" if brute_force else "held-karp")


def test_solve_validates_matrix():
    with pytest.raises(InvalidMatrixError):
        solve([[0.0, 1.0]])


INF = float("inf")


@pytest.mark.parametrize("matrix", [
    [[0.0, INF, INF], [INF, 0.0, INF], [INF, INF, 0.0]],
    [[0.0, 1.0], [float("nan"), 0.0]],
    [[0.0, -1.0], [1.0, 0.0]],
    [[0.0, "far"], [1.0, 0.0]],
])
def test_validate_matrix_rejects_unusable_costs(matrix):
    with pytest.raises(InvalidMatrixError):
        validate_matrix(matrix)
    with pytest.raises(InvalidMatrixError):
        solve(matrix, brute_force=True)


@pytest.mark.parametrize("solver", SOLVER_FUNCS)
def test_solvers_return_a_tour_when_every_cost_is_infinite(solver):
    matrix = [[0.0, INF, INF], [INF, 0.0, INF], [INF, INF, 0.0]]
    length, tour = solver(matrix)
    assert length == INF
    assert_valid_tour(tour, 3)
