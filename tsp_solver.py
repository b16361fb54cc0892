import logging
import math
import time
from typing import Callable, Dict, List, NamedTuple, Sequence, Tuple

from combinatorics import generate_subsets, permutations

logger = logging.getLogger(__name__)

Matrix = Sequence[Sequence[float]]
Solution = Tuple[float, List[int]]

ORIGIN = 0


# Exact TSP solvers (return optimal length and a 1-indexed tour starting and ending at stop 1)


class RouteFinderError(Exception):
    """Base class for every error raised by the route finder."""


class InvalidMatrixError(RouteFinderError, ValueError):
    """The cost matrix is missing, not square, or holds costs that are not finite and non-negative."""


class DegenerateInputError(RouteFinderError, ValueError):
    """The cost matrix has fewer than two vertices, so there is no tour to find."""


class SubsetState(NamedTuple):
    cost: float
    previous: int


def validate_matrix(matrix: Matrix) -> int:
    """Checks that the matrix is present, square and has finite non-negative costs, and returns its size."""
    if matrix is None:
        raise InvalidMatrixError("No cost matrix was supplied.")
    n = len(matrix)
    for row in matrix:
        try:
            width = len(row)
        except TypeError:
            raise InvalidMatrixError("The cost matrix must be two-dimensional.")
        if width != n:
            raise InvalidMatrixError(f"The cost matrix is not square: expected rows of length {n}, got {width}.")
        for value in row:
            try:
                cost = float(value)
            except (TypeError, ValueError):
                raise InvalidMatrixError(f"Edge costs must be numbers, got {value!r}.")
            if not math.isfinite(cost) or cost < 0:
                raise InvalidMatrixError(f"Edge costs must be finite and non-negative, got {value}.")
    _require_tour(n)
    return n


def _require_tour(n: int):
    if n < 2:
        raise DegenerateInputError(f"At least 2 sites are needed to build a tour, got {n}.")


def tour_length(matrix: Matrix, tour: Sequence[int]) -> float:
    """Sums the edge costs along a 1-indexed tour in the direction it is travelled."""
    length = 0.0
    for a, b in zip(tour, tour[1:]):
        length += float(matrix[a - 1][b - 1])
    return length


def solve_tsp_brute_force(matrix: Matrix) -> Solution:
    """
    Tries every ordering of the non-origin vertices and keeps the cheapest closed tour.

    Runs in O(N!) and is only meant as a reference for small inputs (N up to ~10).
    When several tours are optimal, the first one in permutation order is returned;
    callers should not rely on which of them that is.
    """
    n = len(matrix)
    _require_tour(n)

    optimal_length = float("inf")
    optimal_tour = None
    examined = 0

    for perm in permutations(range(1, n)):
        current_tour = (ORIGIN,) + perm + (ORIGIN,)
        current_length = 0.0
        for i in range(len(current_tour) - 1):
            current_length += float(matrix[current_tour[i]][current_tour[i + 1]])
        examined += 1

        if optimal_tour is None or current_length < optimal_length:
            optimal_length = current_length
            optimal_tour = current_tour

    logger.debug("Brute force examined %d permutations for %d sites", examined, n)
    return optimal_length, [vertex + 1 for vertex in optimal_tour]


def solve_tsp_held_karp(matrix: Matrix) -> Solution:
    """
    Held-Karp dynamic program over (subset, last vertex) states.

    A subset of non-origin vertices is a bitmask with bit i set when vertex i is
    included; bit 0 (the origin) is never set. Python ints are unbounded, so there
    is no word-width ceiling on N, but time is O(N^2 * 2^N) and memory O(N * 2^N),
    which makes anything much beyond 20 sites impractical.

    Candidates are compared with a strict `<`, so among equally cheap tours the
    first one in enumeration order wins.
    """
    n = len(matrix)
    _require_tour(n)

    states = _initialize_states(matrix)
    _calculate_intermediate_states(matrix, states)
    logger.debug("Held-Karp memoized %d states for %d sites", len(states), n)
    return _calculate_final_state(matrix, states)


def _initialize_states(matrix: Matrix) -> Dict[Tuple[int, int], SubsetState]:
    states = {}
    for vertex in range(1, len(matrix)):
        states[(1 << vertex, vertex)] = SubsetState(float(matrix[ORIGIN][vertex]), ORIGIN)
    return states


def _calculate_intermediate_states(matrix: Matrix, states: Dict[Tuple[int, int], SubsetState]):
    n = len(matrix)

    # each size only reads states of size - 1, which are complete by then
    for subset_size in range(2, n):
        for subset in generate_subsets(1, n - 1, subset_size):
            mask = 0
            for vertex in subset:
                mask |= 1 << vertex

            for current in subset:
                previous_mask = mask & ~(1 << current)
                best = None
                for previous in subset:
                    if previous == current:
                        continue
                    cost = states[(previous_mask, previous)].cost + float(matrix[previous][current])
                    if best is None or cost < best.cost:
                        best = SubsetState(cost, previous)
                states[(mask, current)] = best


def _calculate_final_state(matrix: Matrix, states: Dict[Tuple[int, int], SubsetState]) -> Solution:
    n = len(matrix)
    full_mask = (1 << n) - 2

    best = None
    for vertex in range(1, n):
        cost = states[(full_mask, vertex)].cost + float(matrix[vertex][ORIGIN])
        if best is None or cost < best.cost:
            best = SubsetState(cost, vertex)

    # walk the predecessors back to the origin
    path = []
    mask = full_mask
    vertex = best.previous
    while vertex != ORIGIN:
        path.append(vertex)
        previous = states[(mask, vertex)].previous
        mask &= ~(1 << vertex)
        vertex = previous

    tour = [ORIGIN] + path[::-1] + [ORIGIN]
    return best.cost, [v + 1 for v in tour]


SOLVERS: Dict[str, Callable[[Matrix], Solution]] = {
    "held-karp": solve_tsp_held_karp,
    "brute-force": solve_tsp_brute_force,
}

SOLVER_NAMES = {
    "held-karp": "Held–Karp",
    "brute-force": "brute force",
}


def get_solver(brute_force: bool = False) -> Tuple[str, Callable[[Matrix], Solution]]:
    key = "brute-force" if brute_force else "held-karp"
    return key, SOLVERS[key]


class SolveResult(NamedTuple):
    length: float
    tour: List[int]
    elapsed_seconds: float
    solver: str


def solve(matrix: Matrix, brute_force: bool = False) -> SolveResult:
    """Validates the matrix, runs the selected solver and measures how long it took."""
    validate_matrix(matrix)
    key, solver = get_solver(brute_force)
    start = time.perf_counter()
    length, tour = solver(matrix)
    elapsed = time.perf_counter() - start
    logger.info("%s solved %d sites in %.3fs", SOLVER_NAMES[key], len(matrix), elapsed)
    return SolveResult(length, tour, elapsed, key)
