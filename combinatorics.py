from typing import Iterator, Sequence, Tuple


def generate_subsets(min_vertex: int, max_vertex: int, size: int) -> Iterator[Tuple[int, ...]]:
    """
    Yield every subset of the inclusive range [min_vertex, max_vertex] with exactly `size` elements.
    Subsets are ascending tuples, produced in lexicographic order.
    Nothing is yielded when `size` exceeds the number of vertices in the range.
    """
    if size < 0:
        raise ValueError("Subset size must not be negative.")
    if size == 0:
        yield ()
        return

    # the first element leaves room for `size - 1` larger ones
    for first in range(min_vertex, max_vertex - size + 2):
        for rest in generate_subsets(first + 1, max_vertex, size - 1):
            yield (first,) + rest


def permutations(items: Sequence[int]) -> Iterator[Tuple[int, ...]]:
    """
    Lazily yield every ordering of `items` exactly once.
    Elements are compared by value, so they must be distinct.
    """
    if not items:
        yield ()
        return

    for selected in items:
        remainder = [item for item in items if item != selected]
        for perm in permutations(remainder):
            yield (selected,) + perm
