from typing import List, Sequence

from sites import Site

DIVIDER = "=" * 42


def stop_label(stop: int, sites: Sequence[Site]) -> str:
    # stops are 1-indexed positions in the sites file
    return f"{sites[stop - 1].name} ({stop})"


def format_report(length: float, tour: Sequence[int], elapsed_seconds: float, sites: Sequence[Site]) -> str:
    """Formats the solver result as the divider-bordered console report."""
    stops: List[str] = [stop_label(stop, sites) for stop in tour]
    lines = [
        DIVIDER,
        f"Shortest route length: {round(length, 2)} km",
        DIVIDER,
        "\n-> ".join(stops),
        DIVIDER,
        f"Calculation took: {round(elapsed_seconds, 2)} seconds",
        DIVIDER,
    ]
    return "\n".join(lines)
