import logging
import sys

import click

import settings
from google_distance import DistanceServiceError, build_road_distance_matrix, has_unreachable_pairs
from report import format_report
from sites import build_distance_matrix, read_sites_from_csv
from tsp_solver import RouteFinderError, SOLVER_NAMES, get_solver, solve, validate_matrix

logger = logging.getLogger(__name__)


@click.command()
@click.argument("filepath", default=settings.DEFAULT_SITES_FILE, type=click.Path(dir_okay=False))
@click.option("--brute-force", is_flag=True, help="Use a brute force approach instead of the Held-Karp algorithm.")
@click.option("--road", is_flag=True, help="Use driving distances from the Google Routes API.")
def main(filepath, brute_force, road):
    """Solves the travelling salesman problem for the sites listed in FILEPATH."""
    level = logging.getLevelName(settings.LOG_LEVEL)
    if not isinstance(level, int):
        click.echo(f"Error: Unknown LOG_LEVEL \"{settings.LOG_LEVEL}\".", err=True)
        sys.exit(1)
    logging.basicConfig(level=level, stream=sys.stderr,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        sites = read_sites_from_csv(filepath)
        coords = [site.coordinate for site in sites]
        if road:
            matrix = build_road_distance_matrix(coords, settings.GOOGLE_MAPS_API_KEY, settings.REQUEST_TIMEOUT)
            if has_unreachable_pairs(matrix):
                raise DistanceServiceError("Some locations are unreachable by road.")
        else:
            matrix = build_distance_matrix(coords)
        validate_matrix(matrix)

        key, _ = get_solver(brute_force)
        click.echo(f"Calculating optimal route using the {SOLVER_NAMES[key]} algorithm...")
        result = solve(matrix, brute_force=brute_force)
    except RouteFinderError as e:
        logger.debug("Aborting", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(format_report(result.length, result.tour, result.elapsed_seconds, sites))


if __name__ == "__main__":
    main()
