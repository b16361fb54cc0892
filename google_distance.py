import logging
from typing import List, Optional, Sequence, Tuple

import polyline
import requests

from tsp_solver import RouteFinderError

logger = logging.getLogger(__name__)

ROUTE_MATRIX_URL = "https://routes.googleapis.com/distanceMatrix/v2:computeRouteMatrix"
ROUTES_URL = "https://routes.googleapis.com/directions/v2:computeRoutes"


class DistanceServiceError(RouteFinderError):
    """The Google Routes API could not be reached or refused the request."""


def _headers(api_key: str, field_mask: str) -> dict:
    return {
        "Content-Type": "application/json",
        "X-Goog-Api-Key": api_key,
        "X-Goog-FieldMask": field_mask,
    }


def _waypoint(lat: float, lon: float) -> dict:
    return {"location": {"latLng": {"latitude": lat, "longitude": lon}}}


def build_road_distance_matrix(coords: Sequence[Tuple[float, float]], api_key: Optional[str],
                               timeout: float = 30) -> List[List[float]]:
    """
    Build a driving distance matrix (km) using the Google Routes API.
    coords: List of (lat, lon)
    Returns: 2D list of distances in km; pairs without a route are inf, the diagonal is 0
    """
    if not api_key:
        raise DistanceServiceError("GOOGLE_MAPS_API_KEY not set. Put it in .env or your environment.")

    # For TSP we need the full matrix
    origins = [{"waypoint": _waypoint(lat, lon)} for lat, lon in coords]
    body = {
        "origins": origins,
        "destinations": origins,
        "travelMode": "DRIVE",
    }

    logger.debug("Requesting a %dx%d route matrix", len(coords), len(coords))
    try:
        field_mask = "originIndex,destinationIndex,distanceMeters,condition"
        resp = requests.post(ROUTE_MATRIX_URL, headers=_headers(api_key, field_mask), json=body, timeout=timeout)
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("Route matrix request failed: %s", e)
        raise DistanceServiceError(f"Could not fetch road distances: {e}") from e

    n = len(coords)
    dist_km = [[float("inf")] * n for _ in range(n)]

    for row in data:
        i = row.get("originIndex", 0)
        j = row.get("destinationIndex", 0)
        meters = row.get("distanceMeters")
        # zero-valued fields are omitted, so a route between identical points has no distanceMeters
        if row.get("condition") == "ROUTE_EXISTS":
            dist_km[i][j] = (meters or 0) / 1000.0
        elif meters is not None:
            dist_km[i][j] = meters / 1000.0

    for i in range(n):
        dist_km[i][i] = 0.0

    return dist_km


def fetch_route_polyline(start: Tuple[float, float], end: Tuple[float, float], api_key: str,
                         timeout: float = 30) -> Optional[List[Tuple[float, float]]]:
    """Returns the driving path between two points as (lat, lon) pairs, or None when no route is known."""
    body = {
        "origin": _waypoint(*start),
        "destination": _waypoint(*end),
        "travelMode": "DRIVE",
    }

    try:
        resp = requests.post(ROUTES_URL, headers=_headers(api_key, "routes.polyline.encodedPolyline"),
                             json=body, timeout=timeout)
    except requests.RequestException as e:
        logger.warning("Directions request failed: %s", e)
        return None
    if resp.status_code != 200:
        logger.warning("Directions request returned HTTP %s", resp.status_code)
        return None

    data = resp.json()
    if "routes" not in data or not data["routes"]:
        return None

    poly = data["routes"][0]["polyline"]["encodedPolyline"]
    return polyline.decode(poly)


def has_unreachable_pairs(matrix: Sequence[Sequence[float]]) -> bool:
    return any(value == float("inf") for row in matrix for value in row)
