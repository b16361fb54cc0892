import logging
from dataclasses import dataclass
from typing import IO, List, Sequence, Tuple, Union

import pandas as pd
from geopy.distance import great_circle

from tsp_solver import RouteFinderError

logger = logging.getLogger(__name__)

Coordinate = Tuple[float, float]

SITE_COLUMNS = ["index", "name", "street", "house_number", "zip_code", "city", "latitude", "longitude"]


class SiteFileError(RouteFinderError):
    """The sites file could not be read or contains malformed records."""


@dataclass(frozen=True)
class Site:
    index: int
    name: str
    street: str
    house_number: str
    zip_code: str
    city: str
    latitude: float
    longitude: float

    @property
    def coordinate(self) -> Coordinate:
        return self.latitude, self.longitude

    @property
    def address(self) -> str:
        return f"{self.street} {self.house_number}, {self.zip_code} {self.city}".strip(" ,")


def validate_coordinate(lat: float, lon: float) -> Coordinate:
    if not (-90 <= lat <= 90 and -180 <= lon <= 180):
        raise ValueError("Latitude must be [-90,90], Longitude must be [-180,180].")
    return lat, lon


def read_sites_from_csv(path: str) -> List[Site]:
    """Reads the sites from a CSV file with a header row and the columns in SITE_COLUMNS order."""
    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            sites = read_sites(f)
    except OSError as e:
        raise SiteFileError(
            f'Could not read values from the file. Make sure the file "{path}" exists and is not read-protected.'
        ) from e
    logger.info("Read %d sites from %s", len(sites), path)
    return sites


def read_sites(source: Union[str, IO]) -> List[Site]:
    try:
        df = pd.read_csv(source, header=0, dtype=str, keep_default_na=False, skipinitialspace=True,
                         encoding="utf-8-sig")
    except pd.errors.EmptyDataError as e:
        raise SiteFileError("The sites file is empty.") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise SiteFileError(f"The sites file is not valid CSV: {e}") from e

    if df.shape[1] < len(SITE_COLUMNS):
        raise SiteFileError(
            f"Expected {len(SITE_COLUMNS)} columns ({', '.join(SITE_COLUMNS)}), found {df.shape[1]}."
        )

    df = df.iloc[:, :len(SITE_COLUMNS)]
    df.columns = SITE_COLUMNS

    sites = []
    for row_number, row in enumerate(df.to_dict("records"), start=2):
        try:
            lat, lon = validate_coordinate(float(row["latitude"]), float(row["longitude"]))
            site = Site(
                index=int(row["index"]),
                name=row["name"].strip(),
                street=row["street"].strip(),
                house_number=row["house_number"].strip(),
                zip_code=row["zip_code"].strip(),
                city=row["city"].strip(),
                latitude=lat,
                longitude=lon,
            )
        except ValueError as e:
            raise SiteFileError(f"Malformed site record on line {row_number}: {e}") from e
        sites.append(site)
    return sites


def great_circle_km(a: Coordinate, b: Coordinate) -> float:
    return great_circle(a, b).km


def build_distance_matrix(coords: Sequence[Coordinate]) -> List[List[float]]:
    """
    Build a distance matrix (km) from great-circle distances.
    coords: List of (lat, lon)
    Returns: 2D list of distances in km, symmetric with a zero diagonal
    """
    n = len(coords)
    dist_km = [[0.0] * n for _ in range(n)]
    for i in range(n):
        for j in range(i + 1, n):
            dist_km[i][j] = dist_km[j][i] = great_circle_km(coords[i], coords[j])
    return dist_km
