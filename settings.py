import os

from dotenv import load_dotenv

load_dotenv()

GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY")

# "great_circle" or "google" (driving distances via the Routes API)
DISTANCE_PROVIDER = os.getenv("DISTANCE_PROVIDER", "great_circle").lower()

MAX_POINTS = int(os.getenv("MAX_POINTS", "20"))
MAX_BRUTE_FORCE_POINTS = int(os.getenv("MAX_BRUTE_FORCE_POINTS", "10"))

DEFAULT_SITES_FILE = os.getenv("DEFAULT_SITES_FILE", "sites_deutschland.csv")

REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()

SECRET_KEY = os.getenv("SECRET_KEY") or os.urandom(24)


def use_road_distances() -> bool:
    return DISTANCE_PROVIDER == "google" and bool(GOOGLE_MAPS_API_KEY)
