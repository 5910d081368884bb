import logging
import os
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _env_number(name: str, default, cast=int):
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return cast(value)
    except ValueError:
        logger.warning(f"⚠️ Invalid value for {name}: {value!r}, using default {default}")
        return default


METAR_STATION = os.getenv("METAR_STATION", "MKJP").upper()
METAR_SOURCE_URL = os.getenv(
    "METAR_SOURCE_URL",
    "https://tgftp.nws.noaa.gov/data/observations/metar/stations/{station}.TXT",
)
METAR_TIMEOUT_SECONDS = _env_number("METAR_TIMEOUT_SECONDS", 10.0, float)

# Matches the weather page refresh interval
WEATHER_CACHE_TTL_SECONDS = _env_number("WEATHER_CACHE_TTL_SECONDS", 300)
WEATHER_MAX_AGE_HOURS = _env_number("WEATHER_MAX_AGE_HOURS", 3.0, float)

ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "*").split(",")
