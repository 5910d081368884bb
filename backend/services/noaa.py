import logging
import requests
from datetime import datetime, timezone
from typing import Optional
import config
from models.weather import RawMetar

logger = logging.getLogger(__name__)

STATION_NAMES = {
    "MKJP": "Kingston/Norman Manley International Airport (MKJP)",
    "MKJS": "Montego Bay/Sangster International Airport (MKJS)",
    "MKBS": "Ocho Rios/Ian Fleming International Airport (MKBS)",
    "MKTP": "Kingston/Tinson Pen Aerodrome (MKTP)",
}


class WeatherProviderError(Exception):
    """Raised when the station feed cannot be fetched."""
    pass


def station_name(icao: str) -> str:
    return STATION_NAMES.get(icao.upper(), icao.upper())


def _parse_issue_time(line: str) -> Optional[datetime]:
    try:
        return datetime.strptime(line.strip(), "%Y/%m/%d %H:%M").replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def fetch_metar_text(icao: str) -> RawMetar:
    """Fetch the latest raw METAR for a station from the NWS text feed.

    The feed file holds two lines: the UTC issue time (``2024/10/15 12:00``)
    followed by the report itself.
    """
    station = icao.upper()
    url = config.METAR_SOURCE_URL.format(station=station)
    logger.info(f"🌐 Fetching METAR: {url}")

    try:
        r = requests.get(url, timeout=config.METAR_TIMEOUT_SECONDS)
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Network error fetching METAR for {station}: {e}")
        raise WeatherProviderError(f"Network error: {e}") from e

    logger.info(f"📊 METAR Response Status: {r.status_code}")
    if r.status_code != 200:
        logger.error(f"❌ METAR feed error for {station}: {r.text[:200]}")
        raise WeatherProviderError(f"NWS feed error {r.status_code} for {station}")

    lines = [line.strip() for line in r.text.splitlines() if line.strip()]
    if not lines:
        logger.warning(f"⚠️ Empty METAR response for {station}")
        raise WeatherProviderError(f"Empty METAR response for {station}")

    issued_at = _parse_issue_time(lines[0]) if len(lines) > 1 else None
    raw = " ".join(lines[1:]) if issued_at is not None else " ".join(lines)
    logger.debug(f"📄 METAR Data: {raw}")

    return RawMetar(station=station, raw=raw, issued_at=issued_at)
