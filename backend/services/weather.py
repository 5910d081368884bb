"""Latest-observation cache for station weather."""
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional
from models.metar import ParsedObservation
from models.weather import RawMetar
from services.metar import parse_metar
from services.noaa import WeatherProviderError, fetch_metar_text

logger = logging.getLogger(__name__)


class WeatherUnavailableError(Exception):
    """Raised when no usable observation exists for a station."""
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CachedObservation:
    station: str
    raw: str
    parsed: ParsedObservation
    observed_at: datetime
    fetched_at: datetime

    def age(self, now: datetime) -> timedelta:
        return now - self.observed_at

    def is_stale(self, max_age: timedelta, now: datetime) -> bool:
        return self.age(now) > max_age


class WeatherService:
    """
    Holds the last known observation per station.

    Entries younger than the TTL are served without touching the feed.
    When a refresh fails the previous entry is kept and returned; callers
    decide what to do with it via `is_stale`.
    """

    def __init__(
        self,
        fetcher: Callable[[str], RawMetar] = fetch_metar_text,
        cache_ttl_seconds: int = 300,
        max_age_hours: float = 3.0,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.fetcher = fetcher
        self.cache_ttl = timedelta(seconds=cache_ttl_seconds)
        self.max_age = timedelta(hours=max_age_hours)
        self.clock = clock
        self._cache: Dict[str, CachedObservation] = {}
        # Sync routes run in a threadpool; one refresh at a time
        self._refresh_lock = threading.Lock()

    def cached(self, station: str) -> Optional[CachedObservation]:
        return self._cache.get(station.upper())

    def is_stale(self, entry: CachedObservation) -> bool:
        return entry.is_stale(self.max_age, self.clock())

    def get_latest(self, station: str) -> CachedObservation:
        """
        Return the latest observation for a station, refreshing it when the
        cached entry is older than the TTL.

        Raises:
            WeatherUnavailableError: If the refresh fails and nothing is cached
        """
        station = station.upper()
        entry = self._fresh_entry(station)
        if entry is not None:
            return entry

        with self._refresh_lock:
            # another request may have refreshed while we waited
            entry = self._fresh_entry(station)
            if entry is not None:
                return entry
            return self._refresh(station)

    def _fresh_entry(self, station: str) -> Optional[CachedObservation]:
        entry = self._cache.get(station)
        if entry is None:
            return None
        cache_age = self.clock() - entry.fetched_at
        if cache_age < self.cache_ttl:
            logger.debug(f"Using cached weather for {station} (age: {cache_age.total_seconds():.0f}s)")
            return entry
        return None

    def _refresh(self, station: str) -> CachedObservation:
        now = self.clock()
        entry = self._cache.get(station)
        if entry is not None:
            logger.info(f"Cache expired for {station}, fetching new data")

        try:
            raw_metar = self.fetcher(station)
        except WeatherProviderError as e:
            return self._fallback(station, entry, f"fetch failed: {e}")

        parsed = parse_metar(raw_metar.raw)
        if parsed is None:
            return self._fallback(station, entry, "feed returned no METAR tokens")

        entry = CachedObservation(
            station=station,
            raw=raw_metar.raw,
            parsed=parsed,
            observed_at=raw_metar.issued_at or now,
            fetched_at=now,
        )
        self._cache[station] = entry
        logger.info(f"✅ Weather updated for {station}: {parsed.summary}")
        return entry

    def _fallback(self, station: str, entry: Optional[CachedObservation], reason: str) -> CachedObservation:
        if entry is not None:
            logger.warning(f"⚠️ {station} {reason}, serving previous observation from {entry.observed_at.isoformat()}")
            return entry
        logger.error(f"❌ {station} {reason}, no cached observation")
        raise WeatherUnavailableError(f"Weather data not available for {station}: {reason}")
