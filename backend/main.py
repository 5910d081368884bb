from dotenv import load_dotenv
import re
import logging
from datetime import datetime, timezone

load_dotenv()

import config


def configure_logging():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


configure_logging()
logger = logging.getLogger(__name__)

logger.info("🔧 Configuration Check:")
logger.info(f"   METAR_STATION: {config.METAR_STATION}")
logger.info(f"   METAR_SOURCE_URL: {config.METAR_SOURCE_URL}")
logger.info(f"   WEATHER_CACHE_TTL_SECONDS: {config.WEATHER_CACHE_TTL_SECONDS}")
logger.info(f"   WEATHER_MAX_AGE_HOURS: {config.WEATHER_MAX_AGE_HOURS}")

from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from models.metar import ParsedObservation
from models.weather import MetarParseRequest, WeatherReport
from services.metar import parse_metar
from services.noaa import station_name
from services.weather import CachedObservation, WeatherService, WeatherUnavailableError

# ICAO identifiers start with a letter; small US fields mix in digits (K1V4)
ICAO_CODE = re.compile(r"^[A-Za-z][A-Za-z0-9]{3}$")

app = FastAPI(
    title="Jamaica Weather API",
    description="Current station weather decoded from NWS METAR reports",
    version="1.0.0",
    docs_url="/docs" if config.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if config.ENVIRONMENT != "production" else None
)

# Security middleware
app.add_middleware(TrustedHostMiddleware, allowed_hosts=config.ALLOWED_HOSTS)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "HEAD", "OPTIONS"],
    allow_headers=["*"],
)

weather_service = WeatherService(
    cache_ttl_seconds=config.WEATHER_CACHE_TTL_SECONDS,
    max_age_hours=config.WEATHER_MAX_AGE_HOURS,
)


def get_weather_service() -> WeatherService:
    return weather_service


def _to_report(entry: CachedObservation, service: WeatherService) -> WeatherReport:
    return WeatherReport(
        station=entry.station,
        station_name=station_name(entry.station),
        observation_time=entry.parsed.observation_time,
        raw=entry.raw,
        parsed=entry.parsed,
        summary=entry.parsed.summary,
        observed_at=entry.observed_at,
        fetched_at=entry.fetched_at,
        stale=service.is_stale(entry),
    )


def _station_weather(station: str, service: WeatherService) -> WeatherReport:
    try:
        entry = service.get_latest(station)
    except WeatherUnavailableError as e:
        logger.error(f"❌ {e}")
        raise HTTPException(status_code=503, detail="Weather data not available")

    report = _to_report(entry, service)
    if report.stale:
        logger.warning(f"⚠️ Serving stale observation for {station} (observed {entry.observed_at.isoformat()})")
    return report


@app.get("/")
@app.head("/")
def health():
    """Health check endpoint"""
    return {
        "status": "ok",
        "service": "Jamaica Weather API",
        "version": "1.0.0",
    }


@app.get("/api/health")
def detailed_health(service: WeatherService = Depends(get_weather_service)):
    """Detailed health check for monitoring"""
    entry = service.cached(config.METAR_STATION)
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "station": config.METAR_STATION,
        "weather": {
            "cached": entry is not None,
            "observedAt": entry.observed_at.isoformat() if entry else None,
            "stale": service.is_stale(entry) if entry else None,
        },
    }


@app.get("/api/weather/jamaica", response_model=WeatherReport)
def jamaica_weather(service: WeatherService = Depends(get_weather_service)):
    """Latest observation for the default Jamaican station (MKJP)."""
    return _station_weather(config.METAR_STATION, service)


@app.get("/api/weather/{station}", response_model=WeatherReport)
def station_weather(station: str, service: WeatherService = Depends(get_weather_service)):
    if not ICAO_CODE.match(station):
        raise HTTPException(status_code=400, detail=f"Invalid ICAO station code: {station}")
    return _station_weather(station.upper(), service)


@app.post("/api/metar/parse", response_model=ParsedObservation)
def parse_report(req: MetarParseRequest):
    """Decode a raw METAR line supplied by the client."""
    parsed = parse_metar(req.raw)
    if parsed is None:
        raise HTTPException(status_code=422, detail="No METAR data to parse")
    return parsed
