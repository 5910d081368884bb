from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from .metar import ParsedObservation


class RawMetar(BaseModel):
    station: str
    raw: str
    issued_at: Optional[datetime] = None  # UTC issue time from the feed header


class MetarParseRequest(BaseModel):
    raw: str  # e.g. "MKJP 151200Z 09010KT 9999 FEW020 30/24 Q1012"


class WeatherReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    station: str
    station_name: str = Field(alias="stationName")
    observation_time: Optional[str] = None
    raw: str
    parsed: ParsedObservation
    summary: str
    observed_at: datetime = Field(alias="observedAt")
    fetched_at: datetime = Field(alias="fetchedAt")
    stale: bool = False
