from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, Optional


class FieldStatus(str, Enum):
    PARSED = "parsed"
    ABSENT = "absent"    # group missing, or carried the //// marker
    INVALID = "invalid"  # group present but undecodable


class Wind(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    direction: Optional[int] = None  # degrees, None when variable
    speed: Optional[int] = None
    gust: Optional[int] = None
    unit: str = "knots"
    direction_compass: str = Field("Variable", alias="directionCompass")
    description: str = "Variable"


class Visibility(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: Optional[str] = None
    description: str = "Unknown"


class Temperature(BaseModel):
    model_config = ConfigDict(frozen=True)

    celsius: Optional[int] = None
    fahrenheit: Optional[int] = None


class Pressure(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    unit: str  # "hPa" or "inHg"


class ParsedObservation(BaseModel):
    """Structured view of one METAR report.

    Built once per parse and never mutated. Numeric fields are either a
    decoded integer or None; `field_status` tells a missing group apart from
    one that was present but could not be decoded.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    station: str
    observation_time: Optional[str] = Field(None, alias="observationTime")
    wind: Wind = Wind()
    visibility: Visibility = Visibility()
    clouds: str = "Unknown"
    temperature: Temperature = Temperature()
    dew_point: Temperature = Field(Temperature(), alias="dewPoint")
    pressure: Optional[Pressure] = None
    summary: str = ""
    field_status: Dict[str, FieldStatus] = Field(default_factory=dict, alias="fieldStatus")
