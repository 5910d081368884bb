import math
import re
from typing import List, Optional, Tuple
from models.metar import FieldStatus, ParsedObservation, Pressure, Temperature, Visibility, Wind

COMPASS_POINTS = [
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
]

# Scanned in token order, first match wins
CLOUD_LABELS = {
    "FEW": "Few clouds",
    "SCT": "Scattered clouds",
    "BKN": "Broken clouds",
    "OVC": "Overcast",
    "CLR": "Clear",
    "SKC": "Sky clear",
}

WIND_GROUP = re.compile(r"^(\d{3}|VRB)(\d{2,3})(?:G(\d{2,3}))?(KT|MPS)?$", re.ASCII)
VARIABLE_DIRECTION_GROUP = re.compile(r"^\d{3}V\d{3}$", re.ASCII)
VISIBILITY_GROUP = re.compile(r"^\d{4}$", re.ASCII)
# Two-character sides keep RVR (R05/1200) and fractional visibility (1/2SM) out
TEMPERATURE_GROUP = re.compile(r"^(M?[^/]{2}|/{1,2})/(M?[^/]{2}|/{1,2})?$")
CELSIUS = re.compile(r"^-?\d{1,2}$", re.ASCII)

MISSING = "////"
REPORT_TYPES = ("METAR", "SPECI")
MODIFIERS = ("AUTO", "COR")


def compass_label(degrees: Optional[int]) -> str:
    """Map a wind direction to one of 16 compass points (None -> "Variable")."""
    if degrees is None:
        return "Variable"
    # round half up, so 11.25° lands on NNE rather than N
    return COMPASS_POINTS[int(math.floor(degrees / 22.5 + 0.5)) % 16]


def celsius_to_fahrenheit(celsius: Optional[int]) -> Optional[int]:
    if celsius is None:
        return None
    return int(math.floor(celsius * 9 / 5 + 32 + 0.5))


def _tokenize(raw) -> List[str]:
    if not isinstance(raw, str):
        return []
    tokens = raw.split()
    if tokens and tokens[0] in REPORT_TYPES:
        tokens = tokens[1:]
    if "RMK" in tokens:
        tokens = tokens[:tokens.index("RMK")]
    return tokens


def _is_missing(token: str) -> bool:
    return set(token) == {"/"}


def _parse_wind(token: Optional[str]) -> Tuple[Wind, FieldStatus]:
    if token is None or _is_missing(token.replace("KT", "")):
        return Wind(), FieldStatus.ABSENT

    match = WIND_GROUP.match(token)
    if not match:
        return Wind(), FieldStatus.INVALID

    direction_raw, speed_raw, gust_raw, unit_raw = match.groups()
    direction = None if direction_raw == "VRB" else int(direction_raw)
    if direction is not None and direction > 360:
        return Wind(), FieldStatus.INVALID

    compass = compass_label(direction)
    wind = Wind(
        direction=direction,
        speed=int(speed_raw),
        gust=int(gust_raw) if gust_raw else None,
        unit="m/s" if unit_raw == "MPS" else "knots",
        direction_compass=compass,
        description="Variable" if direction is None else f"From the {compass} ({direction}°)",
    )
    return wind, FieldStatus.PARSED


def _parse_visibility(token: Optional[str]) -> Tuple[Visibility, FieldStatus]:
    if token is None:
        return Visibility(), FieldStatus.ABSENT
    if _is_missing(token):
        return Visibility(raw=token), FieldStatus.ABSENT
    if token in ("9999", "CAVOK"):
        return Visibility(raw=token, description="10+ km"), FieldStatus.PARSED
    if not VISIBILITY_GROUP.match(token):
        return Visibility(raw=token), FieldStatus.INVALID
    return Visibility(raw=token, description=f"{int(token) / 1000:g} km"), FieldStatus.PARSED


def _parse_clouds(tokens: List[str]) -> Tuple[str, FieldStatus]:
    for token in tokens:
        for code, label in CLOUD_LABELS.items():
            if token.startswith(code):
                return label, FieldStatus.PARSED
    return "Unknown", FieldStatus.ABSENT


def _parse_temperature_side(side: Optional[str]) -> Tuple[Temperature, FieldStatus]:
    if not side or "/" in side:
        return Temperature(), FieldStatus.ABSENT
    if side.startswith("M"):
        side = "-" + side[1:]
    if not CELSIUS.match(side):
        return Temperature(), FieldStatus.INVALID
    celsius = int(side)
    return Temperature(celsius=celsius, fahrenheit=celsius_to_fahrenheit(celsius)), FieldStatus.PARSED


def _parse_temperatures(tokens: List[str]) -> Tuple[Temperature, FieldStatus, Temperature, FieldStatus]:
    for token in tokens:
        if "/" not in token or "Q" in token or token == MISSING:
            continue
        match = TEMPERATURE_GROUP.match(token)
        if not match:
            continue
        temperature, temperature_status = _parse_temperature_side(match.group(1))
        dew_point, dew_point_status = _parse_temperature_side(match.group(2))
        return temperature, temperature_status, dew_point, dew_point_status
    return Temperature(), FieldStatus.ABSENT, Temperature(), FieldStatus.ABSENT


def _parse_pressure(tokens: List[str]) -> Tuple[Optional[Pressure], FieldStatus]:
    for token in tokens:
        if len(token) > 2 and token[0] in ("Q", "A") and token[1:].isascii() and token[1:].isdigit():
            unit = "hPa" if token[0] == "Q" else "inHg"
            return Pressure(value=token[1:], unit=unit), FieldStatus.PARSED
    return None, FieldStatus.ABSENT


def _guarded(extract, source, fallback):
    """Run one field extractor; a decode error degrades only that field."""
    try:
        return extract(source)
    except (ValueError, OverflowError, TypeError):
        return fallback


def _summarize(temperature: Temperature, clouds: str, wind: Wind, visibility: Visibility) -> str:
    speed = wind.speed or 0
    if wind.direction is None:
        winds = f"Variable winds at {speed} {wind.unit}."
    else:
        winds = f"Winds from the {wind.direction_compass} at {speed} {wind.unit}."
    tail = f"{winds} Visibility {visibility.description}."

    if temperature.fahrenheit is not None:
        return f"{temperature.fahrenheit}°F with {clouds.lower()}. {tail}"
    return f"{clouds}. {tail}"


def parse_metar(raw: str) -> Optional[ParsedObservation]:
    """Parse a single-line METAR report.

    Returns None when the input holds no tokens at all. Otherwise every
    group is decoded independently: a malformed or missing group degrades
    to None/"Unknown" for that field only, and the outcome is recorded in
    `field_status`.

    >>> parse_metar("MKJP 151200Z 09010KT 9999 FEW020 30/24 Q1012").wind.direction_compass
    'E'
    """
    tokens = _tokenize(raw)
    if not tokens:
        return None

    station = tokens[0]
    observation_time = tokens[1] if len(tokens) > 1 else None

    body = tokens[2:]
    while body and body[0] in MODIFIERS:
        body = body[1:]

    wind_token = body[0] if body else None
    visibility_index = 1
    if len(body) > 1 and VARIABLE_DIRECTION_GROUP.match(body[1]):
        visibility_index = 2
    visibility_token = body[visibility_index] if len(body) > visibility_index else None

    wind, wind_status = _guarded(_parse_wind, wind_token, (Wind(), FieldStatus.INVALID))
    visibility, visibility_status = _guarded(
        _parse_visibility, visibility_token, (Visibility(raw=visibility_token), FieldStatus.INVALID)
    )
    clouds, clouds_status = _guarded(_parse_clouds, body, ("Unknown", FieldStatus.INVALID))
    temperature, temperature_status, dew_point, dew_point_status = _guarded(
        _parse_temperatures, body, (Temperature(), FieldStatus.INVALID, Temperature(), FieldStatus.INVALID)
    )
    pressure, pressure_status = _guarded(_parse_pressure, body, (None, FieldStatus.INVALID))

    return ParsedObservation(
        station=station,
        observation_time=observation_time,
        wind=wind,
        visibility=visibility,
        clouds=clouds,
        temperature=temperature,
        dew_point=dew_point,
        pressure=pressure,
        summary=_summarize(temperature, clouds, wind, visibility),
        field_status={
            "wind": wind_status,
            "visibility": visibility_status,
            "clouds": clouds_status,
            "temperature": temperature_status,
            "dewPoint": dew_point_status,
            "pressure": pressure_status,
        },
    )
