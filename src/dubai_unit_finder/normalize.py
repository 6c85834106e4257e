import base64
import math
from typing import Any, Iterable, Optional

from dubai_unit_finder.extract.deep_search import is_number
from dubai_unit_finder.schema.records import Coordinates, Location


MAP_LINK_TEMPLATE = "https://maps.google.com/?q={lat},{lon}"

_LEVEL_FIELDS = {
    1: "emirate",
    2: "main_area",
    3: "sub_area",
    4: "sub_sub_area",
}


def clean_str(value: Any) -> Optional[str]:
    """Strings only; blank strings become None."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def split_location(full_name: Optional[str]) -> Location:
    """Map "finest, ..., emirate" onto the four location levels.

    The last comma separated segment is the emirate, the one before it the
    main area, and so on. Segments past the fourth are dropped.
    """
    name = clean_str(full_name)
    if not name:
        return Location()
    parts = [part.strip() for part in name.split(",")]
    parts.reverse()
    levels = [(parts[i] if i < len(parts) else "") or None for i in range(4)]
    return Location(
        full_name=name,
        emirate=levels[0],
        main_area=levels[1],
        sub_area=levels[2],
        sub_sub_area=levels[3],
    )


def location_from_levels(entries: Iterable[Any]) -> Location:
    location = Location()
    for entry in entries or []:
        if not isinstance(entry, dict):
            continue
        level = entry.get("level")
        if isinstance(level, bool) or not isinstance(level, int):
            continue
        field_name = _LEVEL_FIELDS.get(level)
        name = clean_str(entry.get("name"))
        if field_name and name:
            setattr(location, field_name, name)
    return location


def coerce_number(value: Any) -> Optional[float]:
    """Numbers and numeric strings to float; anything else to None."""
    if is_number(value):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
        if math.isfinite(number):
            return number
    return None


def coerce_int(value: Any) -> Optional[int]:
    if is_number(value):
        return int(value)
    return None


def format_coordinate(value: float) -> str:
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


def build_map_link(lat: float, lon: float) -> str:
    return MAP_LINK_TEMPLATE.format(lat=format_coordinate(lat), lon=format_coordinate(lon))


def build_coordinates(lat: Any, lon: Any) -> Optional[Coordinates]:
    lat_value = coerce_number(lat)
    lon_value = coerce_number(lon)
    if lat_value is None or lon_value is None:
        return None
    return Coordinates(
        lat=lat_value, lon=lon_value, map_link=build_map_link(lat_value, lon_value)
    )


def decode_escaped_url(url: Optional[str]) -> Optional[str]:
    if not isinstance(url, str):
        return None
    return url.replace("\\u002F", "/").replace("\\u002f", "/")


def encode_data_uri(content: bytes, content_type: Optional[str]) -> str:
    mime = (content_type or "").split(";")[0].strip() or "image/jpeg"
    return f"data:{mime};base64,{base64.b64encode(content).decode('ascii')}"
