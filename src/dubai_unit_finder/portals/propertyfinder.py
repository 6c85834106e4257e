from dubai_unit_finder.errors import MissingStructuredData
from dubai_unit_finder.extract.deep_search import (
    find_first_number_by_key,
    find_first_string_by_key,
    find_first_url_by_key,
    find_object_by_key,
    find_object_with_keys,
    get_value_at_path,
    is_number,
)
from dubai_unit_finder.extract.structured_data import parse_next_data
from dubai_unit_finder.normalize import build_coordinates, clean_str, coerce_int, split_location
from dubai_unit_finder.schema.records import ListingFields, PropertyDetails, Regulatory


PROPERTY_PATH = ["props", "pageProps", "propertyResult", "property"]


async def locate(html_text, url, http, settings):
    next_data = parse_next_data(html_text)
    if not isinstance(next_data, dict):
        raise MissingStructuredData("Unable to locate Next.js data on the page")
    return next_data


def _direct_or_deep_number(property_root, payload, key):
    value = property_root.get(key) if isinstance(property_root, dict) else None
    if is_number(value):
        return value
    return find_first_number_by_key(payload, key)


def first_small_image(property_root):
    images = get_value_at_path(property_root, ["images", "property", 0, "small"])
    return images if isinstance(images, str) else None


def image_url(payload):
    property_root = get_value_at_path(payload, PROPERTY_PATH)
    return first_small_image(property_root) or find_first_url_by_key(payload, "small")


def extract_permit(payload):
    rera_root = find_object_by_key(payload, "rera") or payload
    rera = find_object_with_keys(rera_root, ["number"]) or {}
    number = rera.get("number")
    if is_number(number):
        number = str(number)
    permit_number = clean_str(number)
    permit_url = clean_str(rera.get("permit_validation_url"))
    if not permit_number:
        permit_number = clean_str(
            find_first_string_by_key(payload, "permitNumber")
            or find_first_string_by_key(payload, "reraPermitNumber")
        )
    if not permit_url:
        permit_url = clean_str(find_first_string_by_key(payload, "permit_validation_url"))
    return Regulatory(permit_number=permit_number, permit_url=permit_url)


def extract(payload, html_text=None):
    full_name = find_first_string_by_key(payload, "full_name")
    coords = find_object_with_keys(payload, ["lat", "lon"]) or {}
    property_root = get_value_at_path(payload, PROPERTY_PATH)
    if not isinstance(property_root, dict):
        property_root = {}

    zone_name = clean_str(property_root.get("zone_name")) or clean_str(
        find_first_string_by_key(payload, "zone_name")
    )
    broker = find_object_by_key(payload, "broker")
    company = broker.get("name") if isinstance(broker, dict) else None

    price = get_value_at_path(property_root, ["price", "value"])
    size = get_value_at_path(property_root, ["size", "value"])

    return ListingFields(
        location=split_location(full_name),
        coordinates=build_coordinates(coords.get("lat"), coords.get("lon")),
        regulatory=extract_permit(payload),
        property=PropertyDetails(
            zone_name=zone_name,
            bedrooms=coerce_int(_direct_or_deep_number(property_root, payload, "bedrooms_value")),
            bathrooms=coerce_int(_direct_or_deep_number(property_root, payload, "bathrooms_value")),
            image_url=image_url(payload),
            price=price if is_number(price) else None,
            size=size if is_number(size) else None,
        ),
        company=company if isinstance(company, str) else "",
    )
