import logging

from dubai_unit_finder.errors import MissingStructuredData
from dubai_unit_finder.extract.deep_search import (
    find_first_number_by_key,
    find_object_by_key,
    get_value_at_path,
    is_number,
)
from dubai_unit_finder.extract.html_fields import extract_trakheesi_url, extract_zone_name
from dubai_unit_finder.extract.structured_data import (
    build_next_data_url,
    extract_window_state,
    parse_next_data,
)
from dubai_unit_finder.normalize import (
    build_coordinates,
    clean_str,
    coerce_int,
    decode_escaped_url,
    location_from_levels,
)
from dubai_unit_finder.schema.records import ListingFields, PropertyDetails, Regulatory


logger = logging.getLogger("duf.bayut")


def listing_from_tree(tree):
    """The listing object is the `property` node, or its `data` member."""
    node = find_object_by_key(tree, "property")
    if not isinstance(node, dict):
        return None
    data = node.get("data")
    return data if isinstance(data, dict) else node


async def locate(html_text, url, http, settings):
    listing = listing_from_tree(extract_window_state(html_text))
    if listing is not None:
        return listing

    next_data = parse_next_data(html_text)
    build_id = next_data.get("buildId") if isinstance(next_data, dict) else None
    json_url = build_next_data_url(url, build_id if isinstance(build_id, str) else None)
    if json_url:
        logger.debug("window.state missing, trying %s", json_url)
        payload = await http.fetch_json(json_url, settings.endpoint_timeout_s)
        listing = listing_from_tree(payload)
        if listing is not None:
            return listing

    raise MissingStructuredData(
        "Unable to retrieve listing data (window.state/Next.js) without a browser"
    )


def image_url(listing):
    raw = get_value_at_path(listing, ["photos", 0, "url"])
    return decode_escaped_url(raw) if isinstance(raw, str) else None


def _direct_or_deep_number(listing, key):
    value = listing.get(key)
    if is_number(value):
        return value
    return find_first_number_by_key(listing, key)


def extract(listing, html_text=None):
    geography = listing.get("geography")
    if not isinstance(geography, dict):
        geography = {}
    levels = listing.get("location")

    permit_number = listing.get("permitNumber")
    if is_number(permit_number):
        permit_number = str(permit_number)

    agency = listing.get("agency")
    company = agency.get("name") if isinstance(agency, dict) else None

    price = listing.get("price")
    plot_area = listing.get("plotArea")

    return ListingFields(
        location=location_from_levels(levels if isinstance(levels, list) else []),
        coordinates=build_coordinates(geography.get("lat"), geography.get("lng")),
        regulatory=Regulatory(
            permit_number=clean_str(permit_number),
            permit_url=extract_trakheesi_url(html_text),
        ),
        property=PropertyDetails(
            zone_name=extract_zone_name(html_text),
            bedrooms=coerce_int(_direct_or_deep_number(listing, "rooms")),
            bathrooms=coerce_int(_direct_or_deep_number(listing, "baths")),
            image_url=image_url(listing),
            price=price if is_number(price) else None,
            plot_area=plot_area if is_number(plot_area) else None,
        ),
        company=company if isinstance(company, str) else "",
    )
