from __future__ import annotations

from typing import Optional

from dubai_unit_finder.schema.records import ListingResult


HISTORY_FIELDS = [
    "user_id",
    "request_url",
    "preview",
    "source",
    "emirate",
    "main_area",
    "sub_area",
    "sub_sub_area",
    "full_name",
    "area_name_en",
    "lat",
    "lng",
    "gmap",
    "permit_url",
    "permit_number",
    "price",
    "size",
    "plot_area",
    "bedrooms",
    "bathrooms",
    "image_url",
    "company",
    "building_name",
    "unit_number",
    "request_status",
]


def build_history_record(
    result: ListingResult, request_url: str, user_id: Optional[str]
) -> dict:
    """Flatten a result into the row shape the history store persists.

    Every key in HISTORY_FIELDS is present; values are JSON-serializable and
    fields a failed extraction never produced are None.
    """
    record = {field: None for field in HISTORY_FIELDS}
    record.update(
        {
            "user_id": user_id,
            "request_url": request_url,
            "source": result.source,
            "request_status": "success" if result.success else "failed",
        }
    )
    if not result.success:
        return record

    if result.location is not None:
        record.update(
            {
                "emirate": result.location.emirate,
                "main_area": result.location.main_area,
                "sub_area": result.location.sub_area,
                "sub_sub_area": result.location.sub_sub_area,
                "full_name": result.location.full_name,
            }
        )
    if result.coordinates is not None:
        record.update(
            {
                "lat": result.coordinates.lat,
                "lng": result.coordinates.lon,
                "gmap": result.coordinates.map_link,
            }
        )
    if result.regulatory is not None:
        record["permit_url"] = result.regulatory.permit_url
        record["permit_number"] = result.regulatory.permit_number
    details = result.property
    if details is not None:
        record.update(
            {
                "preview": details.image_encoded,
                "area_name_en": details.zone_name,
                "price": details.price,
                "size": details.size,
                "plot_area": details.plot_area,
                "bedrooms": details.bedrooms,
                "bathrooms": details.bathrooms,
                "image_url": details.image_url,
            }
        )
    record["company"] = result.company or None
    record["building_name"] = result.building_name
    record["unit_number"] = result.unit_number
    return record
