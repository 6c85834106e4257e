from .records import (  # noqa: F401
    SOURCE_BAYUT,
    SOURCE_PROPERTYFINDER,
    Coordinates,
    ListingFields,
    ListingResult,
    Location,
    PropertyDetails,
    Regulatory,
)
