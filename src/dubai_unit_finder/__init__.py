"""Package initializer for `dubai_unit_finder`."""

from .pipeline import ListingExtractor, extract_listing
from .schema.records import ListingResult

__all__ = ["ListingExtractor", "ListingResult", "extract_listing"]
