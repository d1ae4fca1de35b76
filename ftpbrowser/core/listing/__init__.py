from core.listing.models import Entry, FallbackPolicy, ListingParseResult, format_progress, format_size
from core.listing.parser import ListingParser, parse

__all__ = [
    "Entry",
    "FallbackPolicy",
    "ListingParseResult",
    "ListingParser",
    "format_progress",
    "format_size",
    "parse",
]
