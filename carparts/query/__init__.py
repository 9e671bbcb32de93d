from carparts.query.builder import BuiltQuery, FilterRequest, build_search
from carparts.query.errors import (
    ConfigurationError,
    InvalidFilterError,
    InvalidRangeError,
    InvalidSearchRequest,
    InvalidSortError,
    SearchError,
)

__all__ = [
    "BuiltQuery",
    "FilterRequest",
    "build_search",
    "ConfigurationError",
    "InvalidFilterError",
    "InvalidRangeError",
    "InvalidSearchRequest",
    "InvalidSortError",
    "SearchError",
]
