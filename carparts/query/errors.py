class SearchError(Exception):
    """Base class for everything the search builder can raise."""


class ConfigurationError(SearchError):
    """An entity type or dialect that was never wired in. Caller bug, not user input."""


class InvalidSearchRequest(SearchError):
    """The filter request itself is unusable. Safe to report back to the client."""


class InvalidFilterError(InvalidSearchRequest):
    def __init__(self, key: str, reason: str = "unknown filter"):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid filter '{key}': {reason}")


class InvalidSortError(InvalidSearchRequest):
    pass


class InvalidRangeError(InvalidSearchRequest):
    pass
