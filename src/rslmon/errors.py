"""Exception hierarchy for rslmon."""


class RslmonError(Exception):
    """Base class for all rslmon errors."""


class DataFetchError(RslmonError):
    """Readings, links or notes could not be retrieved from storage."""


class ConfigurationError(RslmonError):
    """A link violates a directory invariant.

    Raised for an expected range with min >= max, or a link whose near and
    far end point at the same tower.
    """


class DuplicateReadingError(RslmonError):
    """A reading already exists for the same (link, date)."""


class NotFoundError(RslmonError):
    """The requested record does not exist."""
