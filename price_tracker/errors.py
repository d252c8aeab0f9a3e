# price_tracker/errors.py

"""Exception hierarchy shared by the tracker core and its collaborators."""


class TrackerError(Exception):
    """Base class for all price_tracker errors."""


class FetchError(TrackerError):
    """A page could not be fetched (network, timeout, non-2xx, block page)."""


class PriceNotFoundError(TrackerError):
    """The page was fetched but no price could be extracted."""


class ItemUnavailableError(TrackerError):
    """The page states the item is unavailable. Never retried."""


class ItemListError(TrackerError):
    """The tracking list could not be read. Fatal to the current batch."""


class StoreWriteError(TrackerError):
    """A durable state file could not be written."""
