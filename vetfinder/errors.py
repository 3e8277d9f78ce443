"""Store error types raised to callers of the search services"""


class VetFinderError(Exception):
    """Base class for errors surfaced by vetfinder services"""


class StoreUnavailable(VetFinderError):
    """The store could not be reached (connect / transport failure)"""


class QueryFailed(VetFinderError):
    """The store rejected or failed to execute a query"""
