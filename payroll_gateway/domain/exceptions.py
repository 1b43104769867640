"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class RateRetrievalError(DomainException):
    """Tax rates could not be obtained from the completion service"""

    pass


class TransportFailure(RateRetrievalError):
    """Completion service call errored or timed out"""

    pass


class MalformedResponse(RateRetrievalError):
    """Completion text is not a JSON object of well-formed rate entries"""

    pass


class IncompleteResponse(RateRetrievalError):
    """Parsed rate object is missing one or more required jurisdictions"""

    pass


class CacheUnavailable(DomainException):
    """Rate cache could not be read or written"""

    pass
