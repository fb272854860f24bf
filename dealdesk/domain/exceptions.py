"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInputError(DomainException):
    """Non-finite or nonsensical numeric input rejected at the edge of the core"""

    pass


class SearchSpaceError(InvalidInputError):
    """Affordability grid is misconfigured (bad step) or exceeds the candidate bound"""

    pass
