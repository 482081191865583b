"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class BankAPIError(DomainException):
    """Account/transaction snapshot source returned an error or is unavailable"""

    pass


class OracleError(DomainException):
    """Text-generation oracle timed out, failed, or returned nothing usable"""

    pass


class InvalidDateRangeError(DomainException):
    """Date range has start after end"""

    pass


class InsufficientDataError(DomainException):
    """Request carries no accounts and no transactions"""

    pass
