"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidInputError(DomainException, ValueError):
    """Caller supplied malformed input (programming error, not a data condition)"""

    pass


class InvalidDateError(InvalidInputError):
    """Date string is not a valid YYYY-MM-DD calendar date"""

    pass


class InvalidDateExpressionError(InvalidInputError):
    """Relative date expression is not one of the recognised forms"""

    pass


class InvalidAmountError(InvalidInputError):
    """Display amount cannot be converted to milliunits"""

    pass


class UnsupportedFrequencyError(InvalidInputError):
    """Frequency code is outside the closed enumeration"""

    pass


class LedgerAPIError(DomainException):
    """Ledger API returned an error or is unavailable"""

    pass
