"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidAmountError(DomainException, ValueError):
    """Currency amount is outside the accepted range (e.g. negative payroll)"""

    pass


class BankAPIError(DomainException):
    """Bank data API returned an error or is unavailable"""

    pass


class PayrollAPIError(DomainException):
    """Payroll provider API returned an error or is unavailable"""

    pass


class NotificationError(DomainException):
    """Notification channel could not deliver an alert"""

    pass
