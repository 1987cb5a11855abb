class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthError(DomainError):
    """Raised when an identity cannot be established."""


class AuthenticationError(AuthError):
    """Raised when login credentials are invalid or the email is unknown."""


class AuthorizationError(AuthError):
    """Raised when an account lacks permission for an action."""


class InsufficientBalanceError(DomainError):
    """Raised when a debit would take a balance below zero."""

    def __init__(self, message: str, *, email: str = "", balance: int = 0, amount: int = 0):
        super().__init__(message)
        self.email = email
        self.balance = balance
        self.amount = amount


class NotFoundError(DomainError):
    """Raised when a referenced account or request no longer exists."""


class PartialFailureError(DomainError):
    """Raised when a balance changed but the request row could not be removed.

    The balance mutation has already happened; retrying the approval would
    apply it a second time.
    """

    def __init__(self, message: str, *, request_id: int = 0, email: str = "", new_balance: int = 0):
        super().__init__(message)
        self.request_id = request_id
        self.email = email
        self.new_balance = new_balance


class ConcurrentUpdateError(DomainError):
    """Raised when a balance kept changing underneath a debit/credit attempt."""
