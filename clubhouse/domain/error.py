"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Domain validation error.

    Raised before any write when submitted content is empty or too long.
    """

    pass


class BusinessRuleViolationError(DomainError):
    """Business rule violation error."""

    pass


class RateLimitedError(DomainError):
    """Raised when a throttled action is attempted inside its cooldown window."""

    def __init__(self, action: str, remaining_seconds: int):
        self.action = action
        self.remaining_seconds = remaining_seconds
        super().__init__(
            f"Rate limited for {action}: {remaining_seconds}s remaining"
        )


class WriteFailedError(DomainError):
    """Raised when the document store rejects or times out a write."""

    def __init__(self, operation: str, cause: BaseException | None = None):
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"{operation} failed{detail}")


class ReconciliationMismatchError(DomainError):
    """Raised when a pending comment never matches a confirmed record."""

    def __init__(self, pending_id: str, waited_seconds: float):
        self.pending_id = pending_id
        self.waited_seconds = waited_seconds
        super().__init__(
            f"Pending comment {pending_id} unmatched after {waited_seconds:.1f}s"
        )


class NotAuthorizedError(DomainError):
    """Raised when a user attempts to modify content they don't own."""

    def __init__(self, resource: str, resource_id: str, user_id: str):
        super().__init__(
            f"User {user_id} is not authorized to modify {resource} {resource_id}"
        )


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")
