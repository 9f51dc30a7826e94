# app/exceptions.py
"""
Service-layer exception hierarchy.

Services raise these; app.main registers one handler per type so routers
never translate errors by hand.

    NotFoundError         -> 404
    ValidationError       -> 400
    RetrievalFailedError  -> 400 (carries the candidate trail)
    ConfigurationError    -> 500

Cleanup and notification failures are never raised across the service
boundary; they are reported as advisory data instead.
"""


class ServiceError(Exception):
    """Base class for errors that map to an HTTP status."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(ServiceError):
    """A service request or document does not exist for the given owner.

    Used for both missing records and records owned by someone else so the
    response never confirms that another owner's resource exists.
    """

    status_code = 404

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} not found")


class ValidationError(ServiceError):
    """Well-formed input that violates a business rule."""

    status_code = 400

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


NO_CANDIDATES = "no stored URL"


class RetrievalFailedError(ServiceError):
    """Every storage candidate for a document was exhausted.

    `trail` holds one "candidate -> outcome" entry per attempt, in order, or
    a single NO_CANDIDATES entry when there was nothing to try.
    """

    status_code = 400

    def __init__(self, trail: list[str], attempts: int | None = None) -> None:
        self.trail = list(trail)
        self.attempts = len(self.trail) if attempts is None else attempts
        super().__init__(
            f"Failed to fetch document file from storage after {self.attempts} attempt(s)"
        )


class ConfigurationError(ServiceError):
    """Storage or delivery credentials are absent or malformed."""

    status_code = 500
