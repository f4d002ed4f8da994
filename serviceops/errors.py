class ServiceOpsError(Exception):
    """Base class for billing computation errors."""


class NotFoundError(ServiceOpsError, LookupError):
    """A client, facility, rule or override is absent. Aborts the whole operation."""


class InvalidArgumentError(ServiceOpsError, ValueError):
    """Month out of range or a malformed override day window."""


class ComputationDegraded(ServiceOpsError):
    """The previous-month comparison could not be computed."""
