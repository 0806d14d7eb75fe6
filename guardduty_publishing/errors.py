"""Exception hierarchy for GuardDuty publishing destination management."""
from __future__ import annotations

from typing import AbstractSet, Iterable, List, Optional


class PublishingDestinationError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(PublishingDestinationError, ValueError):
    """Raised when a destination configuration fails validation."""


class MalformedIdentifierError(ValidationError):
    """Raised when a composite resource identifier cannot be decoded."""

    def __init__(self, resource_id: str) -> None:
        self.resource_id = resource_id
        super().__init__(
            "GuardDuty Publishing Destination ID must be of the form "
            f"<Detector ID>:<Publishing Destination ID>, was provided: {resource_id}"
        )


class ResourceNotFoundError(PublishingDestinationError):
    """Raised when a remote resource is expected to exist but does not."""


class WaiterError(PublishingDestinationError):
    """Base class for state change waiter failures."""


class UnexpectedStateError(WaiterError):
    """The polled resource reported a status outside the pending and target sets."""

    def __init__(self, state: str, expected: AbstractSet[str]) -> None:
        self.state = state
        self.expected = frozenset(expected)
        super().__init__(
            f"unexpected state '{state}', wanted target '{', '.join(sorted(self.expected))}'"
        )


class WaitTimeoutError(WaiterError, TimeoutError):
    """The polled resource did not reach a target status before the deadline."""

    def __init__(
        self, last_state: Optional[str], expected: AbstractSet[str], timeout: float
    ) -> None:
        self.last_state = last_state
        self.expected = frozenset(expected)
        self.timeout = timeout
        super().__init__(
            f"timeout while waiting for state to become '{', '.join(sorted(self.expected))}' "
            f"(last state: '{last_state or ''}', timeout: {timeout:g}s)"
        )


class OperationFailedError(PublishingDestinationError):
    """A lifecycle operation failed against the remote API.

    The message always names the operation, the resource identifier and the
    underlying cause so that it can be shown to a user as-is.
    """

    operation = "Operating on"

    def __init__(self, resource_id: str, cause: BaseException) -> None:
        self.resource_id = resource_id
        self.cause = cause
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        target = f" '{self.resource_id}'" if self.resource_id else ""
        return f"{self.operation} GuardDuty publishing destination{target} failed: {self.cause}"


class CreateFailedError(OperationFailedError):
    """Creation failed before GuardDuty assigned a destination id.

    ``resource_id`` holds the detector id the destination was requested for.
    """

    operation = "Creating"

    def _format_message(self) -> str:
        return (
            "Creating GuardDuty publishing destination for detector "
            f"'{self.resource_id}' failed: {self.cause}"
        )


class ReadFailedError(OperationFailedError):
    operation = "Reading"


class UpdateFailedError(OperationFailedError):
    operation = "Updating"


class DeleteFailedError(OperationFailedError):
    operation = "Deleting"


class WaitFailedError(OperationFailedError):
    """Waiting for a new destination to start publishing failed."""

    operation = "Waiting for"

    def _format_message(self) -> str:
        return (
            "Error waiting for GuardDuty PublishingDestination "
            f"'{self.resource_id}' status to be \"PUBLISHING\": {self.cause}"
        )


class SweepError(PublishingDestinationError):
    """Aggregates every error collected during a sweep."""

    def __init__(self, errors: Iterable[BaseException]) -> None:
        self.errors: List[BaseException] = list(errors)
        lines = "\n".join(f"  * {error}" for error in self.errors)
        super().__init__(f"{len(self.errors)} error(s) occurred during sweep:\n{lines}")


__all__ = [
    "CreateFailedError",
    "DeleteFailedError",
    "MalformedIdentifierError",
    "OperationFailedError",
    "PublishingDestinationError",
    "ReadFailedError",
    "ResourceNotFoundError",
    "SweepError",
    "UnexpectedStateError",
    "UpdateFailedError",
    "ValidationError",
    "WaitFailedError",
    "WaitTimeoutError",
    "WaiterError",
]
