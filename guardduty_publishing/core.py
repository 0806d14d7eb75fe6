"""Lifecycle operations for GuardDuty publishing destinations."""
from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from .errors import (
    CreateFailedError,
    DeleteFailedError,
    ReadFailedError,
    ResourceNotFoundError,
    UpdateFailedError,
    ValidationError,
    WaitFailedError,
    WaiterError,
)
from .identifiers import decode_destination_id, encode_destination_id
from .models import (
    IMMUTABLE_ATTRIBUTES,
    STATUS_PENDING_VERIFICATION,
    STATUS_PUBLISHING,
    Destination,
    DestinationConfig,
    Plan,
    validate_arn,
)
from .utils import is_bad_request_error, is_detector_not_owned_error
from .waiter import StateChangeWaiter

CREATE_TIMEOUT = 5 * 60.0
MIN_POLL_INTERVAL = 3.0

_REMOTE_ERRORS = (ClientError, BotoCoreError)


class PublishingDestinationResource:
    """Create, read, update and delete publishing destinations.

    Operates on the given GuardDuty client. ``sleep`` and ``clock`` drive the
    wait that follows a create.
    """

    def __init__(
        self,
        client: boto3.client,
        *,
        create_timeout: float = CREATE_TIMEOUT,
        min_poll_interval: float = MIN_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.create_timeout = create_timeout
        self.min_poll_interval = min_poll_interval
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_session(cls, session: boto3.session.Session, **kwargs: Any) -> "PublishingDestinationResource":
        return cls(session.client("guardduty"), **kwargs)

    def create(self, config: DestinationConfig) -> Destination:
        """Create a destination and block until GuardDuty starts publishing to it."""

        config.validate()
        request: Dict[str, Any] = {
            "DetectorId": config.detector_id,
            "DestinationType": config.destination_type,
            "DestinationProperties": config.destination_properties(),
        }
        logger.debug(f"Creating GuardDuty publishing destination: {request}")
        try:
            output = self.client.create_publishing_destination(**request)
        except _REMOTE_ERRORS as exc:
            raise CreateFailedError(config.detector_id, exc) from exc

        destination_id = output["DestinationId"]
        resource_id = encode_destination_id(config.detector_id, destination_id)

        waiter: StateChangeWaiter = StateChangeWaiter(
            pending={STATUS_PENDING_VERIFICATION},
            target={STATUS_PUBLISHING},
            refresh=self._status_refresher(destination_id, config.detector_id),
            timeout=self.create_timeout,
            min_timeout=self.min_poll_interval,
            sleep=self._sleep,
            clock=self._clock,
        )
        try:
            waiter.wait()
        except (WaiterError, *_REMOTE_ERRORS) as exc:
            raise WaitFailedError(resource_id, exc) from exc

        logger.info(f"Created GuardDuty publishing destination {resource_id}")
        return self.read(resource_id)

    def _status_refresher(
        self, destination_id: str, detector_id: str
    ) -> Callable[[], Tuple[Optional[dict], str]]:
        def refresh() -> Tuple[Optional[dict], str]:
            response = self.client.describe_publishing_destination(
                DetectorId=detector_id, DestinationId=destination_id
            )
            return response, response.get("Status", "")

        return refresh

    def read(self, resource_id: str) -> Destination:
        """Return the mirror for *resource_id*; empty when the detector is gone."""

        destination_id, detector_id = decode_destination_id(resource_id)

        logger.debug(f"Reading GuardDuty publishing destination: {resource_id}")
        try:
            response = self.client.describe_publishing_destination(
                DetectorId=detector_id, DestinationId=destination_id
            )
        except _REMOTE_ERRORS as exc:
            if is_detector_not_owned_error(exc):
                logger.warning(
                    f"GuardDuty publishing destination: '{resource_id}' not found, removing from state"
                )
                return Destination.empty()
            raise ReadFailedError(resource_id, exc) from exc

        return Destination.from_response(detector_id, response)

    def update(self, resource_id: str, destination_arn: str, kms_key_arn: str) -> Destination:
        """Point an existing destination at a new bucket and/or KMS key."""

        destination_id, detector_id = decode_destination_id(resource_id)

        errors: List[str] = []
        for name, value in (("destination_arn", destination_arn), ("kms_key_arn", kms_key_arn)):
            errors.extend(f"{name}: {problem}" for problem in validate_arn(value))
        if errors:
            raise ValidationError("Invalid publishing destination: " + "; ".join(errors))

        request = {
            "DestinationId": destination_id,
            "DetectorId": detector_id,
            "DestinationProperties": {
                "DestinationArn": destination_arn,
                "KmsKeyArn": kms_key_arn,
            },
        }
        logger.debug(f"Update GuardDuty publishing destination: {request}")
        try:
            self.client.update_publishing_destination(**request)
        except _REMOTE_ERRORS as exc:
            raise UpdateFailedError(resource_id, exc) from exc

        return self.read(resource_id)

    def delete(self, resource_id: str) -> None:
        """Delete a destination; one that is already gone is not an error."""

        destination_id, detector_id = decode_destination_id(resource_id)

        logger.debug(f"Delete GuardDuty publishing destination: {resource_id}")
        try:
            self.client.delete_publishing_destination(
                DestinationId=destination_id, DetectorId=detector_id
            )
        except _REMOTE_ERRORS as exc:
            if is_bad_request_error(exc):
                logger.debug(
                    f"GuardDuty publishing destination {resource_id} already deleted: {exc}"
                )
                return
            raise DeleteFailedError(resource_id, exc) from exc

    def import_destination(self, resource_id: str) -> Destination:
        """Adopt an existing destination by its composite identifier."""

        destination = self.read(resource_id)
        if not destination.exists:
            raise ResourceNotFoundError(
                f"Cannot import non-existent GuardDuty publishing destination '{resource_id}'"
            )
        return destination

    def exists(self, resource_id: str) -> bool:
        destination_id, detector_id = decode_destination_id(resource_id)
        try:
            self.client.describe_publishing_destination(
                DetectorId=detector_id, DestinationId=destination_id
            )
        except _REMOTE_ERRORS:
            return False
        return True

    @staticmethod
    def plan(current: Optional[Destination], desired: DestinationConfig) -> Plan:
        """Work out what :meth:`apply` has to do to reach *desired*."""

        if current is None or not current.exists:
            return Plan(action="create")

        existing = current.to_config()
        changed = [
            name
            for name in ("detector_id", "destination_type", "destination_arn", "kms_key_arn")
            if getattr(existing, name) != getattr(desired, name)
        ]
        forces = [name for name in changed if name in IMMUTABLE_ATTRIBUTES]
        if forces:
            return Plan(action="replace", changed=changed, forces_replacement=forces)
        if changed:
            return Plan(action="update", changed=changed)
        return Plan(action="noop")

    def apply(self, current: Optional[Destination], desired: DestinationConfig) -> Destination:
        """Reconcile *current* with *desired* and return the resulting mirror."""

        plan = self.plan(current, desired)
        logger.debug(f"Plan for GuardDuty publishing destination: {plan}")

        if plan.action == "create" or current is None:
            return self.create(desired)

        if plan.action == "replace":
            logger.info(
                f"Replacing GuardDuty publishing destination {current.id} "
                f"({', '.join(plan.forces_replacement)} cannot be updated in place)"
            )
            self.delete(current.id)
            return self.create(desired)

        if plan.action == "update":
            return self.update(current.id, desired.destination_arn, desired.kms_key_arn)

        return current


def print_destination(destination: Destination) -> None:
    """Pretty-print a destination mirror to stdout."""

    if not destination.exists:
        print("Publishing destination not found.")
        return

    rows = [
        ("ID", destination.id),
        ("Detector", destination.detector_id),
        ("Destination", destination.destination_id),
        ("Type", destination.destination_type),
        ("Destination ARN", destination.destination_arn),
        ("KMS key ARN", destination.kms_key_arn),
        ("Status", destination.status),
    ]
    if destination.publishing_failure_start_timestamp:
        rows.append(("Failing since", str(destination.publishing_failure_start_timestamp)))
    width = max(len(label) for label, _ in rows)
    for label, value in rows:
        print(f"{label:<{width}}  {value}")


__all__ = [
    "CREATE_TIMEOUT",
    "MIN_POLL_INTERVAL",
    "PublishingDestinationResource",
    "print_destination",
]
