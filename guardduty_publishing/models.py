"""Data models for GuardDuty publishing destinations."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional

from .errors import ValidationError
from .identifiers import encode_destination_id

DEFAULT_DESTINATION_TYPE = "S3"

STATUS_PENDING_VERIFICATION = "PENDING_VERIFICATION"
STATUS_PUBLISHING = "PUBLISHING"
STATUS_UNABLE_TO_PUBLISH = "UNABLE_TO_PUBLISH_FIX_DESTINATION_PROPERTY"
STATUS_STOPPED = "STOPPED"
# Not returned by the API; reported by the create waiter when a probe fails.
STATUS_FAILED = "FAILED"

IMMUTABLE_ATTRIBUTES = ("detector_id", "destination_type")

_ARN_PARTITION = re.compile(r"^aws(-[a-z]+)*$")
_ARN_SERVICE = re.compile(r"^[a-z0-9-]+$")
_ARN_REGION = re.compile(r"^([a-z]{2}(-gov)?-[a-z]+-\d{1})?$")
_ARN_ACCOUNT = re.compile(r"^(\d{12}|aws)?$")


def validate_arn(value: str) -> List[str]:
    """Return the problems found in *value* as an ARN (empty when valid)."""

    if not value:
        return ["must not be empty"]

    parts = value.split(":", 5)
    if len(parts) != 6 or parts[0] != "arn":
        return [f"'{value}' is not a valid ARN"]

    _, partition, service, region, account, resource = parts
    problems: List[str] = []
    if not _ARN_PARTITION.match(partition):
        problems.append(f"'{partition}' is not a valid partition")
    if not _ARN_SERVICE.match(service):
        problems.append(f"'{service}' is not a valid service")
    if not _ARN_REGION.match(region):
        problems.append(f"'{region}' is not a valid region")
    if not _ARN_ACCOUNT.match(account):
        problems.append(f"'{account}' is not a valid account ID")
    if not resource:
        problems.append("resource part must not be empty")
    return problems


@dataclass
class DestinationConfig:
    """Desired configuration for a publishing destination."""

    detector_id: str
    destination_arn: str
    kms_key_arn: str
    destination_type: str = DEFAULT_DESTINATION_TYPE

    def validate(self) -> None:
        """Raise :class:`ValidationError` listing every invalid attribute."""

        errors: List[str] = []
        if not self.detector_id:
            errors.append("detector_id: must not be empty")
        for name in ("destination_arn", "kms_key_arn"):
            errors.extend(f"{name}: {problem}" for problem in validate_arn(getattr(self, name)))
        if not self.destination_type:
            errors.append("destination_type: must not be empty")
        if errors:
            raise ValidationError("Invalid publishing destination: " + "; ".join(errors))

    def destination_properties(self) -> Dict[str, str]:
        return {"DestinationArn": self.destination_arn, "KmsKeyArn": self.kms_key_arn}


@dataclass
class Destination:
    """Local mirror of a remote publishing destination.

    An instance without ``destination_id`` is *empty* and stands for a
    destination that no longer exists.
    """

    detector_id: str = ""
    destination_id: str = ""
    destination_type: str = ""
    destination_arn: str = ""
    kms_key_arn: str = ""
    status: str = ""
    publishing_failure_start_timestamp: Optional[int] = None
    tags: Dict[str, str] = field(default_factory=dict)

    @property
    def id(self) -> str:
        """Composite identifier, or an empty string for an empty mirror."""

        if not self.destination_id:
            return ""
        return encode_destination_id(self.detector_id, self.destination_id)

    @property
    def exists(self) -> bool:
        return bool(self.destination_id)

    @classmethod
    def empty(cls) -> "Destination":
        return cls()

    @classmethod
    def from_response(cls, detector_id: str, response: Mapping[str, Any]) -> "Destination":
        """Build a mirror from a ``DescribePublishingDestination`` response."""

        properties = response.get("DestinationProperties", {}) or {}
        return cls(
            detector_id=detector_id,
            destination_id=response.get("DestinationId", ""),
            destination_type=response.get("DestinationType", ""),
            destination_arn=properties.get("DestinationArn", ""),
            kms_key_arn=properties.get("KmsKeyArn", ""),
            status=response.get("Status", ""),
            publishing_failure_start_timestamp=response.get("PublishingFailureStartTimestamp"),
            tags=dict(response.get("Tags", {}) or {}),
        )

    def to_config(self) -> DestinationConfig:
        return DestinationConfig(
            detector_id=self.detector_id,
            destination_arn=self.destination_arn,
            kms_key_arn=self.kms_key_arn,
            destination_type=self.destination_type or DEFAULT_DESTINATION_TYPE,
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "detector_id": self.detector_id,
            "destination_id": self.destination_id,
            "destination_type": self.destination_type,
            "destination_arn": self.destination_arn,
            "kms_key_arn": self.kms_key_arn,
            "status": self.status,
            "publishing_failure_start_timestamp": self.publishing_failure_start_timestamp,
            "tags": dict(self.tags),
        }


PlanAction = Literal["create", "update", "replace", "noop"]


@dataclass
class Plan:
    """Difference between a mirrored destination and its desired configuration."""

    action: PlanAction
    changed: List[str] = field(default_factory=list)
    forces_replacement: List[str] = field(default_factory=list)


__all__ = [
    "DEFAULT_DESTINATION_TYPE",
    "Destination",
    "DestinationConfig",
    "IMMUTABLE_ATTRIBUTES",
    "Plan",
    "PlanAction",
    "STATUS_FAILED",
    "STATUS_PENDING_VERIFICATION",
    "STATUS_PUBLISHING",
    "STATUS_STOPPED",
    "STATUS_UNABLE_TO_PUBLISH",
    "validate_arn",
]
