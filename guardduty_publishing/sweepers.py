"""Cleanup of publishing destinations left behind by failed test runs."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from .errors import SweepError
from .identifiers import encode_destination_id
from .utils import is_skippable_sweep_error, safe_paginate

RESOURCE_NAME = "aws_guardduty_publishing_destination"


@dataclass
class SweepReport:
    """Outcome of a sweep: what was deleted and what went wrong."""

    deleted: List[str] = field(default_factory=list)
    errors: List[BaseException] = field(default_factory=list)
    skipped: bool = False

    def merge(self, other: "SweepReport") -> None:
        self.deleted.extend(other.deleted)
        self.errors.extend(other.errors)
        self.skipped = self.skipped or other.skipped

    def raise_for_errors(self) -> None:
        if self.errors:
            raise SweepError(self.errors)


Sweeper = Callable[[boto3.session.Session], SweepReport]

_SWEEPERS: Dict[str, Sweeper] = {}
SWEEPERS: Mapping[str, Sweeper] = MappingProxyType(_SWEEPERS)


def register_sweeper(name: str) -> Callable[[Sweeper], Sweeper]:
    """Return a decorator that registers the wrapped sweeper under *name*."""

    def decorator(func: Sweeper) -> Sweeper:
        if _SWEEPERS.get(name, func) is not func:
            raise ValueError(f"Sweeper '{name}' is already registered")
        _SWEEPERS[name] = func
        return func

    return decorator


@register_sweeper(RESOURCE_NAME)
def sweep_publishing_destinations(session: boto3.session.Session) -> SweepReport:
    """Delete every publishing destination of every detector in the session's region."""

    report = SweepReport()
    guardduty = session.client("guardduty")
    region = guardduty.meta.region_name

    try:
        detector_ids = list(safe_paginate(guardduty, "list_detectors", "DetectorIds"))
    except (ClientError, BotoCoreError) as exc:
        if is_skippable_sweep_error(exc):
            logger.warning(f"Skipping GuardDuty Publish Destination sweep for {region}: {exc}")
            report.skipped = True
            return report
        error = RuntimeError(f"Error receiving GuardDuty detectors for publish sweep: {exc}")
        logger.error(str(error))
        report.errors.append(error)
        return report

    for detector_id in detector_ids:
        report.merge(_sweep_detector(guardduty, detector_id))

    return report


def _sweep_detector(guardduty: boto3.client, detector_id: str) -> SweepReport:
    report = SweepReport()
    try:
        destinations = list(
            safe_paginate(
                guardduty, "list_publishing_destinations", "Destinations", DetectorId=detector_id
            )
        )
    except (ClientError, BotoCoreError) as exc:
        error = RuntimeError(
            f"error listing GuardDuty Publish Destinations for detector ({detector_id}): {exc}"
        )
        logger.error(str(error))
        report.errors.append(error)
        return report

    for destination in destinations:
        destination_id = destination["DestinationId"]
        logger.info(f"Deleting GuardDuty Publish Destination: {destination_id}")
        try:
            guardduty.delete_publishing_destination(
                DetectorId=detector_id, DestinationId=destination_id
            )
        except (ClientError, BotoCoreError) as exc:
            error = RuntimeError(
                f"error deleting GuardDuty Publish Destination ({destination_id}): {exc}"
            )
            logger.error(str(error))
            report.errors.append(error)
            continue
        report.deleted.append(encode_destination_id(detector_id, destination_id))

    return report


def run_sweepers(
    session: boto3.session.Session, names: Optional[Iterable[str]] = None
) -> SweepReport:
    """Run the named sweepers (all of them by default) and merge their reports."""

    selected = list(names) if names else list(SWEEPERS)
    unknown = sorted(name for name in selected if name not in SWEEPERS)
    if unknown:
        valid = ", ".join(sorted(SWEEPERS))
        raise ValueError(f"Unknown sweeper(s): {', '.join(unknown)}. Valid sweepers: {valid}")

    combined = SweepReport()
    for name in dict.fromkeys(selected):
        combined.merge(SWEEPERS[name](session))
    return combined


__all__ = [
    "RESOURCE_NAME",
    "SWEEPERS",
    "SweepReport",
    "Sweeper",
    "register_sweeper",
    "run_sweepers",
    "sweep_publishing_destinations",
]
