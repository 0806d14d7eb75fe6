"""Manage Amazon GuardDuty publishing destinations."""

from __future__ import annotations

from .core import PublishingDestinationResource, print_destination
from .errors import (
    CreateFailedError,
    DeleteFailedError,
    MalformedIdentifierError,
    PublishingDestinationError,
    ReadFailedError,
    UpdateFailedError,
    WaitFailedError,
)
from .identifiers import decode_destination_id, encode_destination_id
from .models import Destination, DestinationConfig, Plan
from .sweepers import run_sweepers, sweep_publishing_destinations
from .waiter import StateChangeWaiter, wait_for_state

__all__ = [
    "CreateFailedError",
    "DeleteFailedError",
    "Destination",
    "DestinationConfig",
    "MalformedIdentifierError",
    "Plan",
    "PublishingDestinationError",
    "PublishingDestinationResource",
    "ReadFailedError",
    "StateChangeWaiter",
    "UpdateFailedError",
    "WaitFailedError",
    "decode_destination_id",
    "encode_destination_id",
    "print_destination",
    "run_sweepers",
    "sweep_publishing_destinations",
    "wait_for_state",
]
