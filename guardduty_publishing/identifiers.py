"""Composite identifiers for GuardDuty publishing destinations."""
from __future__ import annotations

from typing import Tuple

from .errors import MalformedIdentifierError

ID_SEPARATOR = ":"


def encode_destination_id(detector_id: str, destination_id: str) -> str:
    """Return the ``<detector_id>:<destination_id>`` identifier."""

    return f"{detector_id}{ID_SEPARATOR}{destination_id}"


def decode_destination_id(resource_id: str) -> Tuple[str, str]:
    """Split *resource_id* into ``(destination_id, detector_id)``.

    Note the order: the destination comes first even though the detector
    leads in the encoded string.
    """

    parts = resource_id.split(ID_SEPARATOR)
    if len(parts) != 2:
        raise MalformedIdentifierError(resource_id)
    detector_id, destination_id = parts
    return destination_id, detector_id


__all__ = ["ID_SEPARATOR", "decode_destination_id", "encode_destination_id"]
