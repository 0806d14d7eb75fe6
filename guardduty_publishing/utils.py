"""Shared helpers for talking to the GuardDuty API."""
from __future__ import annotations

from typing import Iterator

import boto3
from botocore.exceptions import ClientError, OperationNotPageableError

BAD_REQUEST_CODE = "BadRequestException"

DETECTOR_NOT_OWNED_MESSAGE = (
    "The request is rejected because the input detectorId is not owned by the current account."
)

_SKIPPABLE_SWEEP_CODES = frozenset(
    {
        "AccessDeniedException",
        "InvalidAction",
        "UnrecognizedClientException",
        "UnsupportedOperation",
    }
)


def safe_paginate(client: boto3.client, method_name: str, result_key: str, **kwargs) -> Iterator[dict]:
    """Iterate through paginated boto3 results while handling pagination gaps.

    Operations without a registered paginator are paged by hand by following
    ``NextToken``.
    """

    try:
        paginator = client.get_paginator(method_name)
    except OperationNotPageableError:
        method = getattr(client, method_name)
        request = dict(kwargs)
        while True:
            response = method(**request)
            for item in response.get(result_key, []):
                yield item
            token = response.get("NextToken")
            if not token:
                return
            request["NextToken"] = token

    for page in paginator.paginate(**kwargs):
        for item in page.get(result_key, []):
            yield item


def error_code(exc: BaseException) -> str:
    """Return the AWS error code from a botocore exception, if present."""

    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code", "")
    return ""


def error_message(exc: BaseException) -> str:
    """Return the AWS error message from a botocore exception, if present."""

    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Message", "")
    return ""


def is_bad_request_error(exc: BaseException) -> bool:
    """``True`` for GuardDuty's client-side ``BadRequestException``.

    Deleting a destination that no longer exists is answered with this code
    rather than a not-found error.
    """

    return error_code(exc) == BAD_REQUEST_CODE


def is_detector_not_owned_error(exc: BaseException) -> bool:
    """``True`` when GuardDuty reports the detector as not owned by the caller.

    GuardDuty does not expose a dedicated code for a missing detector; it
    answers ``BadRequestException`` with a fixed message, which is the only
    signal that the destination is gone along with its detector.
    """

    return is_bad_request_error(exc) and DETECTOR_NOT_OWNED_MESSAGE in error_message(exc)


def is_skippable_sweep_error(exc: BaseException) -> bool:
    """``True`` when a sweep should be skipped for the region instead of failing."""

    if error_code(exc) in _SKIPPABLE_SWEEP_CODES:
        return True
    message = error_message(exc).lower()
    return "not supported" in message or "not subscribed" in message


__all__ = [
    "BAD_REQUEST_CODE",
    "DETECTOR_NOT_OWNED_MESSAGE",
    "error_code",
    "error_message",
    "is_bad_request_error",
    "is_detector_not_owned_error",
    "is_skippable_sweep_error",
    "safe_paginate",
]
