"""Tests for pagination and error classification helpers."""

from __future__ import annotations

from typing import Any, Dict, List

from botocore.exceptions import ClientError, EndpointConnectionError, OperationNotPageableError

from conftest import NOT_OWNED_MESSAGE
from guardduty_publishing.utils import (
    error_code,
    is_bad_request_error,
    is_detector_not_owned_error,
    is_skippable_sweep_error,
    safe_paginate,
)


def client_error(code: str, message: str = "") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, "DescribePublishingDestination")


class UnpageableClient:
    """Client whose ``list_things`` has no paginator and pages by token."""

    def __init__(self, pages: List[Dict[str, Any]]) -> None:
        self.pages = pages
        self.calls: List[Dict[str, Any]] = []

    def get_paginator(self, name: str):
        raise OperationNotPageableError(operation_name=name)

    def list_things(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(kwargs)
        return self.pages[len(self.calls) - 1]


def test_safe_paginate_follows_next_token_without_paginator() -> None:
    client = UnpageableClient(
        [
            {"Things": [1, 2], "NextToken": "page-2"},
            {"Things": [3]},
        ]
    )

    items = list(safe_paginate(client, "list_things", "Things", DetectorId="d"))

    assert items == [1, 2, 3]
    assert client.calls == [{"DetectorId": "d"}, {"DetectorId": "d", "NextToken": "page-2"}]


def test_safe_paginate_uses_paginator(guardduty_client, stubber) -> None:
    stubber.add_response("list_detectors", {"DetectorIds": ["a"], "NextToken": "t"}, {})
    stubber.add_response("list_detectors", {"DetectorIds": ["b"]}, {"NextToken": "t"})

    assert list(safe_paginate(guardduty_client, "list_detectors", "DetectorIds")) == ["a", "b"]


def test_error_code() -> None:
    assert error_code(client_error("BadRequestException")) == "BadRequestException"
    assert error_code(EndpointConnectionError(endpoint_url="https://guardduty")) == ""


def test_bad_request_classification() -> None:
    assert is_bad_request_error(client_error("BadRequestException", "anything"))
    assert not is_bad_request_error(client_error("InternalServerErrorException"))


def test_detector_not_owned_classification() -> None:
    assert is_detector_not_owned_error(client_error("BadRequestException", NOT_OWNED_MESSAGE))
    assert not is_detector_not_owned_error(client_error("BadRequestException", "other problem"))
    assert not is_detector_not_owned_error(
        client_error("InternalServerErrorException", NOT_OWNED_MESSAGE)
    )


def test_skippable_sweep_errors() -> None:
    assert is_skippable_sweep_error(client_error("UnrecognizedClientException"))
    assert is_skippable_sweep_error(client_error("AccessDeniedException"))
    assert is_skippable_sweep_error(
        client_error("BadRequestException", "This operation is not supported in this region")
    )
    assert not is_skippable_sweep_error(client_error("InternalServerErrorException"))
