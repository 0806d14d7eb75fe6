"""Shared fixtures for the publishing destination tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List

import boto3
import pytest
from botocore.stub import Stubber


PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


from guardduty_publishing.core import PublishingDestinationResource


DETECTOR_ID = "12abc34d567e8fa901bc2d34e56789f0"
DESTINATION_ID = "a1b2c3d4e5f60718293a4b5c6d7e8f90"
RESOURCE_ID = f"{DETECTOR_ID}:{DESTINATION_ID}"
BUCKET_ARN = "arn:aws:s3:::guardduty-findings-bucket"
OTHER_BUCKET_ARN = "arn:aws:s3:::guardduty-findings-archive"
KEY_ARN = "arn:aws:kms:us-east-1:123456789012:key/1234abcd-12ab-34cd-56ef-1234567890ab"
NOT_OWNED_MESSAGE = (
    "The request is rejected because the input detectorId is not owned by the current account."
)


class FakeClock:
    """Monotonic clock whose time only moves when ``sleep`` is called."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class StubSession:
    """Stand-in for :class:`boto3.session.Session` that hands out one client."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def client(self, service_name: str, **kwargs: Any) -> Any:
        assert service_name == "guardduty"
        return self._client


def describe_response(
    status: str = "PUBLISHING",
    *,
    destination_id: str = DESTINATION_ID,
    destination_arn: str = BUCKET_ARN,
) -> Dict[str, Any]:
    return {
        "DestinationId": destination_id,
        "DestinationType": "S3",
        "Status": status,
        "PublishingFailureStartTimestamp": 0,
        "DestinationProperties": {"DestinationArn": destination_arn, "KmsKeyArn": KEY_ARN},
    }


def describe_params(destination_id: str = DESTINATION_ID) -> Dict[str, str]:
    return {"DetectorId": DETECTOR_ID, "DestinationId": destination_id}


@pytest.fixture
def guardduty_client():
    return boto3.client(
        "guardduty",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(guardduty_client):
    with Stubber(guardduty_client) as stub:
        yield stub
        stub.assert_no_pending_responses()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def resource(guardduty_client, stubber, clock) -> PublishingDestinationResource:
    return PublishingDestinationResource(
        guardduty_client, sleep=clock.sleep, clock=clock
    )


@pytest.fixture
def stub_session(guardduty_client, stubber) -> StubSession:
    return StubSession(guardduty_client)
