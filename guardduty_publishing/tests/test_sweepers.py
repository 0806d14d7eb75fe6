"""Tests for the leftover destination sweeper."""

from __future__ import annotations

import pytest

from guardduty_publishing.errors import SweepError
from guardduty_publishing.sweepers import (
    RESOURCE_NAME,
    SWEEPERS,
    SweepReport,
    register_sweeper,
    run_sweepers,
    sweep_publishing_destinations,
)


def destination(destination_id: str) -> dict:
    return {"DestinationId": destination_id, "DestinationType": "S3", "Status": "PUBLISHING"}


def test_sweeper_is_registered() -> None:
    assert SWEEPERS[RESOURCE_NAME] is sweep_publishing_destinations


def test_sweep_deletes_across_pages_and_collects_errors(stub_session, stubber) -> None:
    stubber.add_response("list_detectors", {"DetectorIds": ["det1"], "NextToken": "next"}, {})
    stubber.add_response("list_detectors", {"DetectorIds": ["det2"]}, {"NextToken": "next"})
    stubber.add_response(
        "list_publishing_destinations",
        {"Destinations": [destination("dest1"), destination("dest2")], "NextToken": "more"},
        {"DetectorId": "det1"},
    )
    stubber.add_response(
        "list_publishing_destinations",
        {"Destinations": [destination("dest3")]},
        {"DetectorId": "det1", "NextToken": "more"},
    )
    stubber.add_response(
        "delete_publishing_destination", {}, {"DetectorId": "det1", "DestinationId": "dest1"}
    )
    stubber.add_client_error(
        "delete_publishing_destination",
        service_error_code="InternalServerErrorException",
        service_message="Internal failure",
        http_status_code=500,
        expected_params={"DetectorId": "det1", "DestinationId": "dest2"},
    )
    stubber.add_response(
        "delete_publishing_destination", {}, {"DetectorId": "det1", "DestinationId": "dest3"}
    )
    stubber.add_response(
        "list_publishing_destinations", {"Destinations": []}, {"DetectorId": "det2"}
    )

    report = sweep_publishing_destinations(stub_session)

    assert report.deleted == ["det1:dest1", "det1:dest3"]
    assert len(report.errors) == 1
    assert "dest2" in str(report.errors[0])
    with pytest.raises(SweepError) as excinfo:
        report.raise_for_errors()
    assert excinfo.value.errors == report.errors


def test_sweep_skips_unsupported_region(stub_session, stubber) -> None:
    stubber.add_client_error(
        "list_detectors",
        service_error_code="UnrecognizedClientException",
        service_message="The security token included in the request is invalid.",
        http_status_code=403,
    )

    report = sweep_publishing_destinations(stub_session)

    assert report.skipped
    assert report.errors == []
    report.raise_for_errors()


def test_sweep_records_detector_listing_failure(stub_session, stubber) -> None:
    stubber.add_client_error(
        "list_detectors",
        service_error_code="InternalServerErrorException",
        service_message="Internal failure",
        http_status_code=500,
    )

    report = sweep_publishing_destinations(stub_session)

    assert not report.skipped
    assert len(report.errors) == 1
    assert "GuardDuty detectors" in str(report.errors[0])


def test_sweep_records_destination_listing_failure(stub_session, stubber) -> None:
    stubber.add_response("list_detectors", {"DetectorIds": ["det1"]}, {})
    stubber.add_client_error(
        "list_publishing_destinations",
        service_error_code="BadRequestException",
        service_message="bad detector",
        http_status_code=400,
    )

    report = sweep_publishing_destinations(stub_session)

    assert report.deleted == []
    assert "det1" in str(report.errors[0])


def test_run_sweepers_rejects_unknown_names(stub_session) -> None:
    with pytest.raises(ValueError, match="Unknown sweeper"):
        run_sweepers(stub_session, ["aws_nothing"])


def test_run_sweepers_runs_every_registered_sweeper(stub_session, stubber) -> None:
    stubber.add_response("list_detectors", {"DetectorIds": []}, {})

    report = run_sweepers(stub_session)

    assert report == SweepReport()


def test_run_sweepers_keeps_skipped_flag(stub_session, stubber) -> None:
    stubber.add_client_error(
        "list_detectors",
        service_error_code="UnrecognizedClientException",
        service_message="The security token included in the request is invalid.",
        http_status_code=403,
    )

    report = run_sweepers(stub_session)

    assert report.skipped
    assert report.deleted == []
    assert report.errors == []


def test_merge_keeps_skipped_flag() -> None:
    combined = SweepReport()

    combined.merge(SweepReport(skipped=True))
    combined.merge(SweepReport(deleted=["det:dest"]))

    assert combined.skipped
    assert combined.deleted == ["det:dest"]


def test_register_sweeper_refuses_a_second_sweeper_for_a_name() -> None:
    def other(session):
        return SweepReport()

    with pytest.raises(ValueError, match="already registered"):
        register_sweeper(RESOURCE_NAME)(other)

    assert register_sweeper(RESOURCE_NAME)(sweep_publishing_destinations) is sweep_publishing_destinations
    assert SWEEPERS[RESOURCE_NAME] is sweep_publishing_destinations
