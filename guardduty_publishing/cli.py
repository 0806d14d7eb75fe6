"""Command line interface for managing GuardDuty publishing destinations."""
from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError

from .core import CREATE_TIMEOUT, PublishingDestinationResource, print_destination
from .errors import PublishingDestinationError
from .logging import configure_logging
from .models import DEFAULT_DESTINATION_TYPE, Destination, DestinationConfig
from .sweepers import SWEEPERS, run_sweepers


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Return parsed command line arguments."""

    parser = argparse.ArgumentParser(description="Manage GuardDuty publishing destinations.")
    parser.add_argument("--profile", help="AWS CLI profile to use", default=None)
    parser.add_argument("--region", help="AWS region of the detector", default=None)
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"],
        help="Verbosity of log output written to stderr",
    )
    parser.add_argument("--json", action="store_true", help="Print the destination as JSON")

    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create", help="Create a publishing destination")
    create.add_argument("--detector-id", required=True)
    create.add_argument("--destination-arn", required=True, help="ARN of the S3 bucket")
    create.add_argument("--kms-key-arn", required=True, help="ARN of the KMS key used for encryption")
    create.add_argument("--destination-type", default=DEFAULT_DESTINATION_TYPE)
    create.add_argument(
        "--timeout",
        type=float,
        default=CREATE_TIMEOUT,
        help="Seconds to wait for the destination to start publishing",
    )

    for name, text in (
        ("read", "Show a publishing destination"),
        ("delete", "Delete a publishing destination"),
        ("import", "Adopt an existing publishing destination"),
    ):
        sub = commands.add_parser(name, help=text)
        sub.add_argument("id", help="<detector_id>:<destination_id>")

    update = commands.add_parser("update", help="Change the bucket or key of a destination")
    update.add_argument("id", help="<detector_id>:<destination_id>")
    update.add_argument("--destination-arn", required=True)
    update.add_argument("--kms-key-arn", required=True)

    sweep = commands.add_parser("sweep", help="Delete every publishing destination in the region")
    sweep.add_argument(
        "--sweeper",
        dest="sweepers",
        action="append",
        choices=sorted(SWEEPERS),
        default=None,
        help="Limit the sweep to the given resource types",
    )

    return parser.parse_args(argv)


def _emit(destination: Destination, as_json: bool) -> None:
    if as_json:
        print(json.dumps(destination.as_dict(), indent=2, default=str))
    else:
        print_destination(destination)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point used by ``python -m guardduty_publishing``."""

    args = parse_args(argv)
    configure_logging(args.log_level)
    session = boto3.Session(profile_name=args.profile, region_name=args.region)

    if args.command == "sweep":
        try:
            report = run_sweepers(session, args.sweepers)
        except (ValueError, BotoCoreError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        for resource_id in report.deleted:
            print(f"Deleted {resource_id}")
        if report.skipped:
            print("Sweep skipped for this region.")
        if report.errors:
            for error in report.errors:
                print(f"Error: {error}", file=sys.stderr)
            return 1
        return 0

    kwargs = {"create_timeout": args.timeout} if args.command == "create" else {}

    try:
        resource = PublishingDestinationResource.from_session(session, **kwargs)
        if args.command == "create":
            destination = resource.create(
                DestinationConfig(
                    detector_id=args.detector_id,
                    destination_arn=args.destination_arn,
                    kms_key_arn=args.kms_key_arn,
                    destination_type=args.destination_type,
                )
            )
        elif args.command == "read":
            destination = resource.read(args.id)
        elif args.command == "import":
            destination = resource.import_destination(args.id)
        elif args.command == "update":
            destination = resource.update(args.id, args.destination_arn, args.kms_key_arn)
        else:
            resource.delete(args.id)
            print(f"Deleted {args.id}")
            return 0
    except (PublishingDestinationError, BotoCoreError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    _emit(destination, args.json)
    return 0


__all__ = ["main", "parse_args"]
