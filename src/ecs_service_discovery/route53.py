"""
Route 53 zone resolution and change submission.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from botocore.exceptions import BotoCoreError, ClientError

from ecs_service_discovery.errors import (
    SubmissionError,
    SyncTimeoutError,
    ZoneLookupError,
    ZoneNotFoundError,
)


log = logging.getLogger(__name__)

DRY_RUN = "DRY_RUN"
PENDING = "PENDING"
INSYNC = "INSYNC"


@dataclass
class SubmissionResult:
    zone_id: str
    change_id: str | None
    status: str


def strip_id(value: str) -> str:
    """'/hostedzone/Z123' -> 'Z123', '/change/C456' -> 'C456'"""
    return value.rsplit("/", 1)[-1]


def fqdn(zone: str) -> str:
    return zone if zone.endswith(".") else zone + "."


def resolve_zone_id(route53, zone: str) -> str:
    """
    Find the id of the hosted zone named zone.

    Args:
        route53: boto3 Route 53 client
        zone: Zone name, with or without trailing dot

    Returns:
        Hosted zone id without the '/hostedzone/' prefix

    Raises:
        ZoneLookupError: listing hosted zones failed
        ZoneNotFoundError: no hosted zone has that name
    """
    wanted = fqdn(zone)
    matches = []
    try:
        for page in route53.get_paginator("list_hosted_zones").paginate():
            for hosted_zone in page.get("HostedZones", []):
                if hosted_zone.get("Name") == wanted:
                    matches.append(strip_id(hosted_zone["Id"]))
    except (BotoCoreError, ClientError) as e:
        raise ZoneLookupError(zone, detail=str(e)) from e

    if not matches:
        raise ZoneNotFoundError(zone)

    if len(matches) > 1:
        log.warning(
            f"resolve_zone_id: {len(matches)} hosted zones named {wanted}, "
            f"using {matches[0]}"
        )
    return matches[0]


def wait_for_change(
    route53,
    change_id: str,
    delay: int | None = None,
    max_attempts: int | None = None,
) -> None:
    """Block until the change is INSYNC, polling with the waiter's backoff."""
    waiter_config = {}
    if delay is not None:
        waiter_config["Delay"] = delay
    if max_attempts is not None:
        waiter_config["MaxAttempts"] = max_attempts

    kwargs: dict = {"Id": change_id}
    if waiter_config:
        kwargs["WaiterConfig"] = waiter_config

    try:
        route53.get_waiter("resource_record_sets_changed").wait(**kwargs)
    except (BotoCoreError, ClientError) as e:
        raise SyncTimeoutError(change_id, detail=str(e)) from e


def submit_change_batch(
    route53,
    zone_id: str,
    batch: dict,
    dry_run: bool = False,
    wait: bool = True,
    wait_delay: int | None = None,
    wait_max_attempts: int | None = None,
    on_submitted: Callable[[SubmissionResult], None] | None = None,
) -> SubmissionResult:
    """
    Submit a change batch and optionally wait for propagation.

    A dry run never calls change_resource_record_sets. on_submitted is called
    with the PENDING result once the batch is accepted, before any waiting.
    """
    if dry_run:
        log.info(f"submit_change_batch: dry-run for zone {zone_id}")
        return SubmissionResult(zone_id, None, DRY_RUN)

    try:
        response = route53.change_resource_record_sets(
            HostedZoneId=zone_id, ChangeBatch=batch
        )
    except (BotoCoreError, ClientError) as e:
        raise SubmissionError(zone_id, detail=str(e)) from e

    change_id = strip_id(response["ChangeInfo"]["Id"])
    log.info(
        f"submit_change_batch: {len(batch.get('Changes', []))} changes "
        f"submitted to {zone_id} as {change_id}"
    )

    pending = SubmissionResult(zone_id, change_id, PENDING)
    if on_submitted is not None:
        on_submitted(pending)

    if not wait:
        return pending

    wait_for_change(
        route53, change_id, delay=wait_delay, max_attempts=wait_max_attempts
    )
    return SubmissionResult(zone_id, change_id, INSYNC)
