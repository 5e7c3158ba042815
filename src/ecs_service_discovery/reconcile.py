"""
Per-cluster reconciliation of ECS services against a Route 53 zone.

Progress lines go to ``out`` (stdout by default), fatal errors to stderr.
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import TextIO

from ecs_service_discovery.changes import (
    DEFAULT_TTL,
    build_change_batch,
    desired_records,
    format_change_batch,
    summarize_change_batch,
)
from ecs_service_discovery.discovery import DiscoveredService, discover
from ecs_service_discovery.errors import ServiceDiscoveryError
from ecs_service_discovery.naming import NameResolver
from ecs_service_discovery.route53 import (
    SubmissionResult,
    resolve_zone_id,
    submit_change_batch,
)
from ecs_service_discovery.utils.config import (
    format_missing_credentials_error,
    is_credentials_error,
)


log = logging.getLogger(__name__)


@dataclass
class ReconcileOptions:
    dry_run: bool = False
    filter: str | None = None
    prefix: str = ""
    suffix: str = ""
    ttl: int = DEFAULT_TTL
    wait: bool = True
    zone: str | None = None
    dedupe: bool = False
    fail_fast: bool = False
    jobs: int = 1
    wait_delay: int | None = None
    wait_max_attempts: int | None = None
    profile: str | None = None

    def zone_for(self, cluster: str) -> str:
        """Target zone; the cluster name unless a zone was given."""
        return self.zone or cluster


@dataclass
class ClusterResult:
    cluster: str
    zone: str
    services: list[DiscoveredService] = field(default_factory=list)
    batch: dict | None = None
    zone_id: str | None = None
    submission: SubmissionResult | None = None
    error: ServiceDiscoveryError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def changes(self) -> int:
        return len(self.batch["Changes"]) if self.batch else 0

    @property
    def status(self) -> str:
        if self.error is not None:
            return "failed"
        if self.batch is None:
            return "no changes"
        if self.submission is None:
            return "not submitted"
        return {
            "DRY_RUN": "dry-run",
            "PENDING": "pending",
            "INSYNC": "in sync",
        }.get(self.submission.status, self.submission.status)


def print_discovery(services: list[DiscoveredService], out: TextIO) -> None:
    for discovered in services:
        print(f"    service: {discovered.name}", file=out)
        for task in discovered.tasks:
            print(f"        task: {task.id}", file=out)
            for ip in task.addresses:
                print(f"            ip: {ip}", file=out)


def reconcile_cluster(
    cluster: str,
    ecs,
    route53,
    options: ReconcileOptions,
    resolver: NameResolver | None = None,
    out: TextIO | None = None,
    result: ClusterResult | None = None,
) -> ClusterResult:
    """
    Discover one cluster and upsert its service records.

    Raises any ServiceDiscoveryError; the partially filled ClusterResult
    passed in as result keeps what was done before the failure.
    """
    out = out or sys.stdout
    resolver = resolver or NameResolver(options.filter, options.prefix, options.suffix)
    zone = options.zone_for(cluster)
    if result is None:
        result = ClusterResult(cluster=cluster, zone=zone)

    print(f"\ncluster: {cluster}", file=out)

    result.services = discover(ecs, cluster, accept=resolver.accept, jobs=options.jobs)
    print_discovery(result.services, out)

    records = desired_records(
        result.services, resolver, zone, ttl=options.ttl, dedupe=options.dedupe
    )
    result.batch = build_change_batch(records, default_ttl=options.ttl)

    if result.batch is None:
        print("no changes required.", file=out)
        return result

    print(f"\nchange batch:\n\n{format_change_batch(result.batch)}\n", file=out)

    result.zone_id = resolve_zone_id(route53, zone)
    print(f"zone id: {result.zone_id}", file=out)

    if options.dry_run:
        result.submission = submit_change_batch(
            route53, result.zone_id, result.batch, dry_run=True
        )
        print(f"\n{summarize_change_batch(result.batch)}\n", file=out)
        print("dry-run.", file=out)
        return result

    print("sending change batch...", file=out)

    def submitted(pending: SubmissionResult) -> None:
        result.submission = pending
        print(f"change info: {pending.change_id}", file=out)
        if options.wait:
            print("waiting for the change batch to be synced...", file=out)

    result.submission = submit_change_batch(
        route53,
        result.zone_id,
        result.batch,
        wait=options.wait,
        wait_delay=options.wait_delay,
        wait_max_attempts=options.wait_max_attempts,
        on_submitted=submitted,
    )
    if options.wait:
        print("done.", file=out)

    return result


def report_error(
    error: ServiceDiscoveryError,
    err: TextIO | None = None,
    profile: str | None = None,
) -> None:
    err = err or sys.stderr
    print(f"fatal error: {error}", file=err)
    if is_credentials_error(str(error)):
        print(format_missing_credentials_error(profile), file=err)


def reconcile(
    clusters: list[str],
    ecs,
    route53,
    options: ReconcileOptions,
    resolver: NameResolver | None = None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> list[ClusterResult]:
    """
    Reconcile clusters in order.

    A failing cluster is reported and the next one is processed, unless
    options.fail_fast is set.
    """
    out = out or sys.stdout
    resolver = resolver or NameResolver(options.filter, options.prefix, options.suffix)
    results = []

    print("starting service discovery...", file=out)

    for cluster in clusters:
        result = ClusterResult(cluster=cluster, zone=options.zone_for(cluster))
        results.append(result)
        try:
            reconcile_cluster(
                cluster,
                ecs,
                route53,
                options,
                resolver=resolver,
                out=out,
                result=result,
            )
        except ServiceDiscoveryError as e:
            log.debug(f"reconcile: {cluster} failed", exc_info=True)
            result.error = e
            report_error(e, err, profile=options.profile)
            if options.fail_fast:
                break

    print("\nservice discovery completed.", file=out)
    return results
