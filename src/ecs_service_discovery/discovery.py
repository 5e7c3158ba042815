"""
ECS cluster discovery.

Walks cluster -> service -> task -> container and collects the private IPv4
addresses of running containers, in discovery order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable

from botocore.exceptions import BotoCoreError, ClientError

from ecs_service_discovery.errors import DiscoveryError


log = logging.getLogger(__name__)

# describe_tasks accepts at most 100 task ARNs per call
DESCRIBE_TASKS_CHUNK = 100


def service_name(arn: str) -> str:
    """Short name of a service (or task id) from its ARN."""
    return arn.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class Service:
    name: str
    arn: str

    @classmethod
    def from_arn(cls, arn: str) -> "Service":
        return cls(name=service_name(arn), arn=arn)


@dataclass
class DiscoveredTask:
    arn: str
    addresses: list[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return service_name(self.arn)


@dataclass
class DiscoveredService:
    service: Service
    tasks: list[DiscoveredTask] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.service.name

    @property
    def addresses(self) -> list[str]:
        """All task addresses concatenated, duplicates kept."""
        return [ip for task in self.tasks for ip in task.addresses]


def list_services(ecs, cluster: str) -> list[Service]:
    services = []
    try:
        for page in ecs.get_paginator("list_services").paginate(cluster=cluster):
            for arn in page.get("serviceArns", []):
                services.append(Service.from_arn(arn))
    except (BotoCoreError, ClientError) as e:
        raise DiscoveryError(cluster, "services", detail=str(e)) from e

    log.debug(f"list_services: {cluster}: {len(services)} services")
    return services


def list_tasks(ecs, cluster: str, service: str) -> list[str]:
    task_arns: list[str] = []
    try:
        paginator = ecs.get_paginator("list_tasks")
        for page in paginator.paginate(cluster=cluster, serviceName=service):
            task_arns.extend(page.get("taskArns", []))
    except (BotoCoreError, ClientError) as e:
        raise DiscoveryError(cluster, "tasks", service=service, detail=str(e)) from e

    log.debug(f"list_tasks: {cluster}/{service}: {len(task_arns)} tasks")
    return task_arns


def running_addresses(task: dict) -> list[str]:
    """Private IPv4 addresses of the RUNNING containers of a described task."""
    addresses = []
    for container in task.get("containers", []):
        if container.get("lastStatus") != "RUNNING":
            continue
        for interface in container.get("networkInterfaces", []):
            ip = interface.get("privateIpv4Address")
            if ip:
                addresses.append(ip)
    return addresses


def describe_task_addresses(
    ecs, cluster: str, task_arns: list[str], service: str | None = None
) -> list[DiscoveredTask]:
    """
    Describe tasks and collect their running container addresses.

    The result follows the order of task_arns regardless of the order the
    API returns. Tasks reported as failures (e.g., stopped since they were
    listed) yield no addresses.
    """
    described: dict[str, list[str]] = {}

    for start in range(0, len(task_arns), DESCRIBE_TASKS_CHUNK):
        chunk = task_arns[start : start + DESCRIBE_TASKS_CHUNK]
        try:
            response = ecs.describe_tasks(cluster=cluster, tasks=chunk)
        except (BotoCoreError, ClientError) as e:
            raise DiscoveryError(
                cluster, "containers", service=service, detail=str(e)
            ) from e

        for task in response.get("tasks", []):
            described[task.get("taskArn", "")] = running_addresses(task)

        for failure in response.get("failures", []):
            log.warning(
                f"describe_tasks: {cluster}: {failure.get('arn')} "
                f"({failure.get('reason', 'unknown reason')})"
            )

    return [DiscoveredTask(arn, described.get(arn, [])) for arn in task_arns]


def discover_service(ecs, cluster: str, service: Service) -> DiscoveredService:
    task_arns = list_tasks(ecs, cluster, service.name)
    tasks = describe_task_addresses(ecs, cluster, task_arns, service=service.name)
    return DiscoveredService(service, tasks)


def discover(
    ecs,
    cluster: str,
    accept: Callable[[str], bool] | None = None,
    jobs: int = 1,
) -> list[DiscoveredService]:
    """
    Discover the accepted services of a cluster and their addresses.

    Args:
        ecs: boto3 ECS client
        cluster: Cluster name or ARN
        accept: Service-name filter; rejected services are not queried further
        jobs: Number of services discovered in parallel

    Returns:
        list of DiscoveredService in service list order
    """
    services = list_services(ecs, cluster)
    if accept is not None:
        services = [s for s in services if accept(s.name)]

    if jobs <= 1 or len(services) <= 1:
        return [discover_service(ecs, cluster, s) for s in services]

    # map() yields results in submission order
    with ThreadPoolExecutor(max_workers=jobs) as pool:
        return list(pool.map(lambda s: discover_service(ecs, cluster, s), services))
