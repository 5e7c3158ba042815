"""
Shared fixtures and fake boto3 clients for ecs-service-discovery tests.

The fakes implement just the client methods the package calls: paginators,
describe_tasks, change_resource_record_sets and the Route 53 waiter.
"""

from botocore.exceptions import ClientError, WaiterError

import pytest


ARN = "arn:aws:ecs:eu-west-1:123456789012"


def service_arn(cluster: str, name: str) -> str:
    return f"{ARN}:service/{cluster}/{name}"


def task_arn(cluster: str, task_id: str) -> str:
    return f"{ARN}:task/{cluster}/{task_id}"


def container(ip: str | None = None, status: str = "RUNNING") -> dict:
    """A describe_tasks container entry with one awsvpc interface."""
    return {
        "name": "app",
        "lastStatus": status,
        "networkInterfaces": [{"privateIpv4Address": ip}] if ip else [],
    }


def client_error(
    code: str = "ClientException", operation: str = "Operation"
) -> ClientError:
    error = {"Error": {"Code": code, "Message": f"{code} raised"}}
    return ClientError(error, operation)


class FakePaginator:
    def __init__(self, client, operation: str):
        self.client = client
        self.operation = operation

    def paginate(self, **kwargs):
        return self.client._paginate(self.operation, **kwargs)


class FakeEcsClient:
    """
    Fake ECS client.

    Args:
        clusters: {cluster: {service: {task_id: [container, ...]}}}
        page_size: Items per list_* page
        missing_tasks: Task ids listed but reported as describe failures
    """

    def __init__(
        self,
        clusters: dict,
        page_size: int = 2,
        missing_tasks: set[str] | None = None,
    ):
        self.clusters = clusters
        self.page_size = page_size
        self.missing_tasks = missing_tasks or set()
        self.calls: list[tuple[str, dict]] = []
        self.fail: dict[str, Exception] = {}

    def get_paginator(self, operation: str) -> FakePaginator:
        return FakePaginator(self, operation)

    def _check(self, operation: str, kwargs: dict) -> None:
        self.calls.append((operation, kwargs))
        if operation in self.fail:
            raise self.fail[operation]

    def _paginate(self, operation: str, **kwargs):
        self._check(operation, kwargs)
        cluster = kwargs["cluster"]
        if cluster not in self.clusters:
            raise client_error("ClusterNotFoundException", operation)

        if operation == "list_services":
            key = "serviceArns"
            items = [service_arn(cluster, name) for name in self.clusters[cluster]]
        elif operation == "list_tasks":
            key = "taskArns"
            tasks = self.clusters[cluster].get(kwargs["serviceName"], {})
            items = [task_arn(cluster, task_id) for task_id in tasks]
        else:
            raise NotImplementedError(operation)

        if not items:
            yield {key: []}
        for start in range(0, len(items), self.page_size):
            yield {key: items[start : start + self.page_size]}

    def describe_tasks(self, cluster: str, tasks: list[str]) -> dict:
        self._check("describe_tasks", {"cluster": cluster, "tasks": tasks})

        containers_by_arn = {}
        for service_tasks in self.clusters[cluster].values():
            for task_id, containers in service_tasks.items():
                containers_by_arn[task_arn(cluster, task_id)] = containers

        described = []
        failures = []
        for arn in tasks:
            if arn.rsplit("/", 1)[-1] in self.missing_tasks:
                failures.append({"arn": arn, "reason": "MISSING"})
            else:
                described.append({"taskArn": arn, "containers": containers_by_arn[arn]})

        # the real API does not guarantee request order
        return {"tasks": list(reversed(described)), "failures": failures}

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]


class FakeWaiter:
    def __init__(self, client):
        self.client = client

    def wait(self, **kwargs):
        self.client._check("wait", kwargs)


class FakeRoute53Client:
    """
    Fake Route 53 client.

    Args:
        zones: {zone name with trailing dot: hosted zone id}
    """

    def __init__(self, zones: dict | None = None):
        self.zones = zones if zones is not None else {"testing.": "Z0TESTING"}
        self.calls: list[tuple[str, dict]] = []
        self.fail: dict[str, Exception] = {}
        self.change_count = 0

    def _check(self, operation: str, kwargs: dict) -> None:
        self.calls.append((operation, kwargs))
        if operation in self.fail:
            raise self.fail[operation]

    def get_paginator(self, operation: str) -> FakePaginator:
        return FakePaginator(self, operation)

    def _paginate(self, operation: str, **kwargs):
        self._check(operation, kwargs)
        zones = [
            {"Id": f"/hostedzone/{zone_id}", "Name": name}
            for name, zone_id in self.zones.items()
        ]
        # one zone per page
        for zone in zones:
            yield {"HostedZones": [zone]}

    def change_resource_record_sets(self, HostedZoneId: str, ChangeBatch: dict) -> dict:
        self._check(
            "change_resource_record_sets",
            {"HostedZoneId": HostedZoneId, "ChangeBatch": ChangeBatch},
        )
        self.change_count += 1
        return {
            "ChangeInfo": {
                "Id": f"/change/C{self.change_count:04d}",
                "Status": "PENDING",
            }
        }

    def get_waiter(self, name: str) -> FakeWaiter:
        assert name == "resource_record_sets_changed"
        return FakeWaiter(self)

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]


def waiter_error() -> WaiterError:
    return WaiterError(
        name="ResourceRecordSetsChanged",
        reason="Max attempts exceeded",
        last_response={"ChangeInfo": {"Status": "PENDING"}},
    )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def sample_clusters():
    """Cluster 'testing' with three services, one of them without running tasks."""
    return {
        "testing": {
            "frontend": {
                "t1": [container("10.0.1.10")],
                "t2": [container("10.0.1.11"), container(status="PENDING")],
            },
            "backend": {
                "t3": [
                    container("10.0.2.10"),
                    container("10.0.2.99", status="STOPPED"),
                ],
            },
            "frontend-ui": {},
        }
    }


@pytest.fixture
def ecs_client(sample_clusters):
    """Factory fixture to create fake ECS clients."""

    def _create(clusters: dict | None = None, **kwargs) -> FakeEcsClient:
        if clusters is None:
            clusters = sample_clusters
        return FakeEcsClient(clusters, **kwargs)

    return _create


@pytest.fixture
def route53_client():
    """Factory fixture to create fake Route 53 clients."""

    def _create(zones: dict | None = None) -> FakeRoute53Client:
        return FakeRoute53Client(zones)

    return _create


@pytest.fixture
def tmp_config_file(tmp_path):
    """Create a temporary config file for testing."""

    def _create(content: str):
        config_file = tmp_path / "ecs-service-discovery.yaml"
        config_file.write_text(content)
        return config_file

    return _create
