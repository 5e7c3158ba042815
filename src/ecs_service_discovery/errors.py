"""
Error taxonomy for ecs-service-discovery.

Every error carries a human-readable message which the CLI prints as
``fatal error: <message>``.
"""


class ServiceDiscoveryError(Exception):
    """Base class for all fatal conditions of a reconciliation run."""


class UsageError(ServiceDiscoveryError):
    """Bad or missing command-line options, or an invalid config file."""


class DiscoveryError(ServiceDiscoveryError):
    """
    An ECS enumeration call failed.

    Args:
        cluster: Cluster being discovered
        stage: One of 'services', 'tasks' or 'containers'
        service: Short service name, for the 'tasks' and 'containers' stages
        detail: Message of the underlying botocore error
    """

    def __init__(
        self,
        cluster: str,
        stage: str,
        service: str | None = None,
        detail: str | None = None,
    ):
        self.cluster = cluster
        self.stage = stage
        self.service = service
        self.detail = detail
        super().__init__(self._format())

    def _format(self) -> str:
        if self.stage == "services":
            msg = f"unable to list services of cluster '{self.cluster}'"
        elif self.stage == "tasks":
            msg = (
                f"unable to list tasks of service '{self.service}' "
                f"of cluster '{self.cluster}'"
            )
        else:
            msg = (
                f"unable to describe tasks of service '{self.service}' "
                f"of cluster '{self.cluster}'"
            )
        if self.detail:
            msg += f" ({self.detail})"
        return msg


class ZoneLookupError(ServiceDiscoveryError):
    """Listing hosted zones failed."""

    def __init__(self, zone: str, detail: str | None = None):
        self.zone = zone
        self.detail = detail
        msg = f"unable to list hosted zones ('{zone}')"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class ZoneNotFoundError(ServiceDiscoveryError):
    """No hosted zone has the requested name."""

    def __init__(self, zone: str):
        self.zone = zone
        super().__init__(f"zone not found ('{zone}')")


class SubmissionError(ServiceDiscoveryError):
    """Submitting the change batch failed."""

    def __init__(self, zone_id: str, detail: str | None = None):
        self.zone_id = zone_id
        self.detail = detail
        msg = f"unable to change resource record sets for zone id '{zone_id}'"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class SyncTimeoutError(ServiceDiscoveryError):
    """Waiting for the change to become INSYNC failed or timed out."""

    def __init__(self, change_id: str, detail: str | None = None):
        self.change_id = change_id
        self.detail = detail
        msg = (
            "unable to wait for resource record sets to be changed "
            f"for change info '{change_id}'"
        )
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)
