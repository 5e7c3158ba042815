"""
Service-name filtering and DNS record naming.
"""

import re

from ecs_service_discovery.errors import UsageError


def record_name(service: str, prefix: str, suffix: str, zone: str) -> str:
    """
    Build the record name for a service.

    No DNS label validation is done, invalid characters pass through.

    e.g., ('backend', 'latest-', '-service', 'testing')
        -> 'latest-backend-service.testing'
    """
    return f"{prefix}{service}{suffix}.{zone}"


class NameResolver:
    """
    Filters service names and derives their record names.

    Args:
        pattern: Regular expression searched anywhere in the service name.
            None or '' accepts every service.
        prefix: Prepended to the service name
        suffix: Appended to the service name
    """

    def __init__(
        self, pattern: str | None = None, prefix: str = "", suffix: str = ""
    ):
        self.pattern = pattern or None
        self.prefix = prefix or ""
        self.suffix = suffix or ""
        try:
            self._regex = re.compile(pattern) if pattern else None
        except re.error as e:
            raise UsageError(f"invalid filter ('{pattern}': {e})") from e

    def accept(self, service: str) -> bool:
        if self._regex is None:
            return True
        return self._regex.search(service) is not None

    def record_name(self, service: str, zone: str) -> str:
        return record_name(service, self.prefix, self.suffix, zone)
