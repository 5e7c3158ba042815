"""
boto3 client construction.
"""

import boto3
from botocore.config import Config


def client_config(api_timeout: float | None = None) -> Config:
    """
    botocore client config: no automatic retries, optional per-call timeout.
    """
    kwargs: dict = {"retries": {"total_max_attempts": 1, "mode": "standard"}}
    if api_timeout is not None:
        kwargs["connect_timeout"] = api_timeout
        kwargs["read_timeout"] = api_timeout
    return Config(**kwargs)


def make_clients(
    region: str | None = None,
    profile: str | None = None,
    api_timeout: float | None = None,
):
    """
    Create the ECS and Route 53 clients from one session.

    Returns:
        (ecs, route53) tuple of boto3 clients
    """
    session = boto3.Session(profile_name=profile, region_name=region)
    config = client_config(api_timeout)
    ecs = session.client("ecs", config=config)
    route53 = session.client("route53", config=config)
    return ecs, route53
