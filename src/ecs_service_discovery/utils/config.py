"""
Configuration utilities for ecs-service-discovery.

Loads option defaults from a YAML file and formats helpful error messages
when AWS credentials are missing.
"""

import os
from pathlib import Path

import yaml

from ecs_service_discovery.errors import UsageError


DEFAULT_CONFIG_FILE = "ecs-service-discovery.yaml"

# key -> accepted types
CONFIG_KEYS: dict[str, tuple[type, ...]] = {
    "dry_run": (bool,),
    "filter": (str,),
    "prefix": (str,),
    "suffix": (str,),
    "ttl": (int,),
    "wait": (bool,),
    "zone": (str,),
    "dedupe": (bool,),
    "fail_fast": (bool,),
    "jobs": (int,),
    "region": (str,),
    "profile": (str,),
    "api_timeout": (int, float),
    "wait_delay": (int,),
    "wait_max_attempts": (int,),
}

CREDENTIAL_ENV_VARS = ["AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY"]
REGION_ENV_VARS = ["AWS_REGION", "AWS_DEFAULT_REGION"]


def load_config(config_path: str) -> dict:
    """
    Load option defaults from a YAML config file.

    Keys use the long option names with dashes replaced by underscores,
    e.g. ``fail_fast: true`` or ``wait_max_attempts: 20``.

    Args:
        config_path: Path to the YAML file

    Returns:
        dict of validated options; empty if the file does not exist or is empty

    Raises:
        UsageError: unparsable YAML, unknown keys or values of the wrong type
    """
    config_file = Path(config_path)
    if not config_file.exists():
        return {}

    try:
        with open(config_file, "r") as f:
            cfg = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise UsageError(f"invalid config file '{config_path}' ({e})") from e

    if not cfg:
        return {}

    if not isinstance(cfg, dict):
        raise UsageError(f"invalid config file '{config_path}' (not a mapping)")

    options = {}
    for key, value in cfg.items():
        normalized = str(key).replace("-", "_")
        if normalized not in CONFIG_KEYS:
            raise UsageError(f"unknown option '{key}' in config file '{config_path}'")

        expected = CONFIG_KEYS[normalized]
        # bool is an int subclass, don't accept it for numeric options
        if not isinstance(value, expected) or (
            isinstance(value, bool) and bool not in expected
        ):
            raise UsageError(
                f"invalid value for '{key}' in config file '{config_path}'"
            )
        options[normalized] = value

    return options


def get_missing_env_vars(profile: str | None = None) -> list[str]:
    """
    Get AWS environment variables that are not set.

    When a profile is used (argument or AWS_PROFILE), credentials come from
    the shared config files and only the region variables are checked.

    Returns:
        list of missing environment variable names
    """
    missing = []
    if not (profile or os.environ.get("AWS_PROFILE")):
        missing.extend(var for var in CREDENTIAL_ENV_VARS if not os.environ.get(var))

    if not any(os.environ.get(var) for var in REGION_ENV_VARS):
        missing.append(REGION_ENV_VARS[0])

    return missing


def format_missing_credentials_error(profile: str | None = None) -> str:
    """
    Format a helpful error message for missing AWS credentials.

    Args:
        profile: AWS profile in use, if any

    Returns:
        Formatted error message string
    """
    missing = get_missing_env_vars(profile)

    if not missing:
        # Couldn't determine missing vars, return generic message
        return "Missing or invalid AWS credentials. Check your AWS profile or session."

    lines = ["Missing AWS configuration:"]
    for env_var in missing:
        lines.append(f"  - {env_var}")

    lines.append("")
    lines.append("Set these environment variables or use --profile")

    return "\n".join(lines)


def is_credentials_error(message: str) -> bool:
    """
    Check if an error message indicates a credentials/authentication error.

    Args:
        message: Error message, usually from a botocore exception

    Returns:
        True if the error appears to be credentials-related
    """
    indicators = [
        "unable to locate credentials",
        "you must specify a region",
        "security token",
        "unrecognizedclient",
        "expiredtoken",
        "invalidclienttokenid",
        "signaturedoesnotmatch",
        "credentials",
    ]
    message_lower = message.lower()
    return any(indicator in message_lower for indicator in indicators)
