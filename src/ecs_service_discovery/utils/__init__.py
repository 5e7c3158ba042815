"""
Utility functions for ecs-service-discovery.
"""

from ecs_service_discovery.utils.config import (
    load_config,
    get_missing_env_vars,
    format_missing_credentials_error,
    is_credentials_error,
)

__all__ = [
    "load_config",
    "get_missing_env_vars",
    "format_missing_credentials_error",
    "is_credentials_error",
]
