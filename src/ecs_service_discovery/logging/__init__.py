"""
Logging setup for ecs-service-discovery.

A logging config file is a YAML ``logging.config.dictConfig`` mapping; the
filter can be referenced in it:

    filters:
      botocore_noise:
        (): ecs_service_discovery.logging.SuppressBotocoreNoiseFilter
"""

import logging
import logging.config

import yaml

from ecs_service_discovery.errors import UsageError
from ecs_service_discovery.logging.filters import SuppressBotocoreNoiseFilter

__all__ = ["SuppressBotocoreNoiseFilter", "configure_logging"]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(
    logging_config: str | None = None, debug: bool = False, quiet: bool = True
) -> None:
    """
    Configure logging from a YAML file, or by verbosity.

    Args:
        logging_config: Path to a YAML dictConfig file; takes precedence
        debug: DEBUG level
        quiet: WARNING level (INFO otherwise)
    """
    if logging_config:
        try:
            with open(logging_config, "r") as f:
                logging.config.dictConfig(yaml.safe_load(f))
        except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
            raise UsageError(f"invalid logging config '{logging_config}' ({e})") from e
        return

    if debug:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(SuppressBotocoreNoiseFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)
