"""
Logging filters for suppressing noisy messages from botocore.
"""

import logging


class SuppressBotocoreNoiseFilter(logging.Filter):
    """
    Drop chatty INFO messages from botocore/boto3 credential resolution.

    Suppresses:
    - 'Found credentials in environment variables.' and similar
    - 'Found endpoint for ... via: ...' endpoint resolution messages
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno > logging.INFO:
            return True

        try:
            msg = record.getMessage().lower()
        except Exception:
            return True

        if msg.startswith("found credentials"):
            return False

        if "found endpoint for" in msg and "via:" in msg:
            return False

        return True
