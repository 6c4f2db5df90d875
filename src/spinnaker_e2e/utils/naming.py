"""Random resource names for parallel-safe test namespaces."""

import os


def random_name(prefix: str, length: int = 8) -> str:
    """Return ``<prefix>-<hex>`` where the suffix has ``length`` hex characters."""
    suffix = os.urandom((length + 1) // 2).hex()[:length]
    return f"{prefix}-{suffix}"
