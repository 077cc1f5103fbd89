"""Transport factory and initialization."""

from __future__ import annotations

import os
from typing import Optional

from ..config import BridgeConfig, load_config
from .base import BaseTransport
from .http import HttpTransport
from .inmemory import InMemoryTransport


def get_transport(
    backend: Optional[str] = None, config: Optional[BridgeConfig] = None
) -> BaseTransport:
    """Factory function to get the configured transport."""

    config = config or load_config()
    backend = (
        backend
        or os.getenv("JMXBRIDGE_TRANSPORT")
        or config.transport.backend
    ).lower()

    if backend == "inmemory":
        return InMemoryTransport()
    elif backend == "http":
        http_conf = config.transport.http
        return HttpTransport(
            url=http_conf.url,
            user=http_conf.user,
            password=http_conf.password,
            timeout=http_conf.timeout,
            max_retries=http_conf.max_retries,
        )
    else:
        raise ValueError(f"Unsupported transport backend: {backend}")


__all__ = ["BaseTransport", "HttpTransport", "InMemoryTransport", "get_transport"]
