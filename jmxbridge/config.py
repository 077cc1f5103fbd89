from __future__ import annotations

import os
from typing import Literal, Optional

import yaml
from pydantic import BaseModel


class HttpConfig(BaseModel):
    """Configuration for the HTTP transport."""

    url: str = "http://localhost:8778/jolokia"
    user: Optional[str] = None
    password: Optional[str] = None
    timeout: float = 10.0
    max_retries: int = 0


class TransportConfig(BaseModel):
    """Transport configuration settings."""

    backend: Literal["inmemory", "http"] = "inmemory"
    http: HttpConfig = HttpConfig()


class BridgeConfig(BaseModel):
    """Top-level configuration model."""

    transport: TransportConfig = TransportConfig()


def load_config(path: Optional[str] = None) -> BridgeConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to JMXBRIDGE_CONFIG env
            variable or 'config.yaml' in the current directory.
    """

    config_path = path or os.getenv("JMXBRIDGE_CONFIG", "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = BridgeConfig(**data)
    else:
        config = BridgeConfig()

    env_url = os.getenv("JMXBRIDGE_URL")
    if env_url:
        config.transport.http.url = env_url
    return config
