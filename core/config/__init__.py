"""
Runtime Configuration Module

Provides configuration loading and logging setup for vault tooling.
"""

from .runtime import (
    ArtifactConfig,
    DeploymentConfig,
    DiscoveryConfig,
    RuntimeConfig,
    get_default_config,
    set_default_config,
    setup_logging,
)

__all__ = [
    "ArtifactConfig",
    "DeploymentConfig",
    "DiscoveryConfig",
    "RuntimeConfig",
    "get_default_config",
    "set_default_config",
    "setup_logging",
]
