"""
Runtime Configuration

Central configuration for ownership discovery, proof publication and
vault deployment.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Optional
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


ZERO_ROOT_HEX = "0x" + "00" * 32


@dataclass
class DiscoveryConfig:
    """Configuration for the asset-transfer history service."""
    api_key: Optional[str] = None
    network: str = "eth-mainnet"
    base_url: Optional[str] = None
    timeout: float = 30.0
    max_pages: Optional[int] = None

    @property
    def endpoint(self) -> str:
        """JSON-RPC endpoint, built from network and key unless base_url is set."""
        if self.base_url:
            return self.base_url
        return f"https://{self.network}.g.alchemy.com/v2/{self.api_key or ''}"


@dataclass
class DeploymentConfig:
    """Constructor inputs and CREATE2 settings for a vault deployment."""
    create2_factory_address: Optional[str] = None
    salt: Optional[str] = None
    merkle_root: str = ZERO_ROOT_HEX
    paused: bool = True
    token_delivery_allowed_timestamp: int = 0
    artifact_path: Optional[str] = None


@dataclass
class ArtifactConfig:
    """Where the published proof document is written."""
    output_path: str = "./proof-details.json"


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - YAML file
    - Programmatic construction
    """
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    deployment: DeploymentConfig = field(default_factory=DeploymentConfig)
    artifacts: ArtifactConfig = field(default_factory=ArtifactConfig)
    log_level: str = "INFO"
    log_file: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - ALCHEMY_API_KEY_MAINNET: discovery service API key
        - VAULT_DISCOVERY_NETWORK: discovery network slug (eth-mainnet, ...)
        - VAULT_DISCOVERY_URL: full discovery endpoint (overrides network/key)
        - CREATE2_FACTORY_ADDRESS: deployed CREATE2 factory
        - VAULT_CREATE2_SALT: 32-byte salt (0x-hex)
        - VAULT_ARTIFACT_PATH: compiled vault artifact JSON
        - VAULT_PROOFS_OUTPUT: path of the published proof document
        - VAULT_LOG_LEVEL: log level
        - VAULT_LOG_FILE: optional log file
        """
        overrides: dict[str, Any] = {}

        # Discovery
        if os.getenv("ALCHEMY_API_KEY_MAINNET"):
            overrides.setdefault("discovery", {})["api_key"] = os.getenv("ALCHEMY_API_KEY_MAINNET")
        if os.getenv("VAULT_DISCOVERY_NETWORK"):
            overrides.setdefault("discovery", {})["network"] = os.getenv("VAULT_DISCOVERY_NETWORK")
        if os.getenv("VAULT_DISCOVERY_URL"):
            overrides.setdefault("discovery", {})["base_url"] = os.getenv("VAULT_DISCOVERY_URL")

        # Deployment
        if os.getenv("CREATE2_FACTORY_ADDRESS"):
            overrides.setdefault("deployment", {})["create2_factory_address"] = (
                os.getenv("CREATE2_FACTORY_ADDRESS")
            )
        if os.getenv("VAULT_CREATE2_SALT"):
            overrides.setdefault("deployment", {})["salt"] = os.getenv("VAULT_CREATE2_SALT")
        if os.getenv("VAULT_ARTIFACT_PATH"):
            overrides.setdefault("deployment", {})["artifact_path"] = os.getenv("VAULT_ARTIFACT_PATH")

        # Artifacts
        if os.getenv("VAULT_PROOFS_OUTPUT"):
            overrides.setdefault("artifacts", {})["output_path"] = os.getenv("VAULT_PROOFS_OUTPUT")

        # Logging
        if os.getenv("VAULT_LOG_LEVEL"):
            overrides["log_level"] = os.getenv("VAULT_LOG_LEVEL")
        if os.getenv("VAULT_LOG_FILE"):
            overrides["log_file"] = os.getenv("VAULT_LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        discovery_data = data.get("discovery", {})
        deployment_data = data.get("deployment", {})
        artifacts_data = data.get("artifacts", {})

        discovery = DiscoveryConfig(**discovery_data) if discovery_data else DiscoveryConfig()
        deployment = DeploymentConfig(**deployment_data) if deployment_data else DeploymentConfig()
        artifacts = ArtifactConfig(**artifacts_data) if artifacts_data else ArtifactConfig()

        return cls(
            discovery=discovery,
            deployment=deployment,
            artifacts=artifacts,
            log_level=data.get("log_level", "INFO"),
            log_file=data.get("log_file"),
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        import copy
        new_config = copy.deepcopy(self)

        for section in ("discovery", "deployment", "artifacts"):
            if section in overrides:
                target = getattr(new_config, section)
                for key, value in overrides[section].items():
                    setattr(target, key, value)

        if "log_level" in overrides:
            new_config.log_level = overrides["log_level"]
        if "log_file" in overrides:
            new_config.log_file = overrides["log_file"]

        return new_config

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary (API key omitted)."""
        return {
            "discovery": {
                "network": self.discovery.network,
                "base_url": self.discovery.base_url,
                "timeout": self.discovery.timeout,
                "max_pages": self.discovery.max_pages,
            },
            "deployment": {
                "create2_factory_address": self.deployment.create2_factory_address,
                "salt": self.deployment.salt,
                "merkle_root": self.deployment.merkle_root,
                "paused": self.deployment.paused,
                "token_delivery_allowed_timestamp": self.deployment.token_delivery_allowed_timestamp,
                "artifact_path": self.deployment.artifact_path,
            },
            "artifacts": {
                "output_path": self.artifacts.output_path,
            },
            "log_level": self.log_level,
            "log_file": self.log_file,
            "extra": self.extra,
        }


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure root logging for vault tooling."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


# Global default configuration
_default_config: Optional[RuntimeConfig] = None


def get_default_config() -> RuntimeConfig:
    """Get the default runtime configuration."""
    global _default_config
    if _default_config is None:
        _default_config = RuntimeConfig.from_env()
    return _default_config


def set_default_config(config: RuntimeConfig) -> None:
    """Set the default runtime configuration."""
    global _default_config
    _default_config = config
