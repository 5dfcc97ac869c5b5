"""
Configuration loader for poi-consensus
Loads YAML configuration files on top of the environment settings
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError

from .settings import settings

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Configuration loading error"""

    pass


class ConsensusConfig(BaseModel):
    """Consensus parameter configuration"""

    max_submissions_per_epoch: Optional[int] = Field(
        default_factory=lambda: settings.CONSENSUS_MAX_SUBMISSIONS_PER_EPOCH, ge=1
    )
    clip_sigma: float = Field(default_factory=lambda: settings.CONSENSUS_CLIP_SIGMA, gt=0.0)
    alignment_scale: int = Field(
        default_factory=lambda: settings.CONSENSUS_ALIGNMENT_SCALE, gt=0
    )


class StakeConfig(BaseModel):
    """Stake weighting configuration"""

    default_weight: int = Field(
        default_factory=lambda: settings.CONSENSUS_DEFAULT_STAKE_WEIGHT, ge=0
    )
    delegation_numerator: int = Field(
        default_factory=lambda: settings.STAKE_DELEGATION_NUMERATOR, ge=0
    )
    delegation_denominator: int = Field(
        default_factory=lambda: settings.STAKE_DELEGATION_DENOMINATOR, gt=0
    )


class AuthorityConfig(BaseModel):
    """Collaborator allow-lists"""

    finalizers: List[str] = Field(
        default_factory=lambda: sorted(settings.finalizer_authorities)
    )
    governors: List[str] = Field(
        default_factory=lambda: sorted(settings.governor_authorities)
    )


class APIConfig(BaseModel):
    """HTTP API configuration"""

    host: str = Field(default_factory=lambda: settings.API_HOST)
    port: int = Field(default_factory=lambda: settings.API_PORT)
    metrics_enabled: bool = Field(default_factory=lambda: settings.METRICS_ENABLED)


class PoiConfig(BaseModel):
    """Complete configuration model"""

    consensus: ConsensusConfig = Field(default_factory=ConsensusConfig)
    stake: StakeConfig = Field(default_factory=StakeConfig)
    authorities: AuthorityConfig = Field(default_factory=AuthorityConfig)
    api: APIConfig = Field(default_factory=APIConfig)


class ConfigLoader:
    """Loads and caches the YAML configuration"""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[PoiConfig] = None

    def _read_yaml(self) -> Dict[str, Any]:
        if self.config_path is None:
            return {}
        if not self.config_path.exists():
            raise ConfigError(f"Configuration file not found: {self.config_path}")
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(
                f"Configuration root must be a mapping, got {type(data).__name__}"
            )
        return data

    def load(self) -> PoiConfig:
        """Load configuration from file, falling back to environment settings"""
        data = self._read_yaml()
        try:
            self._config = PoiConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
        logger.debug(f"Configuration loaded from {self.config_path or 'environment'}")
        return self._config

    @property
    def config(self) -> PoiConfig:
        if self._config is None:
            return self.load()
        return self._config


_config_loader: Optional[ConfigLoader] = None


def load_config(config_path: Optional[Union[str, Path]] = None) -> PoiConfig:
    """Load configuration and make it the process-wide default"""
    global _config_loader
    _config_loader = ConfigLoader(config_path)
    return _config_loader.load()


def get_config() -> PoiConfig:
    """Get the process-wide configuration, loading defaults on first use"""
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader.config
