# poi_core/cli/epoch_file.py
"""
Epoch input files for the CLI.

A YAML or JSON document describing one (subnet, epoch)::

    subnet_id: 1
    epoch: 42
    stakes: {0: 1000, 1: 500}          # or stake_accounts: [...]
    submissions:
      - validator_uid: 0
        weights: [{miner_uid: 7, weight: 5000}]
"""
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from poi_core.config.config_loader import ConfigError, StakeConfig
from poi_core.consensus.stake import (
    DelegatedStakeProvider,
    FlatStakeProvider,
    StakeWeightProvider,
    StaticStakeProvider,
)
from poi_core.core.datatypes import StakeAccount
from poi_core.core.serialization import loads


class WeightEntryInput(BaseModel):
    miner_uid: int = Field(ge=0)
    weight: int = Field(ge=0)


class SubmissionInput(BaseModel):
    validator_uid: int = Field(ge=0)
    weights: List[WeightEntryInput] = Field(default_factory=list)


class StakeAccountInput(BaseModel):
    validator_uid: int = Field(ge=0)
    amount: int = Field(default=0, ge=0)
    delegated_amount: int = Field(default=0, ge=0)


class EpochFile(BaseModel):
    subnet_id: int = Field(ge=0)
    epoch: int = Field(ge=0)
    stakes: Optional[Dict[int, int]] = None
    stake_accounts: Optional[List[StakeAccountInput]] = None
    submissions: List[SubmissionInput] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_single_stake_source(self):
        if self.stakes is not None and self.stake_accounts is not None:
            raise ValueError("Give either 'stakes' or 'stake_accounts', not both")
        return self

    def stake_provider(self, stake: Optional[StakeConfig] = None) -> StakeWeightProvider:
        """Pick the provider for this file; ``stake`` supplies the configured ratio and flat weight."""
        stake = stake or StakeConfig()
        if self.stakes is not None:
            return StaticStakeProvider(self.stakes)
        if self.stake_accounts is not None:
            return DelegatedStakeProvider(
                (StakeAccount(**account.model_dump()) for account in self.stake_accounts),
                numerator=stake.delegation_numerator,
                denominator=stake.delegation_denominator,
            )
        return FlatStakeProvider(stake.default_weight)


def load_epoch_file(path: Union[str, Path]) -> EpochFile:
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ConfigError(f"Cannot read epoch file {path}: {e}") from e
    try:
        if path.suffix.lower() == ".json":
            data = loads(raw)
        else:
            data = yaml.safe_load(raw)
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot parse epoch file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Epoch file {path} must contain a mapping")
    try:
        return EpochFile(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid epoch file {path}: {e}") from e
