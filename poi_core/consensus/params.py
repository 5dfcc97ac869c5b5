"""
Tunable consensus parameters and partial updates to them.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config.config_loader import ConsensusConfig
from ..config.settings import settings


class ConsensusParams(BaseModel):
    """Parameters used by the ledger, aggregator and trust scorer."""

    model_config = ConfigDict(frozen=True)

    max_submissions_per_epoch: Optional[int] = Field(default=100, ge=1)
    clip_sigma: float = Field(default=2.0, gt=0.0)
    alignment_scale: int = Field(default=10_000, gt=0)

    @classmethod
    def from_settings(cls) -> "ConsensusParams":
        return cls(
            max_submissions_per_epoch=settings.CONSENSUS_MAX_SUBMISSIONS_PER_EPOCH,
            clip_sigma=settings.CONSENSUS_CLIP_SIGMA,
            alignment_scale=settings.CONSENSUS_ALIGNMENT_SCALE,
        )

    @classmethod
    def from_config(cls, config: ConsensusConfig) -> "ConsensusParams":
        return cls(**config.model_dump())


class ConsensusParamsUpdate(BaseModel):
    """
    Partial update of ConsensusParams.

    Only fields the caller explicitly set are applied; everything else keeps
    its current value. Explicitly sending ``max_submissions_per_epoch: null``
    removes the cap.
    """

    model_config = ConfigDict(extra="forbid")

    max_submissions_per_epoch: Optional[int] = Field(default=None, ge=1)
    clip_sigma: Optional[float] = Field(default=None, gt=0.0)
    alignment_scale: Optional[int] = Field(default=None, gt=0)

    def changes(self) -> dict:
        patch = self.model_dump(exclude_unset=True)
        # null only has a meaning for the optional cap
        return {
            name: value
            for name, value in patch.items()
            if value is not None or name == "max_submissions_per_epoch"
        }

    def apply(self, params: ConsensusParams) -> ConsensusParams:
        merged = params.model_dump()
        merged.update(self.changes())
        return ConsensusParams(**merged)
