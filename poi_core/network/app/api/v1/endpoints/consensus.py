"""
API endpoints for consensus operations.

This module provides FastAPI endpoints for:
- Validator weight submissions
- Epoch finalization
- Consensus state retrieval
- Consensus parameter updates

Endpoints are plain ``def`` functions: the consensus core is synchronous and
FastAPI runs them in its threadpool.
"""

import dataclasses
import logging
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Path, status
from pydantic import BaseModel, Field

from poi_core.consensus.consensus_errors import (
    ConsensusError,
    EpochFinalized,
    InvalidEpoch,
    InvalidSubnet,
    StakeLookupError,
    SubmissionCapacityExceeded,
    Unauthorized,
)
from poi_core.consensus.params import ConsensusParamsUpdate
from poi_core.consensus.registry import ConsensusRegistry
from poi_core.core.serialization import state_to_dict
from poi_core.network.app.dependencies import get_consensus_registry

U16_MAX = 2**16 - 1
U64_MAX = 2**64 - 1

router = APIRouter(prefix="/consensus", tags=["Consensus"])
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    InvalidSubnet: status.HTTP_400_BAD_REQUEST,
    InvalidEpoch: status.HTTP_400_BAD_REQUEST,
    EpochFinalized: status.HTTP_409_CONFLICT,
    SubmissionCapacityExceeded: status.HTTP_429_TOO_MANY_REQUESTS,
    Unauthorized: status.HTTP_403_FORBIDDEN,
    StakeLookupError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


# --- Models ---
class WeightEntryModel(BaseModel):
    miner_uid: int = Field(ge=0, le=U16_MAX)
    weight: int = Field(ge=0, le=U64_MAX)


class SubmitWeightsRequest(BaseModel):
    validator_uid: int = Field(ge=0, le=U16_MAX)
    weights: List[WeightEntryModel]


class SubmissionResponse(BaseModel):
    message: str
    validator_uid: int
    subnet_id: int
    epoch: int
    timestamp: int
    weights: List[WeightEntryModel]


class ParamsResponse(BaseModel):
    max_submissions_per_epoch: Optional[int]
    clip_sigma: float
    alignment_scale: int


def to_http_error(error: ConsensusError) -> HTTPException:
    status_code = ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST)
    return HTTPException(
        status_code=status_code,
        detail={"code": error.code, "message": str(error)},
    )


SubnetId = Annotated[int, Path(ge=0, le=U16_MAX)]
Epoch = Annotated[int, Path(ge=0, le=U64_MAX)]


# --- Endpoints ---
@router.post(
    "/{subnet_id}/{epoch}/weights",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=SubmissionResponse,
)
def submit_weights(
    payload: SubmitWeightsRequest,
    subnet_id: SubnetId,
    epoch: Epoch,
    registry: ConsensusRegistry = Depends(get_consensus_registry),
):
    """Record a validator's weights for an open epoch."""
    try:
        submission = registry.submit_weights(
            subnet_id,
            epoch,
            payload.validator_uid,
            [(w.miner_uid, w.weight) for w in payload.weights],
        )
    except ConsensusError as e:
        raise to_http_error(e) from e
    return SubmissionResponse(
        message=f"Accepted {len(submission.weights)} weights",
        validator_uid=submission.validator_uid,
        subnet_id=submission.subnet_id,
        epoch=submission.epoch,
        timestamp=submission.timestamp,
        weights=[dataclasses.asdict(w) for w in submission.weights],
    )


@router.post("/{subnet_id}/{epoch}/finalize")
def finalize_epoch(
    subnet_id: SubnetId,
    epoch: Epoch,
    x_authority: Optional[str] = Header(default=None),
    registry: ConsensusRegistry = Depends(get_consensus_registry),
):
    """Finalize an epoch and return its consensus snapshot."""
    try:
        state = registry.finalize(subnet_id, epoch, authority=x_authority)
    except ConsensusError as e:
        raise to_http_error(e) from e
    return state_to_dict(state)


@router.get("/{subnet_id}/{epoch}")
def get_epoch_state(
    subnet_id: SubnetId,
    epoch: Epoch,
    registry: ConsensusRegistry = Depends(get_consensus_registry),
):
    state = registry.get_state(subnet_id, epoch)
    if state is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": "not_found", "message": f"No state for subnet={subnet_id} epoch={epoch}"},
        )
    return state_to_dict(state)


@router.patch("/params", response_model=ParamsResponse)
def update_params(
    update: ConsensusParamsUpdate,
    x_authority: Optional[str] = Header(default=None),
    registry: ConsensusRegistry = Depends(get_consensus_registry),
):
    """Apply a partial update to the consensus parameters."""
    try:
        params = registry.update_params(update, authority=x_authority)
    except ConsensusError as e:
        raise to_http_error(e) from e
    return ParamsResponse(**params.model_dump())
