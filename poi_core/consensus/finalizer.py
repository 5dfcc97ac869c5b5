"""
Epoch finalizer: the single Open -> Finalized transition of a ConsensusState.
"""
import dataclasses
import logging
from typing import Callable, Optional

from ..core.datatypes import ConsensusState
from ..formulas.alignment import ALIGNMENT_SCALE
from ..formulas.weighted_median import DEFAULT_CLIP_SIGMA
from . import aggregator, trust
from .consensus_errors import EpochFinalized, InvalidEpoch
from .ledger import Clock, unix_clock

logger = logging.getLogger(__name__)


class EpochFinalizer:
    """
    Runs aggregation and trust scoring and writes the immutable snapshot.

    Everything is computed before the state is touched, so a failure (a
    precondition or a stake lookup) leaves the state exactly as it was.
    """

    def __init__(
        self,
        clip_sigma: float = DEFAULT_CLIP_SIGMA,
        alignment_scale: int = ALIGNMENT_SCALE,
        clock: Optional[Clock] = None,
    ):
        self.clip_sigma = clip_sigma
        self.alignment_scale = alignment_scale
        self.clock = clock or unix_clock

    def finalize(
        self,
        state: ConsensusState,
        subnet_id: int,
        epoch: int,
        stake_of: Callable[[int], int],
    ) -> ConsensusState:
        if state.subnet_id != subnet_id or state.epoch != epoch:
            raise InvalidEpoch(
                f"State is subnet={state.subnet_id} epoch={state.epoch}, "
                f"got subnet={subnet_id} epoch={epoch}"
            )
        if state.finalized:
            raise EpochFinalized(f"subnet={subnet_id} epoch={epoch} is already finalized")

        miner_consensus = aggregator.aggregate(
            state.submissions, stake_of, clip_sigma=self.clip_sigma
        )
        scores = trust.score(state.submissions, miner_consensus, self.alignment_scale)
        miner_trust = dict(scores.miner_trust)
        miner_consensus = [
            dataclasses.replace(entry, trust_score=miner_trust.get(entry.uid, 0))
            for entry in miner_consensus
        ]
        finalized_at = self.clock()

        state.miner_consensus = miner_consensus
        state.validator_consensus = scores.validator_trust
        state.finalized = True
        state.finalized_at = finalized_at

        logger.info(
            f"✅ Finalized subnet={subnet_id} epoch={epoch}: "
            f"{len(state.submissions)} submissions, {len(miner_consensus)} miners"
        )
        return state
