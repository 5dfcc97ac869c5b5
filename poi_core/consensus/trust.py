"""
Trust scoring: how closely reported weights tracked the final consensus.
"""
import logging
from typing import Dict, List, Optional, Sequence

from ..core.datatypes import (
    ConsensusEntry,
    EntryKind,
    TrustScores,
    WeightEntry,
    WeightSubmission,
)
from ..formulas.alignment import ALIGNMENT_SCALE, average_alignment, calculate_alignment

logger = logging.getLogger(__name__)


def first_entry_for(submission: WeightSubmission, miner_uid: int) -> Optional[WeightEntry]:
    # Later duplicates for the same miner are ignored
    for entry in submission.weights:
        if entry.miner_uid == miner_uid:
            return entry
    return None


def score_miners(
    submissions: Sequence[WeightSubmission],
    miner_consensus: Sequence[ConsensusEntry],
    scale: int = ALIGNMENT_SCALE,
) -> List[tuple]:
    """Average alignment of every report about each miner with its consensus."""
    miner_trust = []
    for consensus in miner_consensus:
        alignments = []
        for submission in submissions:
            entry = first_entry_for(submission, consensus.uid)
            if entry is not None:
                alignments.append(
                    calculate_alignment(entry.weight, consensus.consensus_weight, scale)
                )
        miner_trust.append((consensus.uid, average_alignment(alignments)))
    return miner_trust


def score_validators(
    submissions: Sequence[WeightSubmission],
    miner_consensus: Sequence[ConsensusEntry],
    scale: int = ALIGNMENT_SCALE,
) -> List[ConsensusEntry]:
    """
    Average alignment of each submission with the consensus.

    Every submission is scored on its own, so a validator that submitted twice
    appears twice. Entries for miners without consensus are skipped.
    """
    consensus_map: Dict[int, int] = {e.uid: e.consensus_weight for e in miner_consensus}
    validator_trust = []
    for submission in submissions:
        alignments = [
            calculate_alignment(entry.weight, consensus_map[entry.miner_uid], scale)
            for entry in submission.weights
            if entry.miner_uid in consensus_map
        ]
        validator_trust.append(
            ConsensusEntry(
                uid=submission.validator_uid,
                trust_score=average_alignment(alignments),
                kind=EntryKind.VALIDATOR,
            )
        )
    return validator_trust


def score(
    submissions: Sequence[WeightSubmission],
    miner_consensus: Sequence[ConsensusEntry],
    scale: int = ALIGNMENT_SCALE,
) -> TrustScores:
    """Compute miner and validator trust for one epoch."""
    trust = TrustScores(
        miner_trust=score_miners(submissions, miner_consensus, scale),
        validator_trust=score_validators(submissions, miner_consensus, scale),
    )
    logger.debug(
        f"Trust scored for {len(trust.miner_trust)} miners and "
        f"{len(trust.validator_trust)} submissions"
    )
    return trust
