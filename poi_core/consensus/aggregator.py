"""
Weighted median aggregation of validator weight submissions.

For every miner referenced by any submission the (weight, stake) samples are
reduced in two stages: a stake-weighted median anchors the value near what
the stake majority believes, then an unweighted k-sigma clip removes
statistical extremes from the published average.
"""
import logging
from typing import Callable, Dict, List, Sequence

from ..core.datatypes import ConsensusEntry, EntryKind, WeightSubmission
from ..formulas.weighted_median import (
    DEFAULT_CLIP_SIGMA,
    WeightedValue,
    clip_outliers,
    sort_weighted_values,
    weighted_median,
)
from .consensus_errors import ConsensusErrorHandler, StakeLookupError

logger = logging.getLogger(__name__)

StakeLookup = Callable[[int], int]


def resolve_stakes(
    submissions: Sequence[WeightSubmission], stake_of: StakeLookup
) -> Dict[int, int]:
    """Look every submitting validator's stake up once."""
    stakes: Dict[int, int] = {}
    for submission in submissions:
        uid = submission.validator_uid
        if uid in stakes:
            continue
        with ConsensusErrorHandler(f"stake lookup for validator {uid}", StakeLookupError):
            stake = int(stake_of(uid))
        if stake < 0:
            raise StakeLookupError(f"Negative stake weight {stake} for validator {uid}")
        stakes[uid] = stake
    return stakes


def collect_miner_samples(
    submissions: Sequence[WeightSubmission], stakes: Dict[int, int]
) -> Dict[int, List[WeightedValue]]:
    samples: Dict[int, List[WeightedValue]] = {}
    for submission in submissions:
        stake = stakes[submission.validator_uid]
        for entry in submission.weights:
            samples.setdefault(entry.miner_uid, []).append(
                WeightedValue(value=entry.weight, stake=stake)
            )
    return samples


def aggregate(
    submissions: Sequence[WeightSubmission],
    stake_of: StakeLookup,
    clip_sigma: float = DEFAULT_CLIP_SIGMA,
) -> List[ConsensusEntry]:
    """
    Reduce submissions to one consensus weight per miner.

    Args:
        submissions: Accepted weight submissions for one epoch.
        stake_of: Stake weight lookup for a validator UID.
        clip_sigma: Outlier band in population standard deviations.

    Returns:
        One miner ConsensusEntry per observed miner UID, ordered by UID, with
        trust_score and emission_share left at zero.

    Raises:
        StakeLookupError: the stake lookup failed or returned a negative value.
    """
    stakes = resolve_stakes(submissions, stake_of)
    samples = collect_miner_samples(submissions, stakes)

    entries: List[ConsensusEntry] = []
    for miner_uid in sorted(samples):
        values = sort_weighted_values(samples[miner_uid])
        median = weighted_median(values)
        consensus_weight = clip_outliers(median, values, clip_sigma)
        logger.debug(
            f"Miner {miner_uid}: {len(values)} samples, median={median}, "
            f"consensus={consensus_weight}"
        )
        entries.append(
            ConsensusEntry(
                uid=miner_uid,
                consensus_weight=consensus_weight,
                kind=EntryKind.MINER,
            )
        )
    return entries
