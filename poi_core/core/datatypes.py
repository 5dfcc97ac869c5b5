# poi_core/core/datatypes.py
"""
Core data structures shared by the consensus pipeline.

Weight submissions flow in from validators, consensus entries flow out to the
reward collaborator. All records except ConsensusState are frozen: once a
submission is accepted, or an epoch finalized, nothing rewrites it.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Tuple, Union


class EntryKind(str, Enum):
    """Which kind of participant a ConsensusEntry describes."""

    MINER = "miner"
    VALIDATOR = "validator"


@dataclass(frozen=True)
class WeightEntry:
    """One validator opinion about one miner (weight convention 0-10000)."""

    miner_uid: int
    weight: int


@dataclass(frozen=True)
class WeightSubmission:
    """All weights one validator reported for a (subnet, epoch)."""

    validator_uid: int
    subnet_id: int
    epoch: int
    weights: Tuple[WeightEntry, ...]
    timestamp: int


@dataclass(frozen=True)
class ConsensusEntry:
    """
    Finalized result for one participant.

    Miners carry consensus_weight and trust_score; validators carry only
    trust_score. emission_share is reserved for the reward collaborator.
    """

    uid: int
    consensus_weight: int = 0
    trust_score: int = 0
    emission_share: int = 0
    kind: EntryKind = EntryKind.MINER


@dataclass
class ConsensusState:
    """The single live record for one (subnet_id, epoch) pair."""

    subnet_id: int
    epoch: int
    submissions: List[WeightSubmission] = field(default_factory=list)
    miner_consensus: List[ConsensusEntry] = field(default_factory=list)
    validator_consensus: List[ConsensusEntry] = field(default_factory=list)
    finalized: bool = False
    finalized_at: int = 0

    @property
    def key(self) -> Tuple[int, int]:
        return (self.subnet_id, self.epoch)


@dataclass(frozen=True)
class StakeAccount:
    """Stake held by a validator: amount includes delegated_amount."""

    validator_uid: int
    amount: int = 0
    delegated_amount: int = 0


@dataclass
class TrustScores:
    """Output of the trust scorer."""

    miner_trust: List[Tuple[int, int]] = field(default_factory=list)
    validator_trust: List[ConsensusEntry] = field(default_factory=list)


WeightLike = Union[WeightEntry, Tuple[int, int], Mapping[str, Any]]


def to_weight_entry(raw: WeightLike) -> WeightEntry:
    """Normalize a WeightEntry, a (miner_uid, weight) pair or a mapping."""
    if isinstance(raw, WeightEntry):
        return raw
    if isinstance(raw, Mapping):
        return WeightEntry(miner_uid=int(raw["miner_uid"]), weight=int(raw["weight"]))
    miner_uid, weight = raw
    return WeightEntry(miner_uid=int(miner_uid), weight=int(weight))
