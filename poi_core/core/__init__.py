# poi_core/core/__init__.py
from .datatypes import (
    ConsensusEntry,
    ConsensusState,
    EntryKind,
    StakeAccount,
    TrustScores,
    WeightEntry,
    WeightSubmission,
)

__all__ = [
    "ConsensusEntry",
    "ConsensusState",
    "EntryKind",
    "StakeAccount",
    "TrustScores",
    "WeightEntry",
    "WeightSubmission",
]
