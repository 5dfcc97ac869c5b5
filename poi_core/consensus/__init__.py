# poi_core/consensus/__init__.py

# Export các lớp và kiểu dữ liệu chính ra ngoài module
from .aggregator import aggregate
from .authority import AuthorityPolicy
from .consensus_errors import (
    ConsensusError,
    EpochFinalized,
    InvalidEpoch,
    InvalidSubnet,
    StakeLookupError,
    SubmissionCapacityExceeded,
    Unauthorized,
)
from .finalizer import EpochFinalizer
from .ledger import SubmissionLedger
from .params import ConsensusParams, ConsensusParamsUpdate
from .registry import ConsensusRegistry
from .stake import (
    DelegatedStakeProvider,
    FlatStakeProvider,
    StakeWeightProvider,
    StaticStakeProvider,
)
from .trust import score

__all__ = [
    # Pipeline
    "aggregate",
    "score",
    "SubmissionLedger",
    "EpochFinalizer",
    "ConsensusRegistry",
    # Parameters & authority
    "ConsensusParams",
    "ConsensusParamsUpdate",
    "AuthorityPolicy",
    # Stake providers
    "StakeWeightProvider",
    "StaticStakeProvider",
    "FlatStakeProvider",
    "DelegatedStakeProvider",
    # Errors
    "ConsensusError",
    "InvalidSubnet",
    "InvalidEpoch",
    "EpochFinalized",
    "SubmissionCapacityExceeded",
    "Unauthorized",
    "StakeLookupError",
]
