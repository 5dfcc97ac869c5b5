"""
Keyed consensus registry.

Holds exactly one ConsensusState per (subnet_id, epoch). Every operation on a
key runs under that key's lock, so a submit and a finalize on the same epoch
never interleave; operations on different keys proceed in parallel.
"""
import copy
import logging
import threading
import time
from typing import Dict, Iterable, List, Optional, Tuple

from ..core.datatypes import ConsensusState, WeightLike, WeightSubmission
from ..monitoring.metrics import MetricsManager
from .authority import ROLE_FINALIZER, ROLE_GOVERNOR, AuthorityPolicy
from .consensus_errors import ConsensusError
from .finalizer import EpochFinalizer
from .ledger import Clock, SubmissionLedger, unix_clock
from .params import ConsensusParams, ConsensusParamsUpdate
from .stake import StakeWeightProvider

logger = logging.getLogger(__name__)

EpochKey = Tuple[int, int]


class ConsensusRegistry:
    """Operation surface of the consensus core."""

    def __init__(
        self,
        stake_provider: StakeWeightProvider,
        params: Optional[ConsensusParams] = None,
        authority: Optional[AuthorityPolicy] = None,
        clock: Optional[Clock] = None,
        metrics: Optional[MetricsManager] = None,
    ):
        self.stake_provider = stake_provider
        self.params = params or ConsensusParams.from_settings()
        self.authority = authority or AuthorityPolicy()
        self.clock = clock or unix_clock
        self.metrics = metrics

        self._states: Dict[EpochKey, ConsensusState] = {}
        self._locks: Dict[EpochKey, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._params_lock = threading.Lock()

    def _lock_for(self, key: EpochKey) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def _state_for(self, key: EpochKey) -> ConsensusState:
        # Caller must hold the key lock
        state = self._states.get(key)
        if state is None:
            state = ConsensusState(subnet_id=key[0], epoch=key[1])
            with self._registry_lock:
                self._states[key] = state
            logger.debug(f"Opened subnet={key[0]} epoch={key[1]}")
        return state

    def submit_weights(
        self,
        subnet_id: int,
        epoch: int,
        validator_uid: int,
        weights: Iterable[WeightLike],
    ) -> WeightSubmission:
        """Record one validator's weights; opens the epoch on first submission."""
        key = (subnet_id, epoch)
        params = self.params
        with self._lock_for(key):
            ledger = SubmissionLedger(
                self._state_for(key),
                max_submissions=params.max_submissions_per_epoch,
                clock=self.clock,
            )
            try:
                submission = ledger.submit(subnet_id, epoch, validator_uid, weights)
            except ConsensusError as e:
                logger.warning(f"Rejected submission from validator {validator_uid}: {e}")
                if self.metrics:
                    self.metrics.record_submission(e.code)
                raise
        if self.metrics:
            self.metrics.record_submission("accepted")
        return submission

    def finalize(
        self, subnet_id: int, epoch: int, authority: Optional[str] = None
    ) -> ConsensusState:
        """
        Finalize an epoch and return a snapshot of the result.

        An epoch nobody submitted to finalizes to empty consensus.
        """
        self.authority.require(ROLE_FINALIZER, authority)
        key = (subnet_id, epoch)
        params = self.params
        finalizer = EpochFinalizer(
            clip_sigma=params.clip_sigma,
            alignment_scale=params.alignment_scale,
            clock=self.clock,
        )
        started = time.perf_counter()
        with self._lock_for(key):
            state = self._state_for(key)
            try:
                finalizer.finalize(
                    state, subnet_id, epoch, self.stake_provider.stake_weight
                )
            except ConsensusError as e:
                logger.warning(f"Rejected finalize for subnet={subnet_id} epoch={epoch}: {e}")
                if self.metrics:
                    self.metrics.record_finalization(e.code)
                raise
            snapshot = copy.deepcopy(state)
        if self.metrics:
            self.metrics.record_finalization("finalized", time.perf_counter() - started)
            self.metrics.update_epoch_sizes(
                len(snapshot.miner_consensus), len(snapshot.validator_consensus)
            )
        return snapshot

    def get_state(self, subnet_id: int, epoch: int) -> Optional[ConsensusState]:
        """Deep-copied snapshot of an epoch, or None if it was never opened."""
        key = (subnet_id, epoch)
        with self._registry_lock:
            lock = self._locks.get(key) if key in self._states else None
        if lock is None:
            return None
        with lock:
            return copy.deepcopy(self._states[key])

    def keys(self) -> List[EpochKey]:
        with self._registry_lock:
            return sorted(self._states)

    def update_params(
        self, update: ConsensusParamsUpdate, authority: Optional[str] = None
    ) -> ConsensusParams:
        """Apply a partial parameter update; unset fields keep their values."""
        self.authority.require(ROLE_GOVERNOR, authority)
        with self._params_lock:
            self.params = update.apply(self.params)
        logger.info(f"Consensus parameters updated: {update.changes()}")
        return self.params
