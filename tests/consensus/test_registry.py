# tests/consensus/test_registry.py
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from poi_core.consensus.authority import AuthorityPolicy
from poi_core.consensus.consensus_errors import (
    EpochFinalized,
    StakeLookupError,
    SubmissionCapacityExceeded,
    Unauthorized,
)
from poi_core.consensus.params import ConsensusParams, ConsensusParamsUpdate
from poi_core.consensus.registry import ConsensusRegistry
from poi_core.consensus.stake import StaticStakeProvider
from poi_core.core.serialization import dumps_state


def test_first_submission_opens_epoch(registry):
    assert registry.get_state(1, 42) is None
    registry.submit_weights(1, 42, 0, [(7, 5000)])
    state = registry.get_state(1, 42)
    assert state.key == (1, 42)
    assert len(state.submissions) == 1
    assert state.finalized is False


def test_submit_finalize_roundtrip(registry, clock):
    for uid, weight in enumerate((10, 20, 30)):
        registry.submit_weights(1, 42, uid, [(7, weight)])
    snapshot = registry.finalize(1, 42)

    assert snapshot.finalized is True
    assert snapshot.finalized_at == clock()
    assert [(e.uid, e.consensus_weight, e.trust_score) for e in snapshot.miner_consensus] == [
        (7, 20, 9993)
    ]
    assert registry.get_state(1, 42) == snapshot


def test_submit_after_finalize_rejected(registry):
    registry.submit_weights(1, 42, 0, [(7, 5000)])
    registry.finalize(1, 42)
    with pytest.raises(EpochFinalized):
        registry.submit_weights(1, 42, 1, [(7, 5000)])
    assert len(registry.get_state(1, 42).submissions) == 1


def test_finalize_twice_rejected(registry):
    registry.submit_weights(1, 42, 0, [(7, 5000)])
    first = registry.finalize(1, 42)
    with pytest.raises(EpochFinalized):
        registry.finalize(1, 42)
    assert registry.get_state(1, 42) == first


def test_finalize_unopened_epoch(registry):
    snapshot = registry.finalize(5, 1)
    assert snapshot.finalized is True
    assert snapshot.miner_consensus == []
    assert registry.keys() == [(5, 1)]


def test_snapshots_are_isolated(registry):
    registry.submit_weights(1, 42, 0, [(7, 5000)])
    snapshot = registry.get_state(1, 42)
    snapshot.submissions.clear()
    snapshot.finalized = True
    state = registry.get_state(1, 42)
    assert len(state.submissions) == 1
    assert state.finalized is False


def test_reading_unknown_epochs_allocates_nothing(registry):
    registry.submit_weights(1, 42, 0, [(7, 5000)])
    locks_before = len(registry._locks)

    for epoch in range(1000, 3000):
        assert registry.get_state(1, epoch) is None

    assert len(registry._locks) == locks_before
    assert registry.keys() == [(1, 42)]
    assert registry.get_state(1, 42) is not None


def test_epochs_are_independent(registry):
    registry.submit_weights(1, 42, 0, [(7, 100)])
    registry.submit_weights(1, 43, 0, [(7, 900)])
    registry.submit_weights(2, 42, 0, [(7, 500)])
    registry.finalize(1, 42)

    assert registry.get_state(1, 43).finalized is False
    registry.submit_weights(1, 43, 1, [(7, 900)])
    assert registry.keys() == [(1, 42), (1, 43), (2, 42)]


class FlakyStakeProvider:
    def __init__(self):
        self.fail = True

    def stake_weight(self, validator_uid):
        if self.fail:
            raise TimeoutError("stake service timed out")
        return 1


def test_failed_finalize_can_be_retried(clock):
    provider = FlakyStakeProvider()
    registry = ConsensusRegistry(provider, params=ConsensusParams(), clock=clock)
    registry.submit_weights(1, 42, 0, [(7, 5000)])

    with pytest.raises(StakeLookupError):
        registry.finalize(1, 42)
    assert registry.get_state(1, 42).finalized is False

    provider.fail = False
    assert registry.finalize(1, 42).miner_consensus[0].consensus_weight == 5000


def test_concurrent_submissions_are_all_recorded(equal_stakes, clock):
    registry = ConsensusRegistry(
        equal_stakes, params=ConsensusParams(max_submissions_per_epoch=None), clock=clock
    )

    def submit_many(validator_uid):
        for i in range(25):
            registry.submit_weights(1, 42, validator_uid, [(i, validator_uid * 100 + i)])

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(submit_many, range(8)))

    assert len(registry.get_state(1, 42).submissions) == 200


def test_concurrent_capacity_is_exact(equal_stakes, clock):
    registry = ConsensusRegistry(
        equal_stakes, params=ConsensusParams(max_submissions_per_epoch=10), clock=clock
    )
    barrier = threading.Barrier(20)
    outcomes = []
    outcomes_lock = threading.Lock()

    def submit(validator_uid):
        barrier.wait()
        try:
            registry.submit_weights(1, 42, validator_uid, [(1, 1)])
            result = "ok"
        except SubmissionCapacityExceeded:
            result = "full"
        with outcomes_lock:
            outcomes.append(result)

    threads = [threading.Thread(target=submit, args=(uid,)) for uid in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 10
    assert outcomes.count("full") == 10


def test_finalize_racing_submissions_is_consistent(equal_stakes, clock):
    registry = ConsensusRegistry(
        equal_stakes, params=ConsensusParams(max_submissions_per_epoch=None), clock=clock
    )
    accepted = []
    accepted_lock = threading.Lock()

    def submit(validator_uid):
        try:
            registry.submit_weights(1, 42, validator_uid, [(1, 1000)])
        except EpochFinalized:
            return
        with accepted_lock:
            accepted.append(validator_uid)

    with ThreadPoolExecutor(max_workers=8) as pool:
        futures = [pool.submit(submit, uid) for uid in range(50)]
        snapshot = registry.finalize(1, 42)
        for future in futures:
            future.result()

    # every accepted submission is in the finalized snapshot, nothing after it
    assert sorted(s.validator_uid for s in snapshot.submissions) == sorted(accepted)
    assert len(snapshot.validator_consensus) == len(snapshot.submissions)


def test_finalized_bytes_are_deterministic(clock):
    stakes = StaticStakeProvider({0: 3, 1: 1, 2: 2})
    batches = [
        (0, [(1, 100), (2, 9000)]),
        (1, [(1, 300), (2, 8000)]),
        (2, [(1, 200)]),
    ]

    def run(ordering):
        registry = ConsensusRegistry(stakes, params=ConsensusParams(), clock=clock)
        for uid, weights in ordering:
            registry.submit_weights(1, 42, uid, weights)
        return registry.finalize(1, 42)

    assert dumps_state(run(batches)) == dumps_state(run(batches))
    # submission order changes validator_consensus order, not miner consensus
    assert run(batches).miner_consensus == run(list(reversed(batches))).miner_consensus


def test_finalize_requires_finalizer_authority(equal_stakes, clock):
    registry = ConsensusRegistry(
        equal_stakes,
        params=ConsensusParams(),
        authority=AuthorityPolicy.from_identities(finalizers=["epoch-cron"]),
        clock=clock,
    )
    registry.submit_weights(1, 42, 0, [(7, 5000)])
    with pytest.raises(Unauthorized):
        registry.finalize(1, 42)
    with pytest.raises(Unauthorized):
        registry.finalize(1, 42, authority="someone-else")
    assert registry.get_state(1, 42).finalized is False
    assert registry.finalize(1, 42, authority="epoch-cron").finalized is True


def test_update_params_partial(registry):
    params = registry.update_params(ConsensusParamsUpdate(max_submissions_per_epoch=1))
    assert params.max_submissions_per_epoch == 1
    assert params.clip_sigma == 2.0

    registry.submit_weights(1, 42, 0, [(7, 1)])
    with pytest.raises(SubmissionCapacityExceeded):
        registry.submit_weights(1, 42, 1, [(7, 1)])


def test_update_params_requires_governor(equal_stakes):
    registry = ConsensusRegistry(
        equal_stakes,
        params=ConsensusParams(),
        authority=AuthorityPolicy.from_identities(governors=["dao"]),
    )
    with pytest.raises(Unauthorized):
        registry.update_params(ConsensusParamsUpdate(clip_sigma=3.0))
    assert registry.params.clip_sigma == 2.0
    assert registry.update_params(ConsensusParamsUpdate(clip_sigma=3.0), authority="dao").clip_sigma == 3.0


def test_metrics_are_recorded(equal_stakes, clock, metrics):
    registry = ConsensusRegistry(
        equal_stakes,
        params=ConsensusParams(max_submissions_per_epoch=1),
        clock=clock,
        metrics=metrics,
    )
    registry.submit_weights(1, 42, 0, [(7, 5000), (8, 10)])
    with pytest.raises(SubmissionCapacityExceeded):
        registry.submit_weights(1, 42, 1, [(7, 5000)])
    registry.finalize(1, 42)
    with pytest.raises(EpochFinalized):
        registry.finalize(1, 42)

    prom = metrics.get_registry()
    assert prom.get_sample_value("weight_submissions_total", {"status": "accepted"}) == 1
    assert (
        prom.get_sample_value(
            "weight_submissions_total", {"status": "submission_capacity_exceeded"}
        )
        == 1
    )
    assert prom.get_sample_value("finalizations_total", {"status": "finalized"}) == 1
    assert prom.get_sample_value("finalizations_total", {"status": "epoch_finalized"}) == 1
    assert prom.get_sample_value("finalize_duration_seconds_count") == 1
    assert prom.get_sample_value("finalized_miners") == 2
    assert prom.get_sample_value("finalized_validators") == 1
