"""
Submission ledger: append-only weight submissions for one open epoch.
"""
import logging
import time
from typing import Callable, Iterable, Optional

from ..core.datatypes import (
    ConsensusState,
    WeightLike,
    WeightSubmission,
    to_weight_entry,
)
from .consensus_errors import (
    EpochFinalized,
    InvalidEpoch,
    InvalidSubnet,
    SubmissionCapacityExceeded,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def unix_clock() -> int:
    return int(time.time())


class SubmissionLedger:
    """
    Accepts weight submissions into a ConsensusState while it is open.

    Weight content is not validated here: duplicate miner UIDs and
    out-of-range weights are absorbed later by outlier clipping.
    """

    def __init__(
        self,
        state: ConsensusState,
        max_submissions: Optional[int] = None,
        clock: Optional[Clock] = None,
    ):
        self.state = state
        self.max_submissions = max_submissions
        self.clock = clock or unix_clock

    def check_open(self, subnet_id: int, epoch: int) -> None:
        if self.state.subnet_id != subnet_id:
            raise InvalidSubnet(
                f"State belongs to subnet {self.state.subnet_id}, not {subnet_id}"
            )
        if self.state.epoch != epoch:
            raise InvalidEpoch(f"State belongs to epoch {self.state.epoch}, not {epoch}")
        if self.state.finalized:
            raise EpochFinalized(f"subnet={subnet_id} epoch={epoch} is already finalized")

    def submit(
        self,
        subnet_id: int,
        epoch: int,
        validator_uid: int,
        weights: Iterable[WeightLike],
    ) -> WeightSubmission:
        """
        Append one validator's weights to the epoch.

        Raises:
            InvalidSubnet: the state belongs to another subnet.
            InvalidEpoch: the state belongs to another epoch.
            EpochFinalized: the epoch no longer accepts submissions.
            SubmissionCapacityExceeded: the configured cap is reached.
        """
        self.check_open(subnet_id, epoch)
        if (
            self.max_submissions is not None
            and len(self.state.submissions) >= self.max_submissions
        ):
            raise SubmissionCapacityExceeded(
                f"subnet={subnet_id} epoch={epoch} already holds "
                f"{len(self.state.submissions)} submissions"
            )

        submission = WeightSubmission(
            validator_uid=validator_uid,
            subnet_id=subnet_id,
            epoch=epoch,
            weights=tuple(to_weight_entry(w) for w in weights),
            timestamp=self.clock(),
        )
        self.state.submissions.append(submission)
        logger.info(
            f"Validator {validator_uid} submitted {len(submission.weights)} weights "
            f"for subnet={subnet_id} epoch={epoch}"
        )
        return submission
