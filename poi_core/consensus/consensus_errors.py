#!/usr/bin/env python3
"""
Consensus Error Handling
Error classes raised by the consensus core and a handler for collaborator failures
"""

import logging
from contextlib import contextmanager
from typing import Generator, Type

logger = logging.getLogger(__name__)


class ConsensusError(Exception):
    """Base exception for consensus-related errors"""

    code = "consensus_error"


class InvalidSubnet(ConsensusError):
    """The addressed state belongs to a different subnet"""

    code = "invalid_subnet"


class InvalidEpoch(ConsensusError):
    """The addressed state belongs to a different epoch"""

    code = "invalid_epoch"


class EpochFinalized(ConsensusError):
    """The epoch is already finalized"""

    code = "epoch_finalized"


class SubmissionCapacityExceeded(ConsensusError):
    """The epoch already holds the maximum number of submissions"""

    code = "submission_capacity_exceeded"


class Unauthorized(ConsensusError):
    """The caller is not an allowed collaborator for this operation"""

    code = "unauthorized"


class StakeLookupError(ConsensusError):
    """The stake collaborator could not resolve a validator's weight"""

    code = "stake_lookup_failed"


@contextmanager
def ConsensusErrorHandler(
    operation: str, error_cls: Type[ConsensusError] = ConsensusError
) -> Generator[None, None, None]:
    """
    Context manager for handling collaborator errors during consensus operations.

    Typed consensus errors pass through untouched; anything else is logged and
    re-raised as ``error_cls``.

    Args:
        operation: Name of the operation being performed
        error_cls: Consensus error type to raise for unexpected failures
    """
    try:
        yield
    except ConsensusError:
        raise
    except Exception as e:
        logger.error(f"Error in consensus operation '{operation}': {e}")
        raise error_cls(f"Failed {operation}: {e}") from e
