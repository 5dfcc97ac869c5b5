"""
Stake weight providers.

The aggregator only needs ``stake_of(validator_uid) -> int``; these classes are
the pluggable sources of that lookup.
"""
import logging
from typing import Iterable, Mapping, Optional, Protocol

from ..config.settings import settings
from ..core.datatypes import StakeAccount
from ..formulas.stake_weight import calculate_stake_weight

logger = logging.getLogger(__name__)


class StakeWeightProvider(Protocol):
    def stake_weight(self, validator_uid: int) -> int: ...


class StaticStakeProvider:
    """Looks stake weights up in a fixed table."""

    def __init__(self, weights: Mapping[int, int], default: int = 0):
        self._weights = {int(uid): int(w) for uid, w in weights.items()}
        self.default = default

    def stake_weight(self, validator_uid: int) -> int:
        return self._weights.get(validator_uid, self.default)


class FlatStakeProvider:
    """Every validator carries the same weight."""

    def __init__(self, weight: Optional[int] = None):
        self.weight = settings.CONSENSUS_DEFAULT_STAKE_WEIGHT if weight is None else weight

    def stake_weight(self, validator_uid: int) -> int:
        return self.weight


class DelegatedStakeProvider:
    """
    Delegation-aware stake weight: direct stake plus a fixed share of the
    stake delegated to the validator (18/100 by default).
    """

    def __init__(
        self,
        accounts: Iterable[StakeAccount],
        numerator: Optional[int] = None,
        denominator: Optional[int] = None,
    ):
        self._accounts = {account.validator_uid: account for account in accounts}
        self.numerator = (
            settings.STAKE_DELEGATION_NUMERATOR if numerator is None else numerator
        )
        self.denominator = (
            settings.STAKE_DELEGATION_DENOMINATOR if denominator is None else denominator
        )

    def stake_weight(self, validator_uid: int) -> int:
        account = self._accounts.get(validator_uid)
        if account is None:
            logger.debug(f"No stake account for validator {validator_uid}, weight 0")
            return 0
        return calculate_stake_weight(
            account.amount, account.delegated_amount, self.numerator, self.denominator
        )
