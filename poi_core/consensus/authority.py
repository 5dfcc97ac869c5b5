"""
Allow-list checks for collaborator identities.
"""
import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional

from ..config.settings import settings
from .consensus_errors import Unauthorized

logger = logging.getLogger(__name__)

ROLE_FINALIZER = "finalizer"
ROLE_GOVERNOR = "governor"


@dataclass(frozen=True)
class AuthorityPolicy:
    """
    Which collaborator identities may perform privileged operations.

    An empty allow-list leaves that role unrestricted.
    """

    finalizers: FrozenSet[str] = field(default_factory=frozenset)
    governors: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_identities(
        cls, finalizers: Iterable[str] = (), governors: Iterable[str] = ()
    ) -> "AuthorityPolicy":
        return cls(finalizers=frozenset(finalizers), governors=frozenset(governors))

    @classmethod
    def from_settings(cls) -> "AuthorityPolicy":
        return cls(
            finalizers=settings.finalizer_authorities,
            governors=settings.governor_authorities,
        )

    def allowed(self, role: str) -> FrozenSet[str]:
        if role == ROLE_FINALIZER:
            return self.finalizers
        if role == ROLE_GOVERNOR:
            return self.governors
        raise ValueError(f"Unknown collaborator role: {role}")

    def require(self, role: str, identity: Optional[str]) -> None:
        allowed = self.allowed(role)
        if not allowed:
            return
        if identity is None or identity not in allowed:
            logger.warning(f"Rejected {role} request from identity {identity!r}")
            raise Unauthorized(f"Identity {identity!r} is not an allowed {role}")
