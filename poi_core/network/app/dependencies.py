# poi_core/network/app/dependencies.py
"""
Dependency providers for the FastAPI application.
"""
import logging
from typing import Optional

from fastapi import HTTPException, status

from poi_core.consensus.registry import ConsensusRegistry
from poi_core.monitoring.metrics import MetricsManager, get_metrics_manager

logger = logging.getLogger(__name__)

# Process-wide registry, set when the app starts
_registry_instance: Optional[ConsensusRegistry] = None


def set_consensus_registry(registry: Optional[ConsensusRegistry]):
    """Install the ConsensusRegistry served by the API (None to clear)."""
    global _registry_instance
    _registry_instance = registry
    logger.info("ConsensusRegistry instance has been set for API dependencies.")


def get_consensus_registry() -> ConsensusRegistry:
    """Dependency returning the ConsensusRegistry instance."""
    if _registry_instance is None:
        logger.error("Consensus registry requested but not set.")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Consensus service is not available or not initialized.",
        )
    return _registry_instance


def get_metrics() -> MetricsManager:
    return get_metrics_manager()
