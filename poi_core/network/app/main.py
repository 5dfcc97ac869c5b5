# poi_core/network/app/main.py
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Depends, FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST

from poi_core import __version__
from poi_core.config.config_loader import PoiConfig, get_config
from poi_core.consensus.authority import AuthorityPolicy
from poi_core.consensus.params import ConsensusParams
from poi_core.consensus.registry import ConsensusRegistry
from poi_core.consensus.stake import FlatStakeProvider, StakeWeightProvider
from poi_core.monitoring.metrics import MetricsManager

from .api.v1.routes import api_router
from .dependencies import get_metrics, set_consensus_registry

logger = logging.getLogger(__name__)


def build_registry(
    config: Optional[PoiConfig] = None,
    stake_provider: Optional[StakeWeightProvider] = None,
) -> ConsensusRegistry:
    """Create a ConsensusRegistry wired from configuration."""
    config = config or get_config()
    provider = stake_provider or FlatStakeProvider(config.stake.default_weight)
    return ConsensusRegistry(
        stake_provider=provider,
        params=ConsensusParams.from_config(config.consensus),
        authority=AuthorityPolicy.from_identities(
            config.authorities.finalizers, config.authorities.governors
        ),
        metrics=MetricsManager() if config.api.metrics_enabled else None,
    )


def create_app(
    registry: Optional[ConsensusRegistry] = None, metrics_enabled: Optional[bool] = None
) -> FastAPI:
    """
    Build the API app.

    /metrics is registered only when metrics are enabled: explicitly, by the
    given registry carrying a MetricsManager, or by `api.metrics_enabled`.
    """
    if metrics_enabled is None:
        if registry is not None:
            metrics_enabled = registry.metrics is not None
        else:
            metrics_enabled = get_config().api.metrics_enabled

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Install the registry the endpoints depend on for the app's lifetime."""
        logger.info("FastAPI application starting up...")
        set_consensus_registry(registry or build_registry())
        yield
        logger.info("FastAPI application shutting down...")
        set_consensus_registry(None)

    app = FastAPI(
        title="poi-consensus API",
        description="Weight submission, epoch finalization and consensus queries.",
        version=__version__,
        lifespan=lifespan,
    )

    if metrics_enabled:

        @app.get("/metrics")
        def metrics(manager: MetricsManager = Depends(get_metrics)):
            return Response(content=manager.export(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(api_router)
    return app


app = create_app()
