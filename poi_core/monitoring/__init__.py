from .metrics import MetricsManager, get_metrics_manager

__all__ = ["MetricsManager", "get_metrics_manager"]
