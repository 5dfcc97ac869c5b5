# tests/monitoring/test_metrics.py
from poi_core.monitoring.metrics import MetricsManager, get_metrics_manager


def test_singleton():
    assert MetricsManager() is MetricsManager()
    assert get_metrics_manager() is MetricsManager()


def test_record_submission(metrics):
    metrics.record_submission("accepted")
    metrics.record_submission("accepted")
    metrics.record_submission("epoch_finalized")
    registry = metrics.get_registry()
    assert registry.get_sample_value("weight_submissions_total", {"status": "accepted"}) == 2
    assert registry.get_sample_value("weight_submissions_total", {"status": "epoch_finalized"}) == 1


def test_record_finalization_with_duration(metrics):
    metrics.record_finalization("finalized", 0.25)
    metrics.record_finalization("unauthorized")
    registry = metrics.get_registry()
    assert registry.get_sample_value("finalizations_total", {"status": "finalized"}) == 1
    assert registry.get_sample_value("finalizations_total", {"status": "unauthorized"}) == 1
    assert registry.get_sample_value("finalize_duration_seconds_count") == 1
    assert registry.get_sample_value("finalize_duration_seconds_sum") == 0.25


def test_update_epoch_sizes(metrics):
    metrics.update_epoch_sizes(12, 4)
    registry = metrics.get_registry()
    assert registry.get_sample_value("finalized_miners") == 12
    assert registry.get_sample_value("finalized_validators") == 4


def test_reset_metrics(metrics):
    metrics.record_submission("accepted")
    metrics.reset_metrics()
    assert metrics.get_registry().get_sample_value(
        "weight_submissions_total", {"status": "accepted"}
    ) is None


def test_get_metric(metrics):
    assert metrics.get_metric("finalized_miners") is not None
    assert metrics.get_metric("missing") is None


def test_export_text_format(metrics):
    metrics.update_epoch_sizes(3, 1)
    text = metrics.export().decode("utf-8")
    assert "# TYPE finalized_miners gauge" in text
    assert "finalized_miners 3.0" in text
