import pytest

from jointlog.analysis.rate import RateEstimator


def test_rate_estimator_estimates_rate_for_regular_samples() -> None:
    est = RateEstimator(window_size=100)
    t = 0.0
    for _ in range(100):
        est.add_sample_time(t)
        t += 0.01  # 100 Hz
    assert 99.0 < est.estimated_hz < 101.0
    assert est.buffer_span_s == pytest.approx(0.99)


def test_rate_estimator_window_drops_old_samples() -> None:
    est = RateEstimator(window_size=5)
    est.feed_times([0.0, 0.1, 0.2])  # 10 Hz
    est.feed_times([0.2 + 0.01 * k for k in range(1, 6)])  # then 100 Hz
    assert est.estimated_hz == pytest.approx(100.0)


def test_rate_estimator_defaults_without_enough_samples() -> None:
    est = RateEstimator(default_hz=5.0)
    assert est.estimated_hz == 5.0
    est.add_sample_time(1.0)
    est.add_sample_time(1.0)
    assert est.estimated_hz == 5.0
    est.reset()
    assert est.buffer_span_s == 0.0


def test_rate_estimator_requires_window() -> None:
    with pytest.raises(ValueError):
        RateEstimator(window_size=1)


def test_rate_estimator_jitter() -> None:
    est = RateEstimator(window_size=10)
    est.feed_times([0.0, 0.01, 0.02, 0.03])
    assert est.jitter_s == pytest.approx(0.0, abs=1e-12)
    est.reset()
    est.feed_times([0.0, 0.01, 0.03])  # intervals 10 ms and 20 ms
    assert est.jitter_s == pytest.approx(0.005)
