"""
Unit Tests for weight calculations
"""

import pytest

from calculator import MetricsCalculator


class TestNormalizeMetrics:

    def test_bare_number_is_weight(self):
        assert MetricsCalculator.normalize_metrics(1200) == {"weight": 1200}

    def test_numeric_string_converted(self):
        assert MetricsCalculator.normalize_metrics({"weight": "1500", "length": "12.5"}) == {
            "weight": 1500,
            "length": 12.5,
        }

    def test_none_and_unknown_fields_dropped(self):
        metrics = {"weight": 100, "length": None, "colour": "red"}
        assert MetricsCalculator.normalize_metrics(metrics) == {"weight": 100}

    @pytest.mark.parametrize("metrics", [True, "abc", [100], {"weight": object()}])
    def test_invalid_metrics_raise(self, metrics):
        with pytest.raises(ValueError):
            MetricsCalculator.normalize_metrics(metrics)

    @pytest.mark.parametrize("metrics", [
        "nan",
        "inf",
        float("nan"),
        float("inf"),
        -5,
        {"weight": 100, "length": -10},
        {"height": "-1"},
    ])
    def test_non_finite_or_negative_metrics_raise(self, metrics):
        with pytest.raises(ValueError):
            MetricsCalculator.normalize_metrics(metrics)

    def test_zero_allowed(self):
        assert MetricsCalculator.normalize_metrics({"weight": 0}) == {"weight": 0}


class TestResolveWeight:

    def test_volumetric_formula(self):
        assert MetricsCalculator.volumetric_weight(20, 10, 10) == pytest.approx(1000 / 3)

    def test_volumetric_used_when_weight_missing(self):
        resolved = MetricsCalculator.resolve_weight({"length": 20, "width": 10, "height": 10})
        assert resolved["weight"] == pytest.approx(333.3333, rel=1e-6)

    def test_heavier_volumetric_wins(self):
        resolved = MetricsCalculator.resolve_weight(
            {"weight": 100, "length": 100, "width": 100, "height": 100}
        )
        assert resolved["weight"] == pytest.approx(100 * 100 * 100 / 6000 * 1000)

    def test_heavier_actual_weight_kept(self):
        resolved = MetricsCalculator.resolve_weight(
            {"weight": 2000, "length": 10, "width": 10, "height": 10}
        )
        assert resolved["weight"] == 2000

    def test_partial_dimensions_leave_weight_alone(self):
        metrics = {"length": 20, "width": 10}
        assert MetricsCalculator.resolve_weight(metrics) == metrics

    def test_input_not_mutated(self):
        metrics = {"length": 20, "width": 10, "height": 10}
        MetricsCalculator.resolve_weight(metrics)
        assert "weight" not in metrics
