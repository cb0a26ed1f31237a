# tests/test_metrics.py
"""
Unit tests for evaluation metrics
Run with: pytest tests/test_metrics.py -v
"""

import pytest

from intentnet.ml_engine.evaluation.metrics import IntentMetrics, MeasureResult


class TestMeasureResult:
    """Tests for MeasureResult"""

    def test_accuracy(self):
        assert MeasureResult(good=3, total=4).accuracy == 0.75

    def test_empty(self):
        """Test an empty measurement has zero accuracy"""
        assert MeasureResult().accuracy == 0.0


class TestIntentMetrics:
    """Tests for IntentMetrics"""

    @pytest.fixture
    def predictions(self):
        y_true = ["greet", "greet", "bye", "bye", "weather"]
        y_pred = ["greet", "bye", "bye", "bye", "None"]
        return y_true, y_pred

    def test_all_metrics(self, predictions):
        """Test accuracy and averages"""
        metrics = IntentMetrics.calculate_all_metrics(*predictions)

        assert metrics["accuracy"] == pytest.approx(0.6)
        assert set(metrics["per_intent"]) == {"greet", "bye", "weather"}
        assert set(metrics["macro"]) == {"precision", "recall", "f1"}

    def test_per_intent(self, predictions):
        """Test per-intent precision and recall"""
        per_intent = IntentMetrics.calculate_all_metrics(*predictions)["per_intent"]

        assert per_intent["greet"]["precision"] == pytest.approx(1.0)
        assert per_intent["greet"]["recall"] == pytest.approx(0.5)
        assert per_intent["bye"]["precision"] == pytest.approx(2 / 3)
        assert per_intent["weather"]["f1"] == 0.0
        assert per_intent["bye"]["support"] == 2

    def test_worst_intents(self, predictions):
        """Test intents are ranked by ascending F1"""
        per_intent = IntentMetrics.calculate_all_metrics(*predictions)["per_intent"]
        worst = IntentMetrics.worst_intents(per_intent, top_n=1)

        assert worst == [("weather", 0.0)]

    def test_no_samples(self):
        assert IntentMetrics.calculate_all_metrics([], []) == {}
