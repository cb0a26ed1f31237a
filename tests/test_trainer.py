# tests/test_trainer.py
"""
Unit tests for the perceptron trainer
Run with: pytest tests/test_trainer.py -v
"""

import math
import threading

import numpy as np
import pytest

from intentnet.config.settings import resolve_settings
from intentnet.encoding.encoder import Encoder
from intentnet.encoding.types import SparseVector
from intentnet.ml_engine.models.perceptron import PerceptronEnsemble
from intentnet.ml_engine.training.trainer import (
    Trainer,
    TrainingStatus,
    decayed_learning_rate,
)
from intentnet.utils.validation import InvalidCorpus, MalformedState


@pytest.fixture
def encoded(toy_corpus):
    encoder = Encoder()
    return encoder, encoder.encode_corpus(toy_corpus)


def make_trainer(encoder, events=None, **options):
    ensemble = PerceptronEnsemble().initialize(encoder.intents, encoder.num_features)
    settings = resolve_settings(options)
    on_epoch = events.append if events is not None else None
    return ensemble, Trainer(ensemble, settings, on_epoch=on_epoch)


class TestLearningRate:
    """Tests for the learning-rate schedule"""

    def test_decay(self):
        """Test lr / (1 + 0.001 * iteration)"""
        assert decayed_learning_rate(0.6, 0) == 0.6
        assert decayed_learning_rate(0.6, 1000) == pytest.approx(0.3)


class TestActivation:
    """Tests for the training activation"""

    def test_non_positive_sum_is_zero(self, fast_settings):
        """Test a non-positive sum gives 0"""
        ensemble = PerceptronEnsemble().initialize(["a"], num_features=2)
        perceptron = ensemble.perceptrons[0]
        perceptron.weights[:] = [-1.0, 0.5]
        trainer = Trainer(ensemble, fast_settings)

        assert trainer.activate(perceptron, SparseVector.from_keys([0])) == 0.0
        assert trainer.activate(perceptron, SparseVector.from_keys([])) == 0.0

    def test_positive_sum_is_scaled(self, fast_settings):
        """Test a positive sum gives alpha * sum"""
        ensemble = PerceptronEnsemble().initialize(["a"], num_features=2)
        perceptron = ensemble.perceptrons[0]
        perceptron.weights[:] = [-1.0, 2.0]
        perceptron.bias = 1.0
        trainer = Trainer(ensemble, fast_settings)

        assert trainer.activate(perceptron, SparseVector.from_keys([0, 1])) == pytest.approx(
            fast_settings.alpha * 2.0
        )


class TestTrainer:
    """Tests for the epoch loop"""

    def test_error_decreases(self, encoded):
        """Test the mean error goes down over training"""
        encoder, data = encoded
        events = []
        _, trainer = make_trainer(
            encoder, events, iterations=50, error_thresh=0, delta_error_thresh=0
        )

        status = trainer.train(data.train)

        assert status.iterations == 50
        assert len(events) == 50
        assert events[-1].mean_error < events[0].mean_error
        assert [event.epoch for event in events] == list(range(1, 51))
        assert events[-1].mean_error == status.error

    def test_epoch_cap(self, encoded):
        """Test training never runs past the epoch cap"""
        encoder, data = encoded
        _, trainer = make_trainer(encoder, iterations=5, error_thresh=0, delta_error_thresh=0)

        assert trainer.train(data.train).iterations == 5

    def test_error_threshold_stops(self, encoded):
        """Test a loose error threshold stops after the first epoch"""
        encoder, data = encoded
        _, trainer = make_trainer(encoder, iterations=100, error_thresh=10)

        assert trainer.train(data.train).iterations == 1

    def test_delta_threshold_stops(self, encoded):
        """Test a loose delta threshold stops once a delta is known"""
        encoder, data = encoded
        _, trainer = make_trainer(
            encoder, iterations=100, error_thresh=0, delta_error_thresh=10
        )

        status = trainer.train(data.train)
        assert status.iterations == 2
        assert math.isfinite(status.delta_error)

    def test_first_epoch_delta_is_infinite(self, encoded):
        """Test the first epoch compares against an infinite error"""
        encoder, data = encoded
        events = []
        _, trainer = make_trainer(encoder, events, iterations=1)

        trainer.train(data.train)
        assert events[0].delta_error == math.inf

    def test_empty_training_set(self, encoded):
        """Test an empty training set is rejected"""
        encoder, _ = encoded
        _, trainer = make_trainer(encoder, iterations=5)

        with pytest.raises(InvalidCorpus):
            trainer.train([])

    def test_finalize_builds_index_and_discards(self, encoded):
        """Test training ends with a sparse index and no dense state"""
        encoder, data = encoded
        ensemble, trainer = make_trainer(encoder, iterations=20)

        trainer.train(data.train)

        assert ensemble.sparse_index is not None
        assert len(ensemble.sparse_index) > 0
        assert not ensemble.has_dense_weights

    def test_multi_keeps_dense_weights(self, encoded):
        """Test multi-intent settings keep dense weights but not buffers"""
        encoder, data = encoded
        ensemble, trainer = make_trainer(encoder, iterations=20, multi=True)

        trainer.train(data.train)

        assert ensemble.has_dense_weights
        assert all(p.changes is None for p in ensemble.perceptrons)

    def test_keep_weights_and_changes(self, encoded):
        """Test both buffers survive when requested"""
        encoder, data = encoded
        ensemble, trainer = make_trainer(encoder, iterations=20, keep_weights_and_changes=True)

        trainer.train(data.train)

        assert ensemble.has_dense_weights
        assert all(np.any(p.changes) for p in ensemble.perceptrons)

    def test_discarded_ensemble_cannot_train(self, encoded):
        """Test training again after discarding weights fails"""
        encoder, data = encoded
        _, trainer = make_trainer(encoder, iterations=5)
        trainer.train(data.train)

        with pytest.raises(MalformedState):
            trainer.train(data.train)

    def test_resume_continues_iterations(self, encoded):
        """Test passing the previous status resumes the count"""
        encoder, data = encoded
        ensemble, trainer = make_trainer(
            encoder,
            iterations=5,
            error_thresh=0,
            delta_error_thresh=0,
            keep_weights_and_changes=True,
        )
        status = trainer.train(data.train)

        trainer = Trainer(
            ensemble,
            resolve_settings(
                iterations=8, error_thresh=0, delta_error_thresh=0, keep_weights_and_changes=True
            ),
        )
        status = trainer.train(data.train, status)
        assert status.iterations == 8

    def test_stop_event_before_training(self, encoded):
        """Test a set stop event prevents any epoch"""
        encoder, data = encoded
        ensemble, trainer = make_trainer(encoder, iterations=50)
        stop = threading.Event()
        stop.set()

        status = trainer.train(data.train, stop_event=stop)

        assert status.iterations == 0
        assert ensemble.sparse_index is not None

    def test_stop_event_from_sink(self, encoded):
        """Test cancellation is honored at the next epoch boundary"""
        encoder, data = encoded
        stop = threading.Event()

        def sink(event):
            if event.epoch == 3:
                stop.set()

        ensemble = PerceptronEnsemble().initialize(encoder.intents, encoder.num_features)
        settings = resolve_settings(iterations=50, error_thresh=0, delta_error_thresh=0)
        status = Trainer(ensemble, settings, on_epoch=sink).train(
            data.train, TrainingStatus(), stop_event=stop
        )

        assert status.iterations == 3

    def test_log_option_callable_is_sink(self, encoded):
        """Test a callable log option receives the events"""
        encoder, data = encoded
        events = []
        ensemble = PerceptronEnsemble().initialize(encoder.intents, encoder.num_features)
        settings = resolve_settings(
            iterations=3, error_thresh=0, delta_error_thresh=0, log=events.append
        )

        Trainer(ensemble, settings).train(data.train)

        assert len(events) == 3
