# intentnet/ml_engine/training/trainer.py
"""
Online perceptron trainer

Runs the epoch loop over the encoded training set with a momentum update
rule and a decaying learning rate, until the epoch cap is hit or the mean
error / error delta drop below their thresholds.
"""

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from intentnet.config.settings import NeuralSettings
from intentnet.encoding.types import SparseVector, TrainingExample
from intentnet.ml_engine.models.perceptron import Perceptron, PerceptronEnsemble
from intentnet.utils.validation import validate_training_examples


@dataclass
class TrainingStatus:
    """
    Progress of one training session.

    Attributes:
        iterations: Epochs run so far
        error: Mean squared error of the last epoch
        delta_error: |error - previous error|
    """

    iterations: int = 0
    error: float = math.inf
    delta_error: float = math.inf


@dataclass(frozen=True)
class EpochEvent:
    """Structured progress event emitted once per epoch"""

    epoch: int
    mean_error: float
    delta_error: float
    elapsed_ms: float


EpochSink = Callable[[EpochEvent], None]


def default_epoch_sink(event: EpochEvent):
    logger.info(f"Epoch {event.epoch} loss {event.mean_error} time {event.elapsed_ms:.0f}ms")


def decayed_learning_rate(learning_rate: float, iteration: int) -> float:
    """Step size for an epoch: lr / (1 + 0.001 * iteration)"""
    return learning_rate / (1 + 0.001 * iteration)


class Trainer:
    """
    Trains a PerceptronEnsemble one-vs-rest with a delta rule.

    Example:
        >>> trainer = Trainer(ensemble, settings, on_epoch=events.append)
        >>> status = trainer.train(encoded.train)
        >>> status.iterations, status.error
    """

    def __init__(
        self,
        ensemble: PerceptronEnsemble,
        settings: NeuralSettings,
        on_epoch: EpochSink | None = None,
    ):
        """
        Initialize trainer

        Args:
            ensemble: Ensemble whose dense weights will be trained
            settings: Resolved hyperparameters
            on_epoch: Sink receiving one EpochEvent per epoch; when omitted the
                ``log`` option decides (True -> loguru, callable -> that callable)
        """
        self.ensemble = ensemble
        self.settings = settings
        if on_epoch is None:
            on_epoch = settings.log_sink or (default_epoch_sink if settings.log else None)
        self.on_epoch = on_epoch
        self.decay_learning_rate = settings.learning_rate

    def activate(self, perceptron: Perceptron, vector: SparseVector) -> float:
        """
        Forward score used while training: 0 if the sum is not positive,
        else alpha * sum.
        """
        total = perceptron.bias + float(vector.values @ perceptron.weights[vector.indices])
        return 0.0 if total <= 0 else self.settings.alpha * total

    def train_perceptron(self, perceptron: Perceptron, data: list[TrainingExample]) -> float:
        """
        Run one epoch of updates for a single perceptron.

        Args:
            perceptron: Unit to update
            data: Training examples

        Returns:
            Sum of squared errors over the examples
        """
        alpha = self.settings.alpha
        momentum = self.settings.momentum
        weights, changes = perceptron.weights, perceptron.changes
        dlr = self.decay_learning_rate
        error = 0.0

        for example in data:
            actual_output = self.activate(perceptron, example.input)
            expected_output = example.output.get(perceptron.id)
            current_error = expected_output - actual_output
            if current_error == 0:
                continue

            error += current_error**2
            delta = (1 if actual_output > 0 else alpha) * current_error * dlr
            indices = example.input.indices
            change = delta * example.input.values + momentum * changes[indices]
            changes[indices] = change
            weights[indices] += change
            perceptron.bias += delta

        return error

    def train(
        self,
        data: list[TrainingExample],
        status: TrainingStatus | None = None,
        stop_event: threading.Event | None = None,
    ) -> TrainingStatus:
        """
        Train until one of the stop conditions holds, then freeze the ensemble.

        Args:
            data: Encoded training examples
            status: Status of the session to resume (a new one if omitted)
            stop_event: Checked once per epoch; when set, training stops early

        Returns:
            Final TrainingStatus

        Raises:
            InvalidCorpus: If the training set is empty or malformed
            MalformedState: If the ensemble no longer has dense weights
        """
        data = validate_training_examples(data)
        self.ensemble.require_dense()
        status = status or TrainingStatus()

        settings = self.settings
        num_perceptrons = self.ensemble.num_perceptrons

        logger.info(
            f"Training {num_perceptrons} perceptrons on {len(data)} examples "
            f"(lr={settings.learning_rate}, momentum={settings.momentum}, alpha={settings.alpha})"
        )

        while (
            status.iterations < settings.iterations
            and status.error > settings.error_thresh
            and status.delta_error > settings.delta_error_thresh
        ):
            if stop_event is not None and stop_event.is_set():
                logger.warning(f"Training cancelled after {status.iterations} epochs")
                break

            epoch_start = time.perf_counter()
            status.iterations += 1
            self.decay_learning_rate = decayed_learning_rate(
                settings.learning_rate, status.iterations
            )
            last_error = status.error

            total_error = 0.0
            for perceptron in self.ensemble.perceptrons:
                total_error += self.train_perceptron(perceptron, data)

            status.error = total_error / (num_perceptrons * len(data))
            status.delta_error = abs(status.error - last_error)

            if self.on_epoch is not None:
                self.on_epoch(
                    EpochEvent(
                        epoch=status.iterations,
                        mean_error=status.error,
                        delta_error=status.delta_error,
                        elapsed_ms=(time.perf_counter() - epoch_start) * 1000,
                    )
                )

        self.finalize()
        return status

    def finalize(self):
        """Freeze the ensemble into its sparse index and drop training buffers"""
        self.ensemble.to_sparse_index()
        if not self.settings.keep_weights_and_changes:
            self.ensemble.discard_training_state(keep_dense=self.settings.multi)
