# intentnet/ml_engine/training/__init__.py
"""
Training Module for intentnet

Trainer:
- Online momentum updates, one perceptron at a time
- Decaying learning rate, recomputed once per epoch
- Stops on epoch cap, error threshold or error-delta threshold
- Structured per-epoch events through an injected sink

Usage:
    from intentnet.ml_engine.training import Trainer

    trainer = Trainer(ensemble, settings)
    status = trainer.train(encoded.train)
"""

from intentnet.ml_engine.training.trainer import (
    EpochEvent,
    Trainer,
    TrainingStatus,
    decayed_learning_rate,
    default_epoch_sink,
)

__all__ = [
    "Trainer",
    "TrainingStatus",
    "EpochEvent",
    "decayed_learning_rate",
    "default_epoch_sink",
]
