# intentnet/ml_engine/__init__.py
"""
Machine Learning Engine Module for intentnet

Models:
- PerceptronEnsemble: One linear unit per intent
- SparseWeightIndex: Feature -> perceptron weights, used for serving

Training:
- Trainer: Momentum delta rule with a decaying learning rate
- TrainingStatus / EpochEvent: Progress reporting

Inference:
- InferenceEngine: Sparse scoring with squared normalization
- MultiIntentSegmenter: Recursive split search for multi-intent queries

Evaluation:
- MeasureResult: Top-1 accuracy counts
- IntentMetrics: Per-intent precision / recall / F1

Usage:
    from intentnet.ml_engine import PerceptronEnsemble, Trainer

    ensemble = PerceptronEnsemble().initialize(encoder.intents, encoder.num_features)
    status = Trainer(ensemble, settings).train(encoded.train)
"""

from intentnet.ml_engine.evaluation import IntentMetrics, MeasureResult
from intentnet.ml_engine.inference import (
    Classification,
    InferenceEngine,
    MultiIntentResult,
    MultiIntentSegmenter,
    Segment,
)
from intentnet.ml_engine.models import Perceptron, PerceptronEnsemble, SparseWeightIndex
from intentnet.ml_engine.training import EpochEvent, Trainer, TrainingStatus

__all__ = [
    # Models
    "Perceptron",
    "PerceptronEnsemble",
    "SparseWeightIndex",
    # Training
    "Trainer",
    "TrainingStatus",
    "EpochEvent",
    # Inference
    "InferenceEngine",
    "MultiIntentSegmenter",
    "Classification",
    "MultiIntentResult",
    "Segment",
    # Evaluation
    "IntentMetrics",
    "MeasureResult",
]
