# intentnet/ml_engine/models/__init__.py
"""
Model containers for intentnet

PerceptronEnsemble:
- One linear unit per intent
- Dense weights and momentum buffers while training
- Sparse transposed weights index for serving
"""

from intentnet.ml_engine.models.perceptron import (
    IndexEntry,
    Perceptron,
    PerceptronEnsemble,
    SparseWeightIndex,
)

__all__ = [
    "Perceptron",
    "PerceptronEnsemble",
    "SparseWeightIndex",
    "IndexEntry",
]
