# intentnet/__init__.py
"""
intentnet - Perceptron Intent Classifier

This package provides:
- Bag-of-words encoding of labeled utterance corpora
- One-vs-rest perceptron training with momentum and learning-rate decay
- Sparse inference with squared score normalization and result caching
- Multi-intent segmentation of compound utterances
- Persistence of trained classifiers as plain JSON records
"""

__version__ = "1.0.0"
__license__ = "MIT"

from intentnet.neural import NeuralClassifier, measure, run, train
from intentnet.utils.validation import (
    InvalidCorpus,
    MalformedState,
    NoCorpusAvailable,
    ValidationError,
)

# Package metadata
PACKAGE_INFO = {
    "name": "intentnet",
    "version": __version__,
    "description": "Perceptron intent classifier with multi-intent segmentation",
    "modules": [
        "config",
        "encoding",
        "ml_engine",
        "storage",
        "utils",
    ],
}


def get_version() -> str:
    """Return the current package version."""
    return __version__


def get_package_info() -> dict:
    """Return package metadata information."""
    return PACKAGE_INFO.copy()


__all__ = [
    "__version__",
    "__license__",
    "NeuralClassifier",
    "train",
    "run",
    "measure",
    "ValidationError",
    "InvalidCorpus",
    "MalformedState",
    "NoCorpusAvailable",
    "get_version",
    "get_package_info",
    "PACKAGE_INFO",
]
