# intentnet/utils/__init__.py
"""
Utilities Module for intentnet

Validation:
- validate_corpus: Unwrap and check a raw training corpus
- validate_training_examples: Check encoded examples before training
- validate_measure_corpus: Check an external measurement corpus
- validate_state: Check a persisted classifier record

Errors:
- ValidationError, InvalidCorpus, MalformedState, NoCorpusAvailable
"""

from intentnet.utils.validation import (
    InvalidCorpus,
    MalformedState,
    NoCorpusAvailable,
    ValidationError,
    validate_corpus,
    validate_measure_corpus,
    validate_state,
    validate_training_examples,
)

__all__ = [
    "ValidationError",
    "InvalidCorpus",
    "MalformedState",
    "NoCorpusAvailable",
    "validate_corpus",
    "validate_training_examples",
    "validate_measure_corpus",
    "validate_state",
]
