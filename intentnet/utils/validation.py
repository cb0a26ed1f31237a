# intentnet/utils/validation.py
"""
Input validation utilities for intentnet

Provides the error taxonomy and consistent validation of corpora and
persisted state across all modules.
"""

from collections.abc import Mapping
from typing import Any


class ValidationError(Exception):
    """Base exception for validation errors"""

    pass


class InvalidCorpus(ValidationError):
    """Empty or malformed training or measurement input"""

    pass


class MalformedState(ValidationError):
    """Persisted or in-memory classifier state missing required fields"""

    pass


class NoCorpusAvailable(ValidationError):
    """Measurement requested with no validation split and no external corpus"""

    pass


def validate_corpus(corpus: Any) -> list[dict]:
    """
    Validate a raw corpus and unwrap it to its list of items.

    Args:
        corpus: Either a list of items or a mapping with a ``data`` list

    Returns:
        List of corpus items

    Raises:
        InvalidCorpus: If the corpus is empty or not a list of mappings
    """
    if isinstance(corpus, Mapping):
        corpus = corpus.get("data")

    if not corpus or not isinstance(corpus, list):
        raise InvalidCorpus("Invalid corpus received")

    for position, item in enumerate(corpus):
        if not isinstance(item, Mapping):
            raise InvalidCorpus(f"Corpus item {position} must be an object")

    return corpus


def validate_training_examples(examples: Any) -> list:
    """
    Validate encoded training examples before any epoch runs.

    Args:
        examples: Sequence of TrainingExample-like objects

    Returns:
        The examples as a list

    Raises:
        InvalidCorpus: If there are no examples or one lacks input/output
    """
    if not examples:
        raise InvalidCorpus("Invalid corpus received")

    for position, example in enumerate(examples):
        if getattr(example, "input", None) is None or getattr(example, "output", None) is None:
            raise InvalidCorpus(f"Training example {position} is missing input or output")

    return list(examples)


def validate_measure_corpus(corpus: Any) -> list[dict]:
    """
    Validate an external measurement corpus of ``{intent, tests}`` items.

    Raises:
        InvalidCorpus: If the corpus is empty or an item lacks intent/tests
    """
    items = validate_corpus(corpus)

    for position, item in enumerate(items):
        tests = item.get("tests", [])
        if "intent" not in item or not isinstance(tests, list):
            raise InvalidCorpus(f"Measurement item {position} needs an intent and a tests list")
        if not all(isinstance(test, str) for test in tests):
            raise InvalidCorpus(f"Measurement item {position} tests must be text")

    return items


def validate_state(record: Any) -> Mapping:
    """
    Validate a persisted classifier record.

    Args:
        record: Mapping produced by StateCodec.serialize

    Returns:
        The record

    Raises:
        MalformedState: If the weights index or a perceptron name/id is missing
    """
    if not isinstance(record, Mapping):
        raise MalformedState("Classifier state must be an object")

    weights = record.get("weightsIndex", record.get("weightsDict"))
    if not isinstance(weights, list):
        raise MalformedState("Classifier state is missing the weights index")

    perceptrons = record.get("perceptrons")
    if not isinstance(perceptrons, list):
        raise MalformedState("Classifier state is missing the perceptrons list")
    for position, perceptron in enumerate(perceptrons):
        if not isinstance(perceptron, Mapping):
            raise MalformedState(f"Perceptron {position} must be an object")
        if perceptron.get("name") is None or perceptron.get("id") is None:
            raise MalformedState(f"Perceptron {position} is missing its name or id")

    return record
