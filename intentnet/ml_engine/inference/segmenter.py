# intentnet/ml_engine/inference/segmenter.py
"""
Multi-intent segmentation

Recursively searches for the binary split of an utterance's feature
sequence that classifies better as two spans than as one, and keeps
splitting each accepted span until no split helps.
"""

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
from loguru import logger

from intentnet.config.settings import NeuralSettings
from intentnet.encoding.encoder import FeatureEncoding
from intentnet.ml_engine.inference.results import Classification, Segment, square_normalize
from intentnet.ml_engine.models.perceptron import PerceptronEnsemble
from intentnet.utils.validation import MalformedState

# Minimum raw activation both sides of a split need
MIN_SPLIT_SCORE = 0.5


@dataclass(frozen=True)
class Slice:
    """A span of feature keys and its classification"""

    keys: tuple[int, ...]
    run: tuple[Classification, ...]


def margin_score(result: Iterable[Classification]) -> float:
    """
    Confidence of a classification: top score squared when there is a single
    candidate, else top1^2 - top2^2.
    """
    result = list(result)
    if len(result) == 1:
        return result[0].score**2
    return result[0].score**2 - result[1].score**2


class _SegmentationRun:
    """State of one top-level segmentation: dense weights, input values, memo"""

    def __init__(
        self,
        segmenter: "MultiIntentSegmenter",
        data: dict[int, float],
        allowed_intents: Iterable[str] | None,
    ):
        ensemble = segmenter.ensemble
        allowed = set(allowed_intents) if allowed_intents is not None else None
        perceptrons = [
            perceptron
            for perceptron in ensemble.perceptrons
            if allowed is None or perceptron.name in allowed
        ]

        self.segmenter = segmenter
        self.data = data
        self.names = [perceptron.name for perceptron in perceptrons]
        self.biases = np.asarray([perceptron.bias for perceptron in perceptrons], dtype=np.float64)
        self.weights = (
            np.vstack([perceptron.weights for perceptron in perceptrons]).astype(np.float64)
            if perceptrons
            else np.zeros((0, ensemble.num_features))
        )
        self.memo: dict[tuple[int, ...], tuple[Classification, ...]] = {}

    def score_run(self, keys: tuple[int, ...]) -> tuple[Classification, ...]:
        """
        Classify a span with the dense weights; repeated keys count once.

        Returns:
            Positive activations (alpha * sum, where sum must exceed the bias)
            sorted descending, or the none-intent sentinel
        """
        cached = self.memo.get(keys)
        if cached is not None:
            return cached

        unique = list(dict.fromkeys(keys))
        indices = np.asarray(unique, dtype=np.int64)
        values = np.asarray([self.data.get(key, 0.0) for key in unique], dtype=np.float64)
        sums = self.biases + self.weights[:, indices] @ values

        alpha = self.segmenter.settings.alpha
        outputs = [
            Classification(intent=name, score=float(alpha * total))
            for name, total, bias in zip(self.names, sums, self.biases)
            if total > bias and alpha * total > 0
        ]

        if outputs:
            result = tuple(sorted(outputs, key=lambda item: item.score, reverse=True))
        else:
            result = (Classification(intent=self.segmenter.settings.none_intent, score=1.0),)

        self.memo[keys] = result
        return result

    def best_binary_split(self, keys: tuple[int, ...]) -> list[Slice]:
        """
        Find the best way to cut ``keys`` in two.

        Returns:
            A single Slice for the whole range when no split beats it, else
            the two sub-ranges of the best split
        """
        none_intent = self.segmenter.settings.none_intent
        whole = self.score_run(keys)
        best_score = margin_score(whole)
        best = [Slice(keys, whole)]

        for split in range(1, len(keys)):
            left, right = keys[:split], keys[split:]
            run_left, run_right = self.score_run(left), self.score_run(right)
            score = (margin_score(run_left) + margin_score(run_right)) / 2
            if (
                score > best_score
                and run_left[0].score > MIN_SPLIT_SCORE
                and run_right[0].score > MIN_SPLIT_SCORE
                and run_left[0].intent != none_intent
                and run_right[0].intent != none_intent
            ):
                best_score = score
                best = [Slice(left, run_left), Slice(right, run_right)]

        return best

    def best_slices(self, keys: tuple[int, ...]) -> list[Slice]:
        """Split recursively and return the leaves left to right"""
        slices = self.best_binary_split(keys)
        if len(slices) == 1:
            return slices
        return self.best_slices(slices[0].keys) + self.best_slices(slices[1].keys)


class MultiIntentSegmenter:
    """
    Decides whether an utterance is one intent or several.

    Needs the ensemble's dense weights: spans are arbitrary feature subsets,
    which the sparse index cannot score without a full pass per span.

    Example:
        >>> segmenter = MultiIntentSegmenter(ensemble, encoder, settings)
        >>> segments = segmenter.run("who are you and who is your boss", min_score=0.7)
        >>> [segment.tokens for segment in segments]
        [['who', 'are', 'you', 'and'], ['who', 'is', 'your', 'boss']]
    """

    def __init__(
        self,
        ensemble: PerceptronEnsemble,
        encoder: FeatureEncoding,
        settings: NeuralSettings,
    ):
        self.ensemble = ensemble
        self.encoder = encoder
        self.settings = settings

    def to_segment(self, piece: Slice) -> Segment:
        return Segment(
            tokens=[self.encoder.features[key] for key in piece.keys],
            embeddings=list(piece.keys),
            classifications=list(piece.run),
        )

    def run(
        self,
        text: str,
        min_score: float,
        allowed_intents: Iterable[str] | None = None,
    ) -> list[Segment]:
        """
        Segment and classify an utterance.

        Args:
            text: Raw utterance
            min_score: Top score of the whole-utterance classification; when the
                mean top score of the segments is lower, the whole utterance is
                returned as one segment
            allowed_intents: Restrict scoring to these intents

        Returns:
            Segments with normalized distributions, or the single unnormalized
            fallback segment
        """
        if not self.ensemble.has_dense_weights:
            raise MalformedState("Multi-intent detection needs the dense perceptron weights")

        vector = self.encoder.process_text_full(text)
        keys = tuple(vector.keys)
        state = _SegmentationRun(self, vector.data, allowed_intents)
        slices = state.best_slices(keys)

        mean_score = sum(piece.run[0].score for piece in slices) / len(slices)
        if mean_score < min_score:
            logger.debug(
                f"Segmentation less confident than the whole utterance "
                f"({mean_score:.4f} < {min_score:.4f}); keeping one segment"
            )
            return [self.to_segment(Slice(keys, state.score_run(keys)))]

        segments = []
        for piece in slices:
            segment = self.to_segment(piece)
            segment.classifications = square_normalize(segment.classifications)
            segments.append(segment)
        return segments
