# intentnet/ml_engine/inference/engine.py
"""
Inference engine: sparse scoring of encoded text against a trained ensemble
"""

from collections.abc import Iterable

from loguru import logger

from intentnet.config.settings import NeuralSettings
from intentnet.encoding.encoder import FeatureEncoding
from intentnet.encoding.types import SparseVector
from intentnet.ml_engine.inference.results import Classification, MultiIntentResult
from intentnet.ml_engine.inference.segmenter import MultiIntentSegmenter
from intentnet.ml_engine.models.perceptron import PerceptronEnsemble
from intentnet.storage.lru_cache import BoundedCache, LRUCache
from intentnet.utils.validation import MalformedState


class InferenceEngine:
    """
    Scores inputs using the ensemble's sparse weights index.

    An intent is kept only when its score is above ``max(bias, 0)``: at
    least one active feature has to push the perceptron past its own bias.
    Kept scores are squared and normalized to sum to 1.

    Example:
        >>> engine = InferenceEngine(ensemble, encoder, settings)
        >>> engine.run("when is your birthday?")
        [Classification(intent='smalltalk.birthday', score=0.98), ...]
    """

    def __init__(
        self,
        ensemble: PerceptronEnsemble,
        encoder: FeatureEncoding,
        settings: NeuralSettings,
        cache: BoundedCache | None = None,
    ):
        """
        Initialize inference engine

        Args:
            ensemble: Trained ensemble (its sparse index must be built)
            encoder: Encoder used for live text
            settings: Resolved settings
            cache: Result cache for unrestricted queries (an LRUCache is
                created when omitted and ``use_cache`` is enabled)
        """
        self.ensemble = ensemble
        self.encoder = encoder
        self.settings = settings

        if cache is None and settings.use_cache:
            cache = LRUCache(settings.cache_size)
        self.cache = cache if settings.use_cache else None

        self.segmenter = (
            MultiIntentSegmenter(ensemble, encoder, settings) if settings.multi else None
        )

        logger.debug(
            f"InferenceEngine ready (cache={self.cache is not None}, multi={settings.multi})"
        )

    def none_result(self) -> list[Classification]:
        return [Classification(intent=self.settings.none_intent, score=1.0)]

    def score(
        self, vector: SparseVector, allowed_intents: Iterable[str] | None = None
    ) -> list[Classification]:
        """
        Classify an encoded input.

        Args:
            vector: Sparse input
            allowed_intents: Restrict the answer to these intents

        Returns:
            Classifications sorted by descending score, summing to 1, or the
            single none-intent sentinel
        """
        index = self.ensemble.sparse_index
        if index is None:
            raise MalformedState("The classifier has not been trained or loaded")

        perceptrons = self.ensemble.perceptrons
        scores = [perceptron.bias for perceptron in perceptrons]

        for key in dict.fromkeys(vector.keys):
            entry = index.get(key)
            if entry is None:
                continue
            value = vector.get(key)
            for perceptron_id in entry.keys:
                scores[perceptron_id] += entry.data[perceptron_id] * value

        allowed = set(allowed_intents) if allowed_intents is not None else None
        result = []
        for perceptron, score in zip(perceptrons, scores):
            if score > max(perceptron.bias, 0) and (
                allowed is None or perceptron.name in allowed
            ):
                result.append(Classification(intent=perceptron.name, score=score**2))

        total = sum(item.score for item in result)
        if total == 0:
            return self.none_result()

        result = [Classification(intent=item.intent, score=item.score / total) for item in result]
        return sorted(result, key=lambda item: item.score, reverse=True)

    def classify(
        self, text: str, allowed_intents: Iterable[str] | None = None
    ) -> list[Classification]:
        """
        Classify raw text, using the cache for unrestricted queries.

        Restricted queries never read or write the cache because their
        answer depends on the restriction.
        """
        if allowed_intents is not None or self.cache is None:
            return self.score(self.encoder.process_text(text), allowed_intents)

        cached = self.cache.get(text)
        if cached is None:
            cached = tuple(self.score(self.encoder.process_text(text)))
            self.cache.put(text, cached)
        return list(cached)

    def run(
        self, text: str, allowed_intents: Iterable[str] | None = None
    ) -> list[Classification] | MultiIntentResult:
        """
        Answer a query.

        Returns:
            The classification list, or a MultiIntentResult when multi-intent
            detection is enabled
        """
        if allowed_intents is not None:
            allowed_intents = list(allowed_intents)

        result = self.classify(text, allowed_intents)
        if self.segmenter is None:
            return result

        return MultiIntentResult(
            mono_intent=result,
            multi_intent=self.segmenter.run(text, result[0].score, allowed_intents),
        )
