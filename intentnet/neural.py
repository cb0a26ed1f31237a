# intentnet/neural.py
"""
Perceptron intent classifier

High-level entry points tying the encoder, trainer, inference engine and
state codec together:

    net = NeuralClassifier(log=True)
    net.train({"data": corpus})
    net.run("when is your birthday?")
    net.measure()
"""

import threading
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from loguru import logger

from intentnet.config.logging_config import log_training_run, timed_operation
from intentnet.config.settings import NeuralSettings, resolve_settings
from intentnet.encoding.encoder import Encoder, FeatureEncoding
from intentnet.encoding.types import EncodedCorpus
from intentnet.ml_engine.evaluation.metrics import IntentMetrics, MeasureResult
from intentnet.ml_engine.inference.engine import InferenceEngine
from intentnet.ml_engine.inference.results import Classification, MultiIntentResult
from intentnet.ml_engine.models.perceptron import PerceptronEnsemble
from intentnet.ml_engine.training.trainer import EpochSink, Trainer, TrainingStatus
from intentnet.storage import state_codec
from intentnet.storage.state_codec import StateCodec
from intentnet.utils.validation import (
    InvalidCorpus,
    MalformedState,
    NoCorpusAvailable,
    validate_corpus,
    validate_measure_corpus,
)


class NeuralClassifier:
    """
    Trainable intent classifier: one perceptron per intent over a
    bag-of-words vocabulary.

    Options can be given as a NeuralSettings record, a mapping or keyword
    arguments, using either the camelCase names (``errorThresh``) or the
    snake_case field names (``error_thresh``).

    Example:
        >>> net = NeuralClassifier(iterations=500, multi=True)
        >>> status = net.train(corpus)
        >>> net.run("who are you and who is your boss")
        MultiIntentResult(mono_intent=[...], multi_intent=[...])
    """

    def __init__(
        self,
        settings: NeuralSettings | Mapping[str, Any] | None = None,
        encoder: FeatureEncoding | None = None,
        **options: Any,
    ):
        self.settings = resolve_settings(settings, **options)
        self.encoder = encoder or self.new_encoder()
        self.ensemble = PerceptronEnsemble()
        self.status = TrainingStatus()
        self.encoded: EncodedCorpus | None = None
        self.engine: InferenceEngine | None = None

    def new_encoder(self) -> Encoder:
        return Encoder(
            processor=self.settings.processor,
            use_cache=self.settings.use_cache,
            cache_size=self.settings.cache_size,
        )

    def prepare_corpus(self, corpus: Any, keep_vocabulary: bool = False) -> EncodedCorpus:
        """
        Encode a corpus into train / validation examples.

        The encoder is left as it was when the corpus is rejected.

        Args:
            corpus: List of ``{intent, utterances, tests?}`` items or a
                ``{data: [...]}`` wrapper
            keep_vocabulary: Encode against the current vocabulary instead of
                a fresh one; the corpus may not add intents or features

        Raises:
            InvalidCorpus: If the corpus is empty, malformed, has no training
                utterance or extends a kept vocabulary
        """
        corpus = validate_corpus(corpus)
        snapshot = self.encoder.to_json()
        if not keep_vocabulary:
            self.encoder.reset()

        try:
            encoded = self.encoder.encode_corpus(corpus)
            if not encoded.train:
                raise InvalidCorpus("Corpus has no training utterances")
            if keep_vocabulary and self.encoder.to_json() != snapshot:
                raise InvalidCorpus("Corpus adds intents or features to the trained vocabulary")
        except InvalidCorpus:
            self.encoder.from_json(snapshot)
            raise

        self.encoded = encoded
        return encoded

    def initialize(self) -> PerceptronEnsemble:
        """Allocate fresh perceptrons for the encoder's vocabularies"""
        self.ensemble.initialize(self.encoder.intents, len(self.encoder.features))
        self.status = TrainingStatus()
        self.engine = None
        return self.ensemble

    def train(
        self,
        corpus: Any = None,
        on_epoch: EpochSink | None = None,
        stop_event: threading.Event | None = None,
        resume: bool = False,
    ) -> TrainingStatus:
        """
        Train on a corpus, or resume the current session when none is given.

        Args:
            corpus: Raw corpus (list or ``{data: [...]}``)
            on_epoch: Sink for per-epoch events (overrides the ``log`` option)
            stop_event: Set from another thread to stop after the current epoch
            resume: Keep the current weights and vocabulary and continue
                training them on ``corpus`` (needs dense weights, e.g. after
                loading a record saved with ``keep_weights_and_changes``)

        Returns:
            TrainingStatus reached; callers judge quality from ``status.error``

        Raises:
            InvalidCorpus: If the corpus is empty or there is nothing to resume
            MalformedState: If resuming without dense weights
        """
        if corpus is not None and resume:
            self.ensemble.require_dense()
            self.prepare_corpus(corpus, keep_vocabulary=True)
        elif corpus is not None:
            self.prepare_corpus(corpus)
            self.initialize()
        elif self.encoded is None or not self.encoded.train:
            raise InvalidCorpus("Invalid corpus received")

        trainer = Trainer(self.ensemble, self.settings, on_epoch=on_epoch)
        with timed_operation("Perceptron training", log_level="DEBUG") as timer:
            trainer.train(self.encoded.train, self.status, stop_event)

        log_training_run(
            num_intents=self.ensemble.num_perceptrons,
            num_features=self.ensemble.num_features,
            train_samples=len(self.encoded.train),
            iterations=self.status.iterations,
            error=self.status.error,
            duration_seconds=timer.duration,
        )
        self.engine = None
        return self.status

    def get_engine(self) -> InferenceEngine:
        if self.ensemble.sparse_index is None:
            raise MalformedState("The classifier has not been trained or loaded")
        if self.engine is None:
            self.engine = InferenceEngine(self.ensemble, self.encoder, self.settings)
        return self.engine

    def run(
        self, text: str, allowed_intents: Iterable[str] | None = None
    ) -> list[Classification] | MultiIntentResult:
        """
        Classify an utterance.

        Args:
            text: Utterance
            allowed_intents: Restrict the answer to these intents

        Returns:
            Classifications sorted by score (the ``none_intent`` sentinel when
            nothing matches), or a MultiIntentResult when ``multi`` is enabled
        """
        return self.get_engine().run(text, allowed_intents)

    def predictions(self, corpus: Any = None) -> tuple[list[str], list[str]]:
        """
        Expected and top predicted intents over the validation split or an
        external ``{intent, tests}`` corpus.

        Raises:
            NoCorpusAvailable: If no corpus is given and there is no validation split
            InvalidCorpus: If the external corpus is malformed
        """
        if corpus is None and (self.encoded is None or not self.encoded.validation):
            raise NoCorpusAvailable("No corpus provided to measure")

        engine = self.get_engine()
        expected, predicted = [], []

        if corpus is not None:
            for item in validate_measure_corpus(corpus):
                for test in item.get("tests", []):
                    expected.append(item["intent"])
                    predicted.append(engine.classify(test)[0].intent)
            return expected, predicted

        for example in self.encoded.validation:
            expected.append(self.encoder.get_intent(example.output.keys[0]))
            predicted.append(engine.score(example.input)[0].intent)
        return expected, predicted

    def measure_corpus(self, corpus: Any) -> MeasureResult:
        """Top-1 hits over an external ``{intent, tests}`` corpus"""
        if corpus is None:
            raise InvalidCorpus("Invalid corpus received")
        return self.measure(corpus)

    def measure(self, corpus: Any = None) -> MeasureResult:
        """
        Count top-1 hits.

        Args:
            corpus: External ``{intent, tests}`` corpus; the validation split
                is used when omitted

        Returns:
            MeasureResult(good, total)
        """
        expected, predicted = self.predictions(corpus)
        good = sum(1 for want, got in zip(expected, predicted) if want == got)
        result = MeasureResult(good=good, total=len(expected))
        logger.info(f"Measured {result.good}/{result.total} ({result.accuracy:.2%})")
        return result

    def evaluate(self, corpus: Any = None) -> dict[str, object]:
        """
        Per-intent precision / recall / F1 report.

        Args:
            corpus: Same as ``measure``
        """
        expected, predicted = self.predictions(corpus)
        seen = set(expected)
        labels = [intent for intent in self.encoder.intents if intent in seen]
        return IntentMetrics.calculate_all_metrics(expected, predicted, labels=labels or None)

    def shrink(self, decimals: int = 5):
        """Round the serving weights, dropping those that round to zero"""
        if self.ensemble.sparse_index is None:
            raise MalformedState("The classifier has not been trained or loaded")
        self.ensemble.sparse_index.shrink(decimals)
        self.engine = None

    def to_json(self, save_changes: bool = False, save_encoder: bool = True) -> dict[str, Any]:
        """
        Persisted record of the classifier.

        Args:
            save_changes: Include momentum buffers, if retained
            save_encoder: Include the encoder vocabularies
        """
        return StateCodec.serialize(
            self.ensemble,
            self.settings,
            encoder=self.encoder,
            save_changes=save_changes,
            save_encoder=save_encoder,
        )

    def from_json(self, record: Any) -> "NeuralClassifier":
        """
        Restore from a record produced by ``to_json``.

        Persisted options are layered over the current ones; the current
        encoder is kept when the record has none. The encoded corpus is kept
        when the vocabulary did not change, so ``train()`` can continue from
        the restored dense weights.

        Raises:
            MalformedState: If the record is incomplete
        """
        vocabulary = self.encoder.to_json()
        decoded = StateCodec.deserialize(record, encoder=self.new_encoder())
        self.settings = self.settings.merge(decoded.options)
        self.ensemble = decoded.ensemble
        if decoded.encoder is not None:
            self.encoder = decoded.encoder
        if self.encoder.to_json() != vocabulary:
            self.encoded = None
        self.status = TrainingStatus()
        self.engine = None
        return self

    def save(self, path: str | Path, save_changes: bool = False) -> str:
        return state_codec.save(self.to_json(save_changes=save_changes), path)

    def load(self, path: str | Path) -> "NeuralClassifier":
        return self.from_json(state_codec.load(path))


def train(corpus: Any, **options: Any) -> NeuralClassifier:
    """
    Train a new classifier

    Args:
        corpus: Raw corpus (list or ``{data: [...]}``)
        **options: Classifier options

    Returns:
        Trained NeuralClassifier
    """
    net = NeuralClassifier(**options)
    net.train(corpus)
    return net


def run(
    net: NeuralClassifier, text: str, allowed_intents: Iterable[str] | None = None
) -> list[Classification] | MultiIntentResult:
    return net.run(text, allowed_intents)


def measure(net: NeuralClassifier, corpus: Any = None) -> MeasureResult:
    return net.measure(corpus)
