# intentnet/encoding/encoder.py
"""
Bag-of-words feature encoder

Turns a labeled corpus into sparse training examples and live text into
sparse input vectors. Feature and intent indices are assigned in order of
first appearance, so the same corpus always yields the same vocabulary.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from loguru import logger

from intentnet.encoding.tokenizer import Tokenizer
from intentnet.encoding.types import EncodedCorpus, SparseVector, TrainingExample
from intentnet.storage.lru_cache import LRUCache
from intentnet.utils.validation import InvalidCorpus, MalformedState, validate_corpus


class FeatureEncoding(ABC):
    """
    Interface the classifier needs from a text encoder
    """

    intents: list[str]
    features: list[str]

    @abstractmethod
    def encode_corpus(self, corpus: list[dict]) -> EncodedCorpus:
        pass

    @abstractmethod
    def process_text(self, text: str) -> SparseVector:
        pass

    @abstractmethod
    def process_text_full(self, text: str) -> SparseVector:
        pass

    def get_intent(self, intent_id: int) -> str:
        return self.intents[intent_id]

    def reset(self) -> "FeatureEncoding":
        """Forget both vocabularies"""
        return self.from_json({"intents": [], "features": []})

    @abstractmethod
    def to_json(self) -> dict[str, Any]:
        pass

    @abstractmethod
    def from_json(self, record: dict[str, Any]) -> "FeatureEncoding":
        pass


class Encoder(FeatureEncoding):
    """
    Encoder producing binary bag-of-words vectors.

    Corpus items look like::

        {"intent": "smalltalk.birthday",
         "utterances": ["when is your birthday"],
         "tests": ["what day were you born"]}

    Utterances feed the training split and ``tests`` the validation split.

    Example:
        >>> encoder = Encoder()
        >>> encoded = encoder.encode_corpus(corpus)
        >>> vector = encoder.process_text("when is your birthday?")
    """

    def __init__(
        self,
        processor: Callable[[str], list[str]] | None = None,
        use_cache: bool = True,
        cache_size: int = 10000,
    ):
        """
        Initialize encoder.

        Args:
            processor: Optional text -> tokens function replacing the tokenizer
            use_cache: Cache tokenized texts
            cache_size: Capacity of the token cache
        """
        self.tokenizer = Tokenizer(processor=processor)
        self.cache = LRUCache(cache_size) if use_cache else None

        self.intents: list[str] = []
        self.features: list[str] = []
        self.intent_map: dict[str, int] = {}
        self.feature_map: dict[str, int] = {}

    @property
    def num_features(self) -> int:
        return len(self.features)

    def tokenize(self, text: str) -> list[str]:
        """Tokenize with the cache in front of the tokenizer"""
        if self.cache is None:
            return self.tokenizer.tokenize(text)

        tokens = self.cache.get(text)
        if tokens is None:
            tokens = self.tokenizer.tokenize(text)
            self.cache.put(text, tokens)
        return list(tokens)

    def add_intent(self, intent: str) -> int:
        if intent not in self.intent_map:
            self.intent_map[intent] = len(self.intents)
            self.intents.append(intent)
        return self.intent_map[intent]

    def add_feature(self, feature: str) -> int:
        if feature not in self.feature_map:
            self.feature_map[feature] = len(self.features)
            self.features.append(feature)
        return self.feature_map[feature]

    def encode_corpus(self, corpus: list[dict]) -> EncodedCorpus:
        """
        Build the vocabularies and encode both splits.

        Args:
            corpus: List of ``{intent, utterances, tests?}`` items

        Returns:
            EncodedCorpus with train and validation examples

        Raises:
            InvalidCorpus: If an item has no intent, no utterance list or non-text entries
        """
        items = validate_corpus(corpus)

        # Nothing is registered until every item is well formed
        for position, item in enumerate(items):
            intent = item.get("intent")
            utterances = item.get("utterances")
            if not intent or not isinstance(utterances, list):
                raise InvalidCorpus(f"Corpus item {position} needs an intent and utterances")
            tests = item.get("tests") or []
            if not isinstance(tests, list) or not all(
                isinstance(text, str) for text in utterances + tests
            ):
                raise InvalidCorpus(f"Corpus item {position} utterances and tests must be text")

        # First pass registers every intent and utterance token
        for item in items:
            self.add_intent(item["intent"])
            for utterance in item["utterances"]:
                for token in self.tokenize(utterance):
                    self.add_feature(token)

        encoded = EncodedCorpus()
        for item in items:
            output = SparseVector.from_keys([self.intent_map[item["intent"]]])
            for utterance in item["utterances"]:
                encoded.train.append(
                    TrainingExample(input=self.process_text(utterance), output=output)
                )
            for test in item.get("tests") or []:
                encoded.validation.append(
                    TrainingExample(input=self.process_text(test), output=output)
                )

        logger.info(
            f"Encoded corpus: {len(self.intents)} intents, {len(self.features)} features, "
            f"{len(encoded.train)} train / {len(encoded.validation)} validation examples"
        )
        return encoded

    def text_to_keys(self, text: str) -> list[int]:
        """Known feature indices in token order, repeats included"""
        return [
            self.feature_map[token] for token in self.tokenize(text) if token in self.feature_map
        ]

    def process_text(self, text: str) -> SparseVector:
        """
        Encode text as a set of unique known features.

        Args:
            text: Input text

        Returns:
            SparseVector with value 1.0 per active feature
        """
        return SparseVector.from_keys(list(dict.fromkeys(self.text_to_keys(text))))

    def process_text_full(self, text: str) -> SparseVector:
        """
        Encode text keeping token order and repeated tokens.

        Args:
            text: Input text

        Returns:
            SparseVector whose keys follow the text
        """
        return SparseVector.from_keys(self.text_to_keys(text))

    def to_json(self) -> dict[str, Any]:
        return {"intents": list(self.intents), "features": list(self.features)}

    def from_json(self, record: dict[str, Any]) -> "Encoder":
        """
        Restore vocabularies from ``to_json`` output.

        Raises:
            MalformedState: If intents or features are missing
        """
        if not isinstance(record.get("intents"), list) or not isinstance(
            record.get("features"), list
        ):
            raise MalformedState("Encoder state needs intents and features lists")

        self.intents, self.features = [], []
        self.intent_map, self.feature_map = {}, {}
        for intent in record["intents"]:
            self.add_intent(intent)
        for feature in record["features"]:
            self.add_feature(feature)
        return self
