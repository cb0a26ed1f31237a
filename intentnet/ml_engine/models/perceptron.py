# intentnet/ml_engine/models/perceptron.py
"""
Perceptron ensemble: one linear unit per intent

Training works on dense per-intent weight vectors. Serving works on the
sparse transpose of those vectors (feature -> perceptron weights), built
once by ``to_sparse_index`` after training.
"""

from dataclasses import dataclass, field

import numpy as np
from loguru import logger

from intentnet.utils.validation import MalformedState


@dataclass
class Perceptron:
    """
    Linear unit dedicated to one intent.

    Attributes:
        id: Position of the intent in the intent vocabulary
        name: Intent label
        weights: Dense weights sized to the feature vocabulary (None once discarded)
        bias: Bias term
        changes: Momentum buffer, training only (None once discarded)
    """

    id: int
    name: str
    weights: np.ndarray | None = None
    bias: float = 0.0
    changes: np.ndarray | None = None


@dataclass
class IndexEntry:
    """Nonzero perceptron weights for one feature"""

    data: dict[int, float] = field(default_factory=dict)
    keys: list[int] = field(default_factory=list)


class SparseWeightIndex:
    """
    Transpose of the dense weights: feature index -> {perceptron id: weight}.

    Only features with at least one nonzero weight have an entry. Read-only
    once built, so concurrent readers need no locking.
    """

    def __init__(self, num_features: int, entries: dict[int, IndexEntry] | None = None):
        self.num_features = num_features
        self.entries: dict[int, IndexEntry] = entries or {}

    def get(self, feature: int) -> IndexEntry | None:
        return self.entries.get(feature)

    def add(self, feature: int, perceptron_id: int, weight: float):
        entry = self.entries.setdefault(feature, IndexEntry())
        if perceptron_id not in entry.data:
            entry.keys.append(perceptron_id)
        entry.data[perceptron_id] = weight

    def shrink(self, decimals: int = 5):
        """Round every weight, dropping the ones that become zero"""
        for feature in list(self.entries):
            entry = self.entries[feature]
            for perceptron_id in list(entry.keys):
                weight = round(entry.data[perceptron_id], decimals)
                if weight == 0:
                    del entry.data[perceptron_id]
                    entry.keys.remove(perceptron_id)
                else:
                    entry.data[perceptron_id] = weight
            if not entry.keys:
                del self.entries[feature]

    def to_records(self) -> list[dict[int, float]]:
        """One mapping per feature, ``{}`` where the feature has no entry"""
        records = []
        for feature in range(self.num_features):
            entry = self.entries.get(feature)
            records.append(dict(entry.data) if entry else {})
        return records

    @classmethod
    def from_records(cls, records: list[dict]) -> "SparseWeightIndex":
        """Rebuild an index from ``to_records`` output (JSON string keys allowed)"""
        index = cls(len(records))
        for feature, data in enumerate(records):
            for perceptron_id, weight in (data or {}).items():
                if weight:
                    index.add(feature, int(perceptron_id), float(weight))
        return index

    def __contains__(self, feature: int) -> bool:
        return feature in self.entries

    def __len__(self) -> int:
        return len(self.entries)


class PerceptronEnsemble:
    """
    One perceptron per intent, sharing a feature vocabulary.

    Example:
        >>> ensemble = PerceptronEnsemble()
        >>> ensemble.initialize(["greet", "bye"], num_features=120)
        >>> # ... Trainer mutates dense weights ...
        >>> index = ensemble.to_sparse_index()
        >>> ensemble.discard_training_state(keep_dense=False)
    """

    def __init__(self):
        self.perceptrons: list[Perceptron] = []
        self.perceptron_by_name: dict[str, Perceptron] = {}
        self.num_features = 0
        self.sparse_index: SparseWeightIndex | None = None

    def initialize(self, intents: list[str], num_features: int) -> "PerceptronEnsemble":
        """
        Allocate zeroed perceptrons for every intent.

        Args:
            intents: Intent vocabulary, in id order
            num_features: Feature vocabulary size

        Returns:
            self
        """
        self.num_features = num_features
        self.perceptrons = []
        self.perceptron_by_name = {}
        self.sparse_index = None

        for position, name in enumerate(intents):
            perceptron = Perceptron(
                id=position,
                name=name,
                weights=np.zeros(num_features, dtype=np.float32),
                changes=np.zeros(num_features, dtype=np.float32),
            )
            self.perceptrons.append(perceptron)
            self.perceptron_by_name[name] = perceptron

        logger.debug(f"Initialized {len(intents)} perceptrons over {num_features} features")
        return self

    @property
    def num_perceptrons(self) -> int:
        return len(self.perceptrons)

    @property
    def intents(self) -> list[str]:
        return [perceptron.name for perceptron in self.perceptrons]

    @property
    def has_dense_weights(self) -> bool:
        return bool(self.perceptrons) and all(
            perceptron.weights is not None for perceptron in self.perceptrons
        )

    def by_name(self, intent: str) -> Perceptron | None:
        return self.perceptron_by_name.get(intent)

    def require_dense(self):
        """
        Make sure every perceptron has dense weights and a momentum buffer.

        Raises:
            MalformedState: If the dense weights were discarded
        """
        if not self.has_dense_weights:
            raise MalformedState(
                "Dense perceptron weights are not available; "
                "train with keep_weights_and_changes or multi enabled"
            )
        for perceptron in self.perceptrons:
            if perceptron.changes is None:
                perceptron.changes = np.zeros(self.num_features, dtype=np.float32)

    def to_sparse_index(self) -> SparseWeightIndex:
        """
        Build the sparse serving index from the dense weights.

        Scans every feature of every perceptron; runs once after training.

        Returns:
            SparseWeightIndex, also kept as ``self.sparse_index``
        """
        if not self.has_dense_weights:
            raise MalformedState("Cannot build the weights index without dense weights")

        index = SparseWeightIndex(self.num_features)
        matrix = np.vstack([perceptron.weights for perceptron in self.perceptrons])
        for feature in range(self.num_features):
            column = matrix[:, feature]
            for perceptron_id in np.flatnonzero(column).tolist():
                index.add(feature, perceptron_id, float(column[perceptron_id]))

        self.sparse_index = index
        logger.debug(f"Weights index built: {len(index)}/{self.num_features} active features")
        return index

    def discard_training_state(self, keep_dense: bool = False):
        """
        Free training-only buffers.

        Args:
            keep_dense: Keep the dense weights (needed for multi-intent scoring)
        """
        for perceptron in self.perceptrons:
            perceptron.changes = None
            if not keep_dense:
                perceptron.weights = None
