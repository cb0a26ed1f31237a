# intentnet/encoding/types.py
"""
Sparse data containers shared by the encoder, trainer and inference engine
"""

from dataclasses import dataclass, field
from functools import cached_property

import numpy as np


@dataclass
class SparseVector:
    """
    Sparse vector as an ordered list of active indices plus their values.

    Attributes:
        keys: Active feature indices, in order
        data: Value for every index in ``keys``; absent indices are 0
    """

    keys: list[int] = field(default_factory=list)
    data: dict[int, float] = field(default_factory=dict)

    @classmethod
    def from_keys(cls, keys: list[int], value: float = 1.0) -> "SparseVector":
        """Build a vector giving every key the same value"""
        return cls(keys=list(keys), data={key: value for key in keys})

    @cached_property
    def indices(self) -> np.ndarray:
        """Unique keys as an integer array (first occurrence order)"""
        return np.fromiter(dict.fromkeys(self.keys), dtype=np.int64)

    @cached_property
    def values(self) -> np.ndarray:
        """Values aligned with ``indices``"""
        return np.asarray([self.data[key] for key in self.indices.tolist()], dtype=np.float32)

    def get(self, key: int) -> float:
        return self.data.get(key, 0.0)

    def __len__(self) -> int:
        return len(self.keys)


@dataclass
class TrainingExample:
    """One encoded utterance and its one-hot intent target"""

    input: SparseVector
    output: SparseVector


@dataclass
class EncodedCorpus:
    """Encoded training and validation splits"""

    train: list[TrainingExample] = field(default_factory=list)
    validation: list[TrainingExample] = field(default_factory=list)
