# intentnet/encoding/__init__.py
"""
Text encoding for intentnet

Components:
- tokenizer: Normalization and word tokenization
- encoder: Bag-of-words vocabularies and sparse vectors
- types: SparseVector, TrainingExample, EncodedCorpus
"""

from intentnet.encoding.encoder import Encoder, FeatureEncoding
from intentnet.encoding.tokenizer import Tokenizer, TokenizerConfig
from intentnet.encoding.types import EncodedCorpus, SparseVector, TrainingExample

__all__ = [
    "Encoder",
    "FeatureEncoding",
    "Tokenizer",
    "TokenizerConfig",
    "SparseVector",
    "TrainingExample",
    "EncodedCorpus",
]
