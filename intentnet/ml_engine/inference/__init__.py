# intentnet/ml_engine/inference/__init__.py
"""
Inference Module for intentnet

InferenceEngine:
- Sparse scoring against the transposed weights index
- Squared normalization of surviving intents
- LRU cache for unrestricted text queries

MultiIntentSegmenter:
- Recursive binary split search over the token sequence
- Margin score between best and second-best intent per span
"""

from intentnet.ml_engine.inference.engine import InferenceEngine
from intentnet.ml_engine.inference.results import (
    Classification,
    MultiIntentResult,
    Segment,
    square_normalize,
)
from intentnet.ml_engine.inference.segmenter import (
    MultiIntentSegmenter,
    Slice,
    margin_score,
)

__all__ = [
    "InferenceEngine",
    "MultiIntentSegmenter",
    "Classification",
    "MultiIntentResult",
    "Segment",
    "Slice",
    "margin_score",
    "square_normalize",
]
