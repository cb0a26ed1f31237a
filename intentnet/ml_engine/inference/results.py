# intentnet/ml_engine/inference/results.py
"""
Result containers returned by the inference engine
"""

from dataclasses import asdict, dataclass, field, replace


@dataclass(frozen=True)
class Classification:
    """One intent and its score"""

    intent: str
    score: float


@dataclass
class Segment:
    """
    A span of the utterance classified on its own.

    Attributes:
        tokens: Surface tokens of the span
        embeddings: Feature indices of the span
        classifications: Intent distribution for the span
    """

    tokens: list[str] = field(default_factory=list)
    embeddings: list[int] = field(default_factory=list)
    classifications: list[Classification] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class MultiIntentResult:
    """Whole-utterance classification plus its segmentation"""

    mono_intent: list[Classification]
    multi_intent: list[Segment]

    def to_dict(self) -> dict:
        return {
            "monoIntent": [asdict(item) for item in self.mono_intent],
            "multiIntent": [segment.to_dict() for segment in self.multi_intent],
        }


def square_normalize(classifications: list[Classification]) -> list[Classification]:
    """
    Square every score and divide by the sum of squares.

    Scores are returned squared but unscaled when they sum to zero.
    """
    squared = [replace(item, score=item.score**2) for item in classifications]
    total = sum(item.score for item in squared)
    if total > 0:
        squared = [replace(item, score=item.score / total) for item in squared]
    return squared
