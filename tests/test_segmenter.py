# tests/test_segmenter.py
"""
Unit tests for multi-intent segmentation
Run with: pytest tests/test_segmenter.py -v
"""

import pytest

from intentnet.config.settings import resolve_settings
from intentnet.ml_engine.inference.results import Classification
from intentnet.ml_engine.inference.segmenter import MultiIntentSegmenter, margin_score
from intentnet.utils.validation import MalformedState


@pytest.fixture
def segmenter(hand_ensemble, hand_encoder):
    return MultiIntentSegmenter(hand_ensemble, hand_encoder, resolve_settings(multi=True))


class TestMarginScore:
    """Tests for margin_score"""

    def test_single_candidate(self):
        """Test a lone candidate scores its square"""
        assert margin_score([Classification("a", 0.8)]) == pytest.approx(0.64)

    def test_gap_between_top_two(self):
        """Test the squared gap between the best two candidates"""
        result = [Classification("a", 1.0), Classification("b", 0.5), Classification("c", 0.1)]
        assert margin_score(result) == pytest.approx(0.75)


class TestSegmenter:
    """Tests for MultiIntentSegmenter"""

    def test_splits_two_intents(self, segmenter):
        """Test a two-intent utterance is split where both halves are confident"""
        segments = segmenter.run("hello and weather", min_score=0.5)

        assert [segment.tokens for segment in segments] == [["hello"], ["and", "weather"]]
        assert [segment.embeddings for segment in segments] == [[0], [2, 1]]
        assert segments[0].classifications == [Classification("greet", 1.0)]
        assert segments[1].classifications == [Classification("weather", 1.0)]

    def test_segments_are_normalized(self, segmenter):
        """Test every returned segment distribution sums to 1"""
        for segment in segmenter.run("hello and weather", min_score=0.0):
            assert sum(item.score for item in segment.classifications) == pytest.approx(1.0)

    def test_single_token(self, segmenter):
        """Test one token is always one segment"""
        segments = segmenter.run("weather", min_score=0.0)

        assert len(segments) == 1
        assert segments[0].tokens == ["weather"]
        assert segments[0].classifications[0].intent == "weather"

    def test_fallback_when_less_confident(self, segmenter):
        """Test the whole utterance comes back unnormalized when segments score lower"""
        segments = segmenter.run("hello and weather", min_score=2.0)

        assert len(segments) == 1
        assert segments[0].tokens == ["hello", "and", "weather"]
        scores = [item.score for item in segments[0].classifications]
        # raw alpha * sum for both perceptrons: 0.07 * 10
        assert scores == pytest.approx([0.7, 0.7])

    def test_split_needs_known_intent_on_both_sides(self, segmenter):
        """Test a split leaving the none intent on one side is rejected"""
        segments = segmenter.run("and hello", min_score=0.0)

        assert len(segments) == 1
        assert segments[0].tokens == ["and", "hello"]

    def test_allowed_intents(self, segmenter):
        """Test restricted segmentation only scores allowed intents"""
        segments = segmenter.run("hello and weather", min_score=0.5, allowed_intents=["greet"])

        assert len(segments) == 1
        assert segments[0].classifications == [Classification("greet", 1.0)]

    def test_repeated_tokens_count_once(self, segmenter):
        """Test a span scores each distinct feature once"""
        single = segmenter.run("hello", min_score=0.0)
        repeated = segmenter.run("hello hello", min_score=0.0)

        assert single[0].classifications == repeated[-1].classifications

    def test_unknown_text(self, segmenter):
        """Test text with no known features is one none segment"""
        segments = segmenter.run("xyzzy", min_score=0.0)

        assert len(segments) == 1
        assert segments[0].tokens == []
        assert segments[0].classifications == [Classification("None", 1.0)]

    def test_needs_dense_weights(self, segmenter, hand_ensemble):
        """Test segmentation fails once dense weights are discarded"""
        hand_ensemble.discard_training_state(keep_dense=False)

        with pytest.raises(MalformedState):
            segmenter.run("hello and weather", min_score=0.0)
