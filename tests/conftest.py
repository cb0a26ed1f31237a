# tests/conftest.py
"""
Pytest configuration and fixtures for intentnet tests.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from intentnet.config.settings import resolve_settings
from intentnet.encoding.encoder import Encoder
from intentnet.ml_engine.models.perceptron import PerceptronEnsemble
from intentnet.neural import NeuralClassifier

# Small corpus with mostly disjoint vocabulary per intent
TOY_CORPUS = [
    {
        "intent": "greet",
        "utterances": ["hello there", "hi friend", "good morning", "hey hello"],
        "tests": ["hello friend", "good morning friend"],
    },
    {
        "intent": "bye",
        "utterances": ["goodbye", "see you later", "bye bye", "farewell"],
        "tests": ["goodbye see you", "farewell bye"],
    },
    {
        "intent": "weather",
        "utterances": [
            "what is the weather",
            "is it raining",
            "weather forecast today",
            "will it rain",
        ],
        "tests": ["weather today", "is it raining today"],
    },
    {
        "intent": "birthday",
        "utterances": ["when is your birthday", "when were you born", "birthday date"],
        "tests": ["your birthday date"],
    },
]

# Three overlapping smalltalk intents for multi-intent scenarios
SMALLTALK_CORPUS = [
    {
        "intent": "agent.acquaintance",
        "utterances": ["who are you", "tell me about yourself", "what are you"],
    },
    {
        "intent": "agent.birthday",
        "utterances": [
            "when is your birthday",
            "when were you born",
            "what is your date of birth",
        ],
    },
    {
        "intent": "agent.boss",
        "utterances": ["who is your boss", "who do you work for", "who is your master"],
    },
]

# Options that keep training fast and deterministic in length
FAST_OPTIONS = {"iterations": 300}


def pytest_configure(config):
    """Configure pytest markers"""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


def pytest_collection_modifyitems(config, items):
    """Modify test collection based on markers"""
    # Skip slow tests by default unless explicitly requested
    if not config.getoption("-m"):
        skip_slow = pytest.mark.skip(reason="use -m slow to run slow tests")
        for item in items:
            if "slow" in item.keywords:
                item.add_marker(skip_slow)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def toy_corpus():
    """Return the toy corpus as a list of items"""
    return [dict(item) for item in TOY_CORPUS]


@pytest.fixture
def wrapped_corpus(toy_corpus):
    """Return the toy corpus in its {data: [...]} wrapper"""
    return {"data": toy_corpus}


@pytest.fixture
def fast_settings():
    """Return resolved settings for short training runs"""
    return resolve_settings(FAST_OPTIONS)


@pytest.fixture(scope="module")
def trained_net():
    """Return a classifier trained on the toy corpus"""
    net = NeuralClassifier(FAST_OPTIONS)
    net.train({"data": TOY_CORPUS})
    return net


@pytest.fixture(scope="module")
def trained_multi_net():
    """Return a multi-intent classifier trained on the toy corpus"""
    net = NeuralClassifier(FAST_OPTIONS, multi=True)
    net.train({"data": TOY_CORPUS})
    return net


@pytest.fixture
def hand_encoder():
    """Return an encoder with a fixed three-word vocabulary"""
    encoder = Encoder(use_cache=False)
    for intent in ("greet", "weather"):
        encoder.add_intent(intent)
    for feature in ("hello", "weather", "and"):
        encoder.add_feature(feature)
    return encoder


@pytest.fixture
def hand_ensemble():
    """
    Return an ensemble with known dense weights over [hello, weather, and]

    "hello" pushes greet up and weather down, "weather" the opposite,
    "and" is neutral.
    """
    ensemble = PerceptronEnsemble().initialize(["greet", "weather"], num_features=3)
    ensemble.perceptrons[0].weights[:] = np.array([20.0, -10.0, 0.0], dtype=np.float32)
    ensemble.perceptrons[1].weights[:] = np.array([-10.0, 20.0, 0.0], dtype=np.float32)
    ensemble.to_sparse_index()
    return ensemble


@pytest.fixture(scope="module")
def default_multi_net():
    """Return a multi-intent classifier trained with default settings"""
    net = NeuralClassifier(multi=True)
    net.train(SMALLTALK_CORPUS)
    return net
