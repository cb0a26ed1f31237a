# intentnet/encoding/tokenizer.py
"""
Utterance Tokenizer

Normalization and word tokenization for short conversational text.

Key Features:
- Lowercasing and diacritic stripping ("Qué" -> "que")
- Splitting on anything that is not a letter or a digit
- Pluggable processor so callers can inject their own stemmer
"""

import re
import unicodedata
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger


@dataclass
class TokenizerConfig:
    """
    Configuration for the tokenizer.

    Attributes:
        lowercase: Convert to lowercase
        strip_accents: Remove diacritics
        min_token_length: Drop tokens shorter than this
    """

    lowercase: bool = True
    strip_accents: bool = True
    min_token_length: int = 1


class Tokenizer:
    """
    Tokenizer for utterances fed to the bag-of-words encoder.

    Example:
        >>> tokenizer = Tokenizer()
        >>> tokenizer.tokenize("Who are you, when is your birthday?")
        ['who', 'are', 'you', 'when', 'is', 'your', 'birthday']
    """

    def __init__(
        self,
        config: TokenizerConfig | None = None,
        processor: Callable[[str], list[str]] | None = None,
    ):
        """
        Initialize tokenizer.

        Args:
            config: Tokenizer configuration
            processor: Optional replacement for the whole pipeline
        """
        self.config = config or TokenizerConfig()
        self.processor = processor

        self.split_pattern = re.compile(r"[^\w]+|_+")

        logger.debug(f"Tokenizer initialized (custom processor: {processor is not None})")

    def normalize(self, text: str) -> str:
        """
        Normalize text before splitting.

        Args:
            text: Raw text

        Returns:
            Normalized text
        """
        if not text:
            return ""

        if self.config.lowercase:
            text = text.lower()

        if self.config.strip_accents:
            text = "".join(
                char
                for char in unicodedata.normalize("NFD", text)
                if unicodedata.category(char) != "Mn"
            )

        return text

    def tokenize(self, text: str) -> list[str]:
        """
        Tokenize text.

        Args:
            text: Input text

        Returns:
            Tokens in reading order
        """
        if self.processor is not None:
            return list(self.processor(text))

        normalized = self.normalize(text)
        return [
            token
            for token in self.split_pattern.split(normalized)
            if len(token) >= self.config.min_token_length and token
        ]

    def __call__(self, text: str) -> list[str]:
        return self.tokenize(text)
