"""Sentence-based text chunking under a token budget.

Token counts are estimated as ceil(len / 3): a cheap proxy, not a
real tokenizer. Output is deterministic for a given input and budget.
"""

import logging
import math
import re
from dataclasses import dataclass

from ragamuffin.constants import CHARS_PER_TOKEN, DEFAULT_MAX_TOKENS

logger = logging.getLogger(__name__)

# Sentence boundary: whitespace preceded by terminal punctuation
SENTENCE_BOUNDARY = re.compile(r"(?<=[.?!])\s+")


def estimate_tokens(text: str) -> int:
    """Estimate token count for text."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


@dataclass
class ChunkerConfig:
    """Configuration for text chunking."""

    max_tokens: int = DEFAULT_MAX_TOKENS


class TextChunker:
    """Split raw text into token-budgeted chunks.

    Sentences are accumulated greedily until the next one would push the
    running estimate over ``max_tokens``. A sentence that alone exceeds
    the budget is split on whitespace into word runs that fit. A single
    word longer than the budget is emitted as-is, since splitting it
    would change the text.
    """

    def __init__(self, config: ChunkerConfig | None = None):
        """Initialize chunker.

        Args:
            config: Chunking configuration.
        """
        self.config = config or ChunkerConfig()

    @property
    def max_tokens(self) -> int:
        return self.config.max_tokens

    def chunk(self, text: str) -> list[str]:
        """Split text into chunks.

        Args:
            text: Raw document text.

        Returns:
            Trimmed chunks in document order. Empty for blank input.
        """
        sentences = [s.strip() for s in SENTENCE_BOUNDARY.split(text.strip())]
        sentences = [s for s in sentences if s]

        chunks: list[str] = []
        buffer: list[str] = []
        buffer_tokens = 0

        for sentence in sentences:
            sentence_tokens = estimate_tokens(sentence)
            if buffer_tokens + sentence_tokens > self.max_tokens:
                if buffer:
                    chunks.extend(self._flush(buffer))
                    buffer = []
                    buffer_tokens = 0
                if sentence_tokens > self.max_tokens:
                    chunks.extend(self._split_words(sentence))
                    continue
            buffer.append(sentence)
            buffer_tokens += sentence_tokens

        if buffer:
            chunks.extend(self._flush(buffer))

        logger.debug(f"Chunked {len(text)} chars into {len(chunks)} chunks")
        return chunks

    def _flush(self, buffer: list[str]) -> list[str]:
        """Join buffered sentences; re-split if the joined text is over budget.

        Per-sentence estimates ignore the joining spaces, so a full buffer
        can land slightly over the budget once joined.
        """
        joined = " ".join(buffer)
        if estimate_tokens(joined) > self.max_tokens:
            return self._split_words(joined)
        return [joined]

    def _split_words(self, text: str) -> list[str]:
        """Greedily pack whitespace-separated words into budgeted runs.

        Run length is measured as joined text, separators included.
        """
        runs: list[str] = []
        words: list[str] = []
        run_chars = 0

        for word in text.split():
            candidate_chars = run_chars + len(word) + (1 if words else 0)
            if words and math.ceil(candidate_chars / CHARS_PER_TOKEN) > self.max_tokens:
                runs.append(" ".join(words))
                words = []
                candidate_chars = len(word)
            words.append(word)
            run_chars = candidate_chars

        if words:
            runs.append(" ".join(words))
        return runs


def chunk_text(text: str, max_tokens: int = DEFAULT_MAX_TOKENS) -> list[str]:
    """Convenience function to chunk text with a given budget."""
    return TextChunker(ChunkerConfig(max_tokens=max_tokens)).chunk(text)
