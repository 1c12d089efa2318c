"""Tokenization, keyword extraction, readability and sentiment scoring."""

import re
from collections import Counter
from functools import lru_cache

from afinn import Afinn
from nltk.stem import PorterStemmer
from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

from contentlens.text_analysis.lexicon import NEGATORS
from contentlens.text_analysis.schemas import SentimentResult, TextAnalysis

_NON_WORD = re.compile(r"\W+")
_WORD = re.compile(r"\w+")
_SENTIMENT_WORD = re.compile(r"[a-z0-9]+(?:'[a-z]+)?")
_SENTENCE_END = re.compile(r"[.!?]+")
_VOWELS = "aeiouy"

# A negator only affects a scored word this many tokens ahead
_NEGATION_WINDOW = 3

_stemmer = PorterStemmer()
_afinn = Afinn(language="en")


@lru_cache(maxsize=65536)
def _stem(token: str) -> str:
    return _stemmer.stem(token)


@lru_cache(maxsize=65536)
def _valence(token: str) -> float:
    return _afinn.score(token)


def count_syllables(word: str) -> int:
    """Approximate the syllable count of a word.

    Counts groups of consecutive vowels, drops one for a trailing silent "e"
    and never returns less than one.
    """
    word = word.lower()
    if len(word) <= 3:
        return 1

    count = 0
    previous_was_vowel = False
    for char in word:
        is_vowel = char in _VOWELS
        if is_vowel and not previous_was_vowel:
            count += 1
        previous_was_vowel = is_vowel

    if word.endswith("e"):
        count -= 1

    return max(1, count)


class TextAnalyzer:
    """Pure text analysis helpers shared by similarity scoring and the search fallback."""

    def __init__(
        self,
        stop_words: frozenset[str] = ENGLISH_STOP_WORDS,
        min_token_length: int = 3,
    ) -> None:
        """Initialize the analyzer.

        Args:
            stop_words: Lowercase words dropped during tokenization
            min_token_length: Tokens shorter than this are dropped
        """
        self.stop_words = stop_words
        self.min_token_length = min_token_length

    def tokenize(self, text: str | None) -> list[str]:
        """Lowercase, split on non-word characters and drop stop-words and short tokens."""
        if not text:
            return []
        return [
            token
            for token in _NON_WORD.split(text.lower())
            if len(token) >= self.min_token_length and token not in self.stop_words
        ]

    def stem(self, token: str) -> str:
        return _stem(token)

    def stemmed_tokens(self, text: str | None) -> list[str]:
        return [_stem(token) for token in self.tokenize(text)]

    def key_terms(self, text: str | None, n: int = 10) -> list[str]:
        """Return the ``n`` most frequent stemmed tokens, ties in order of first occurrence."""
        if n <= 0:
            return []
        counts = Counter(self.stemmed_tokens(text))
        return [term for term, _ in counts.most_common(n)]

    def readability(self, text: str | None) -> float:
        """Flesch Reading Ease approximation clamped to [0, 100]."""
        if not text:
            return 0.0

        words = _WORD.findall(text)
        if not words:
            return 0.0

        sentences = max(1, len([s for s in _SENTENCE_END.split(text) if s.strip()]))
        syllables = sum(count_syllables(word) for word in words)

        score = 206.835 - 1.015 * (len(words) / sentences) - 84.6 * (syllables / len(words))
        return max(0.0, min(100.0, score))

    def sentiment(self, text: str | None) -> SentimentResult:
        """Score sentiment with AFINN word valences, flipping words that follow a negator."""
        if not text:
            return SentimentResult()

        tokens = [t.replace("'", "") for t in _SENTIMENT_WORD.findall(text.lower())]
        if not tokens:
            return SentimentResult()

        total = 0.0
        negation_left = 0
        for token in tokens:
            if token in NEGATORS:
                negation_left = _NEGATION_WINDOW
                continue

            value = _valence(token) or _valence(_stem(token))

            if value and negation_left:
                value = -value
                negation_left = 0
            elif negation_left:
                negation_left -= 1

            total += value

        score = total / len(tokens)
        if score > 0.1:
            label = "positive"
        elif score < -0.1:
            label = "negative"
        else:
            label = "neutral"
        return SentimentResult(score=score, label=label)

    def analyze(self, text: str | None) -> TextAnalysis:
        if not text:
            return TextAnalysis()

        words = [w.lower() for w in _WORD.findall(text)]
        return TextAnalysis(
            token_count=len(words),
            unique_tokens=len(set(words)),
            key_terms=self.key_terms(text),
            readability=self.readability(text),
            sentiment=self.sentiment(text),
        )
