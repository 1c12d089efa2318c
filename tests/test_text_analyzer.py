"""Tests for the text analyzer."""

import pytest

from contentlens.text_analysis.analyzer import TextAnalyzer, count_syllables


@pytest.fixture
def analyzer() -> TextAnalyzer:
    return TextAnalyzer()


def test_tokenize_drops_stop_words_and_short_tokens(analyzer: TextAnalyzer) -> None:
    tokens = analyzer.tokenize("The cat and an AI model, built for the Web!")

    assert tokens == ["cat", "model", "built", "web"]


def test_tokenize_empty_text(analyzer: TextAnalyzer) -> None:
    assert analyzer.tokenize("") == []
    assert analyzer.tokenize(None) == []


def test_stemmed_tokens_share_stems(analyzer: TextAnalyzer) -> None:
    assert analyzer.stemmed_tokens("learning learned learns") == ["learn", "learn", "learn"]


def test_key_terms_are_most_frequent_first(analyzer: TextAnalyzer) -> None:
    text = "Graphs connect nodes. Graph algorithms traverse graphs and visit nodes once."

    assert analyzer.key_terms(text, n=2) == ["graph", "node"]
    assert analyzer.key_terms(text, n=0) == []


@pytest.mark.parametrize(
    "word, expected",
    [("cat", 1), ("table", 1), ("banana", 3), ("syllable", 2), ("queue", 1)],
)
def test_count_syllables(word: str, expected: int) -> None:
    assert count_syllables(word) == expected


def test_readability_is_clamped(analyzer: TextAnalyzer) -> None:
    simple = analyzer.readability("The cat sat. The dog ran.")
    dense = analyzer.readability(
        "Incomprehensibilities notwithstanding, institutionalization of "
        "internationalization methodologies necessitates extraordinarily "
        "comprehensive organizational reconceptualization."
    )

    assert analyzer.readability("") == 0.0
    assert 0.0 <= dense < simple <= 100.0


def test_sentiment_labels(analyzer: TextAnalyzer) -> None:
    assert analyzer.sentiment("A great and wonderful tool").label == "positive"
    assert analyzer.sentiment("A terrible and awful tool").label == "negative"
    assert analyzer.sentiment("").label == "neutral"


def test_sentiment_negation_flips_score(analyzer: TextAnalyzer) -> None:
    plain = analyzer.sentiment("This tool is good")
    negated = analyzer.sentiment("This tool is not good")

    assert plain.score > 0
    assert negated.score < 0


def test_analyze_summarizes_text(analyzer: TextAnalyzer) -> None:
    analysis = analyzer.analyze("Models learn. Models improve.")

    assert analysis.token_count == 4
    assert analysis.unique_tokens == 3
    assert analysis.key_terms[0] == "model"


def test_sentiment_covers_full_afinn_word_list(analyzer: TextAnalyzer) -> None:
    assert analyzer.sentiment("The launch was a disaster").label == "negative"
    assert analyzer.sentiment("An outstanding survey").label == "positive"
