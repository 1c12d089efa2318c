from typing import Literal

from pydantic import BaseModel


class SentimentResult(BaseModel):
    score: float = 0.0
    label: Literal["positive", "negative", "neutral"] = "neutral"


class TextAnalysis(BaseModel):
    """Summary statistics of a piece of text."""

    token_count: int = 0
    unique_tokens: int = 0
    key_terms: list[str] = []
    readability: float = 0.0
    sentiment: SentimentResult = SentimentResult()
