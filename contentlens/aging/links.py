import random
from typing import Protocol


class LinkChecker(Protocol):
    def broken_links(self, urls: list[str]) -> list[str]:
        """Return the subset of URLs that appear to be broken."""
        ...


class SampledLinkChecker(LinkChecker):
    """Stand-in link checker that flags each URL as broken with a fixed probability.

    No request is ever made. Pass a seeded ``random.Random`` for reproducible results.
    """

    def __init__(self, sample_rate: float = 0.1, rng: random.Random | None = None) -> None:
        if not 0.0 <= sample_rate <= 1.0:
            raise ValueError("sample_rate must be between 0 and 1")
        self.sample_rate = sample_rate
        self.rng = rng or random.Random()

    def broken_links(self, urls: list[str]) -> list[str]:
        return [url for url in urls if self.rng.random() < self.sample_rate]
