"""
Lexical similarity helpers shared by launcher plugins.

Strings are compared by the letter pairs (bigrams) of their words using the
Dice coefficient, as described in
http://www.catalysoft.com/articles/StrikeAMatch.html
"""

from collections import Counter
from typing import List, Optional


def letter_pairs(word: str) -> List[str]:
    """Return the overlapping two character substrings of a word."""
    return [word[i : i + 2] for i in range(len(word) - 1)]


def word_letter_pairs(text: str) -> List[str]:
    """Return the letter pairs of every whitespace separated word in text."""
    pairs = []
    for word in text.split():
        pairs.extend(letter_pairs(word))
    return pairs


def string_similarity(first: Optional[str], second: Optional[str]) -> float:
    """
    Calculate the similarity of two strings.

    The result ranges from 0.0 (nothing in common) up to 1.0 (same letter
    pairs), ignoring case. Missing or blank strings always score 0.0.

    Args:
        first: The first string
        second: The second string

    Returns:
        Similarity between 0.0 and 1.0
    """
    if not first or not second or not first.strip() or not second.strip():
        return 0.0

    pairs1 = Counter(word_letter_pairs(first.lower()))
    pairs2 = Counter(word_letter_pairs(second.lower()))

    total = sum(pairs1.values()) + sum(pairs2.values())
    if total == 0:
        return 0.0

    # Counter intersection keeps the smaller count of every pair, so each
    # occurrence is matched at most once.
    intersection = sum((pairs1 & pairs2).values())
    return (2.0 * intersection) / total


def maximum_similarity(query: Optional[str], *candidates: Optional[str]) -> float:
    """Return the highest similarity of query to any of the candidates."""
    return max(
        (string_similarity(query, candidate) for candidate in candidates),
        default=0.0,
    )
