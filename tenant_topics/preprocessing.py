import re
from functools import lru_cache

import pandas as pd
from nltk.stem.snowball import SnowballStemmer

from tenant_topics.config import LANGUAGE

# Any punctuation or symbol (underscore included), except a dash with a word character on both sides
_PUNCT = re.compile(r"(?!(?<=\w)-(?=\w))(?:[^\w\s]|_)")
_DIGITS = re.compile(r"\d+")
_SPACES = re.compile(r"\s+")

@lru_cache(maxsize=8)
def _stopword_pattern(stopwords: frozenset) -> re.Pattern:
    """
    Build one regex matching any stopword as a whole token.
    Longer words come first so 'it's' wins over 'it'.
    """
    words = sorted(stopwords, key=lambda w: (-len(w), w))
    alternation = "|".join(re.escape(w) for w in words)
    return re.compile(r"(?<!\w)(?:" + alternation + r")(?!\w)")

def lowercase(text: str) -> str:
    return text.lower()

def remove_stopwords(text: str, stopwords: frozenset) -> str:
    """Delete every token exactly matching a stopword."""
    if not stopwords:
        return text
    if not isinstance(stopwords, frozenset):
        stopwords = frozenset(stopwords)
    return _stopword_pattern(stopwords).sub("", text)

def remove_punctuation(text: str) -> str:
    """Strip punctuation but keep intra-word dashes ('rent-free')."""
    return _PUNCT.sub("", text)

def remove_numbers(text: str) -> str:
    return _DIGITS.sub("", text)

def stem(text: str, stemmer: SnowballStemmer) -> str:
    return " ".join(stemmer.stem(token) for token in text.split())

def strip_whitespace(text: str) -> str:
    return _SPACES.sub(" ", text).strip()

def clean_text(text: str, stopwords: frozenset, stemmer: SnowballStemmer = None) -> str:
    """
    Clean and normalize a single comment:
      1. Lowercase
      2. Remove stopwords
      3. Remove punctuation, keeping intra-word dashes
      4. Remove digits
      5. Stem every token (Snowball English)
      6. Collapse whitespace

    The order matters: stopwords are matched before punctuation is removed,
    so "don't" is caught by a stopword list containing it.

    Args:
        text (str): Raw comment.
        stopwords (frozenset): Lower-cased stopwords.
        stemmer (SnowballStemmer): Reused stemmer; created if omitted.

    Returns:
        str: Cleaned, stemmed text joined by single spaces.
    """
    if stemmer is None:
        stemmer = SnowballStemmer(LANGUAGE)
    text = lowercase(text)
    text = remove_stopwords(text, stopwords)
    text = remove_punctuation(text)
    text = remove_numbers(text)
    text = stem(text, stemmer)
    return strip_whitespace(text)

def preprocess_series(series: pd.Series, stopwords: frozenset, language: str = LANGUAGE) -> pd.Series:
    """
    Apply clean_text to every element of the Series.

    Args:
        series (pd.Series): Series of raw comments.
        stopwords (frozenset): Stopwords to remove.
        language (str): Stemmer language.

    Returns:
        pd.Series: Cleaned comments with the same index and order.
    """
    stemmer = SnowballStemmer(language)
    stopwords = frozenset(stopwords)
    return series.apply(clean_text, stopwords=stopwords, stemmer=stemmer)
