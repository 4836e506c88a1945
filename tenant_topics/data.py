import logging
from collections import Counter

import pandas as pd
import requests

from tenant_topics.config import DATA_PATH, TEXT_COLUMN, STOPWORDS_SOURCE
from tenant_topics.errors import ResourceNotFound

logger = logging.getLogger(__name__)

def load_comments(path: str = DATA_PATH, column: str = TEXT_COLUMN) -> pd.Series:
    """
    Load the raw CSV file and return the comment column.

    The row index of the file is kept as the document identifier, so the
    order and identity of comments survive every later filtering step.

    Args:
        path (str): File path to the CSV dataset (default from config).
        column (str): Name of the column holding the free-text comments.

    Returns:
        pd.Series: Comment strings indexed by row; missing values become "".

    Raises:
        ResourceNotFound: If the file is missing, unreadable or lacks the column.
    """
    try:
        df = pd.read_csv(path)
    except FileNotFoundError as exc:
        raise ResourceNotFound(f"Input file not found: {path}") from exc
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise ResourceNotFound(f"Input file is not a readable CSV: {path} ({exc})") from exc
    except OSError as exc:
        raise ResourceNotFound(f"Could not read input file {path}: {exc}") from exc

    if column not in df.columns:
        raise ResourceNotFound(
            f"Column '{column}' not found in {path}; available: {list(df.columns)}"
        )
    comments = df[column].fillna("").astype(str)
    logger.info(f"Loaded {len(comments)} comments from {path}")
    return comments

def _read_stopword_lines(source: str) -> str:
    if source.startswith(("http://", "https://")):
        try:
            response = requests.get(source, timeout=30)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ResourceNotFound(f"Could not fetch stopword list from {source}: {exc}") from exc
        response.encoding = "utf-8"
        return response.text
    try:
        with open(source, "r", encoding="utf-8") as f:
            return f.read()
    except OSError as exc:
        raise ResourceNotFound(f"Could not read stopword list {source}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ResourceNotFound(f"Stopword list {source} is not UTF-8 encoded") from exc

def load_stopwords(source: str = STOPWORDS_SOURCE) -> frozenset:
    """
    Load a newline-delimited stopword list from a local path or a URL.

    Blank lines and lines starting with '#' are skipped. Passing None falls
    back to the NLTK English stopword corpus.

    Args:
        source (str): File path or http(s) URL (default from config).

    Returns:
        frozenset: Lower-cased stopwords.

    Raises:
        ResourceNotFound: If the list cannot be read or contains no words.
    """
    if source is None:
        from nltk.corpus import stopwords
        try:
            words = stopwords.words("english")
        except LookupError as exc:
            raise ResourceNotFound("NLTK stopword corpus is not installed") from exc
        return frozenset(words)

    text = _read_stopword_lines(source)
    words = frozenset(
        line.strip().lower()
        for line in text.splitlines()
        if line.strip() and not line.strip().startswith("#")
    )
    if not words:
        raise ResourceNotFound(f"Stopword list {source} is empty")
    logger.info(f"Loaded {len(words)} stopwords from {source}")
    return words

def token_statistics(series: pd.Series) -> (pd.DataFrame, pd.DataFrame):
    """
    Whitespace-token summary of a corpus, counted in a single pass.

    Used to log the corpus before and after cleaning. An empty Series
    reports an average length of 0 instead of dividing by zero.

    Returns:
        tuple: one-row DataFrame (vocab_size, avg_tokens_per_doc) and the
        20 most common tokens with their counts.
    """
    counts = Counter()
    n_tokens = 0
    for text in series:
        tokens = text.split()
        counts.update(tokens)
        n_tokens += len(tokens)

    avg_len = n_tokens / len(series) if len(series) else 0.0
    df_top = pd.DataFrame(counts.most_common(20), columns=["token", "count"])
    metrics = pd.DataFrame({
        "vocab_size": [len(counts)],
        "avg_tokens_per_doc": [avg_len]
    })
    return metrics, df_top
