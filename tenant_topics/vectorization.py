import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy import sparse
from sklearn.feature_extraction.text import CountVectorizer, TfidfTransformer

from tenant_topics.config import MIN_FREQUENCY
from tenant_topics.errors import EmptyCorpusAfterPruning, EmptyVocabulary

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class DocumentTermMatrix:
    """
    Sparse document-term counts plus the texts its rows belong to.

    Row i of `counts` is document `documents.iloc[i]` (cleaned) and
    `comments.iloc[i]` (raw). Columns follow `terms`, sorted alphabetically.
    """
    counts: sparse.csr_matrix
    terms: np.ndarray
    documents: pd.Series
    comments: pd.Series

    @property
    def n_documents(self) -> int:
        return self.counts.shape[0]

    @property
    def n_terms(self) -> int:
        return self.counts.shape[1]

    @property
    def doc_lengths(self) -> np.ndarray:
        return np.asarray(self.counts.sum(axis=1)).ravel()

def build_dtm(
    documents: pd.Series,
    comments: pd.Series = None,
    min_frequency: int = MIN_FREQUENCY
) -> DocumentTermMatrix:
    """
    Convert cleaned documents into a document-term count matrix.

    Terms are whitespace tokens; a term is kept when it occurs in at least
    `min_frequency` distinct documents. Documents left without any kept term
    are dropped afterwards, together with their comments.

    Args:
        documents (pd.Series): Preprocessed documents.
        comments (pd.Series): Raw comments aligned with `documents`
            (defaults to the documents themselves).
        min_frequency (int): Minimum global document frequency.

    Returns:
        DocumentTermMatrix: Pruned matrix without all-zero rows.

    Raises:
        EmptyVocabulary: If no term survives pruning.
        EmptyCorpusAfterPruning: If no document keeps a term.
    """
    if comments is None:
        comments = documents
    if len(comments) != len(documents):
        raise ValueError("documents and comments must have the same length")

    vec = CountVectorizer(
        tokenizer=str.split,
        token_pattern=None,
        lowercase=False,
        min_df=min_frequency
    )
    try:
        X = vec.fit_transform(documents.tolist())
    except ValueError as exc:
        # sklearn signals both "empty vocabulary" and "no terms remain" this way
        raise EmptyVocabulary(
            f"No term occurs in at least {min_frequency} documents"
        ) from exc

    dtm = DocumentTermMatrix(
        counts=X.tocsr(),
        terms=vec.get_feature_names_out(),
        documents=documents,
        comments=comments
    )
    logger.info(f"Document-term matrix: {dtm.n_documents} docs x {dtm.n_terms} terms "
                f"(min frequency {min_frequency})")
    return drop_empty_documents(dtm)

def drop_empty_documents(dtm: DocumentTermMatrix) -> DocumentTermMatrix:
    """
    Remove all-zero rows and the comments at the same positions.

    Returns:
        DocumentTermMatrix: New matrix where every row has a nonzero entry.

    Raises:
        EmptyCorpusAfterPruning: If every row is empty.
    """
    keep = dtm.counts.getnnz(axis=1) > 0
    if not keep.any():
        raise EmptyCorpusAfterPruning("All documents are empty after vocabulary pruning")
    dropped = int((~keep).sum())
    if dropped:
        logger.info(f"Dropping {dropped} empty documents")
    return DocumentTermMatrix(
        counts=dtm.counts[keep],
        terms=dtm.terms,
        documents=dtm.documents[keep],
        comments=dtm.comments[keep]
    )

def tfidf_weight(dtm: DocumentTermMatrix) -> sparse.csr_matrix:
    """
    TF-IDF weighted variant of the counts: smoothed inverse document
    frequency, rows scaled to unit L2 norm (which also removes document length).
    """
    transformer = TfidfTransformer(norm="l2", smooth_idf=True)
    return transformer.fit_transform(dtm.counts).tocsr()

def term_frequencies(dtm: DocumentTermMatrix, n: int = 20) -> pd.Series:
    """Most frequent terms over the whole corpus."""
    totals = np.asarray(dtm.counts.sum(axis=0)).ravel()
    freq = pd.Series(totals, index=dtm.terms)
    return freq.sort_values(ascending=False, kind="stable").head(n)

def top_tfidf_terms(dtm: DocumentTermMatrix, n: int = 20) -> pd.Series:
    """Terms with the highest mean TF-IDF weight per document, largest first."""
    weights = np.asarray(tfidf_weight(dtm).mean(axis=0)).ravel()
    order = np.argsort(-weights, kind="stable")[:n]
    return pd.Series(weights[order], index=dtm.terms[order], name="tfidf")
