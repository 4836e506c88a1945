"""
Topic model fitting.

The pipeline only talks to `TopicModelEngine.fit`, which turns a document-term
count matrix into a `TopicModel` holding two row-stochastic matrices:

- ``topic_terms`` (K x V): each topic's distribution over the vocabulary
- ``doc_topics`` (D x K): each document's distribution over topics

`GibbsSamplingLDA` is the default engine (collapsed Gibbs sampling);
`VariationalLDA` wraps scikit-learn's online variational Bayes.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import numpy as np
from scipy import sparse
from scipy.special import gammaln
from sklearn.decomposition import LatentDirichletAllocation

from tenant_topics.config import GIBBS_PARAMS, ITERATIONS, SEED
from tenant_topics.errors import FitError, InvalidTopicCount

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class TopicModel:
    topic_terms: np.ndarray
    doc_topics: np.ndarray
    terms: np.ndarray
    seed: int
    iterations: int
    log_likelihoods: np.ndarray = field(default_factory=lambda: np.empty(0))

    @property
    def n_topics(self) -> int:
        return self.topic_terms.shape[0]

    @property
    def n_terms(self) -> int:
        return self.topic_terms.shape[1]

    @property
    def n_documents(self) -> int:
        return self.doc_topics.shape[0]

class TopicModelEngine(ABC):
    """Capability to fit an LDA-style model on a count matrix."""

    def fit(self, matrix, k: int, seed: int = SEED, iterations: int = ITERATIONS,
            terms=None) -> TopicModel:
        """
        Fit a model with `k` topics.

        Args:
            matrix: Sparse or dense (documents x terms) count matrix.
            k (int): Number of topics.
            seed (int): Random seed; equal inputs give equal outputs.
            iterations (int): Inference iterations.
            terms: Vocabulary labels for the columns (defaults to indices).

        Raises:
            FitError: If the matrix has no rows, no columns or no tokens.
            InvalidTopicCount: If k <= 0 or k exceeds the vocabulary size.
        """
        counts = sparse.csr_matrix(matrix)
        n_docs, n_terms = counts.shape
        if n_docs == 0 or n_terms == 0:
            raise FitError(f"Cannot fit a topic model on a {n_docs} x {n_terms} matrix")
        if counts.sum() <= 0:
            raise FitError("Document-term matrix contains no tokens")
        if k <= 0 or k > n_terms:
            raise InvalidTopicCount(
                f"Topic count must be between 1 and the vocabulary size ({n_terms}), got {k}"
            )
        if iterations <= 0:
            raise FitError(f"Iteration count must be positive, got {iterations}")
        if terms is None:
            terms = np.arange(n_terms).astype(str)

        return self._fit(counts, int(k), int(seed), int(iterations), np.asarray(terms))

    @abstractmethod
    def _fit(self, counts: sparse.csr_matrix, k: int, seed: int, iterations: int,
             terms: np.ndarray) -> TopicModel:
        ...

class GibbsSamplingLDA(TopicModelEngine):
    """
    LDA fitted by collapsed Gibbs sampling (Griffiths & Steyvers 2004).

    Args:
        alpha (float): Symmetric doc-topic prior; None uses 50 / k.
        beta (float): Symmetric topic-term prior.
        burnin (int): Iterations before log-likelihoods are recorded.
        thin (int): Record every `thin`-th iteration after burn-in.
    """

    def __init__(self, alpha=None, beta=0.1, burnin=0, thin=1):
        if beta <= 0 or (alpha is not None and alpha <= 0):
            raise ValueError("Dirichlet priors must be positive")
        if thin < 1 or burnin < 0:
            raise ValueError("burnin must be >= 0 and thin >= 1")
        self.alpha = alpha
        self.beta = beta
        self.burnin = burnin
        self.thin = thin

    def _fit(self, counts, k, seed, iterations, terms):
        alpha = 50.0 / k if self.alpha is None else float(self.alpha)
        beta = float(self.beta)
        n_docs, n_terms = counts.shape

        # One entry per token, documents in row order, terms in column order
        coo = counts.tocoo()
        order = np.lexsort((coo.col, coo.row))
        reps = coo.data[order].astype(np.int64)
        docs = np.repeat(coo.row[order], reps)
        words = np.repeat(coo.col[order], reps)
        n_tokens = len(words)

        rng = np.random.RandomState(seed)
        z = rng.randint(k, size=n_tokens)
        n_wk = np.zeros((n_terms, k), dtype=np.int64)
        n_dk = np.zeros((n_docs, k), dtype=np.int64)
        np.add.at(n_wk, (words, z), 1)
        np.add.at(n_dk, (docs, z), 1)
        n_k = n_wk.sum(axis=0)
        v_beta = n_terms * beta

        logger.info(f"Gibbs sampling: K={k}, alpha={alpha:.3f}, beta={beta}, "
                    f"{n_tokens} tokens, {iterations} iterations")
        log_liks = []
        for it in range(iterations):
            draws = rng.random_sample(n_tokens)
            for i in range(n_tokens):
                w, d, t = words[i], docs[i], z[i]
                n_wk[w, t] -= 1
                n_dk[d, t] -= 1
                n_k[t] -= 1

                p = (n_wk[w] + beta) / (n_k + v_beta) * (n_dk[d] + alpha)
                cdf = np.cumsum(p)
                t = min(int(np.searchsorted(cdf, draws[i] * cdf[-1], side="right")), k - 1)

                z[i] = t
                n_wk[w, t] += 1
                n_dk[d, t] += 1
                n_k[t] += 1

            if it >= self.burnin and (it - self.burnin) % self.thin == 0:
                log_liks.append(_log_likelihood(n_wk, n_k, beta))

        phi = (n_wk.T + beta) / (n_k[:, None] + v_beta)
        theta = (n_dk + alpha) / (n_dk.sum(axis=1)[:, None] + k * alpha)
        return TopicModel(
            topic_terms=phi,
            doc_topics=theta,
            terms=terms,
            seed=seed,
            iterations=iterations,
            log_likelihoods=np.asarray(log_liks, dtype=float)
        )

def _log_likelihood(n_wk: np.ndarray, n_k: np.ndarray, beta: float) -> float:
    """log p(w | z) of the current assignment, topic-term side only."""
    n_terms, k = n_wk.shape
    return float(
        k * (gammaln(n_terms * beta) - n_terms * gammaln(beta))
        + gammaln(n_wk + beta).sum()
        - gammaln(n_k + n_terms * beta).sum()
    )

class VariationalLDA(TopicModelEngine):
    """scikit-learn's LatentDirichletAllocation behind the engine interface."""

    def __init__(self, **params):
        self.params = params

    def _fit(self, counts, k, seed, iterations, terms):
        lda = LatentDirichletAllocation(
            n_components=k, random_state=seed, max_iter=iterations, **self.params
        )
        doc_topics = lda.fit_transform(counts)
        topic_terms = lda.components_ / lda.components_.sum(axis=1, keepdims=True)
        doc_topics = doc_topics / doc_topics.sum(axis=1, keepdims=True)
        return TopicModel(
            topic_terms=topic_terms,
            doc_topics=doc_topics,
            terms=terms,
            seed=seed,
            iterations=iterations
        )

def fit_topic_model(dtm, k: int, seed: int = SEED, iterations: int = ITERATIONS,
                    engine: TopicModelEngine = None) -> TopicModel:
    """Fit the final model on a DocumentTermMatrix (Gibbs sampling by default)."""
    if engine is None:
        engine = GibbsSamplingLDA(**GIBBS_PARAMS)
    return engine.fit(dtm.counts, k, seed=seed, iterations=iterations, terms=dtm.terms)
