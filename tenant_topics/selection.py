"""
Topic-count selection: fit one model per candidate K and score it with
several model-selection metrics, so the final K can be picked from a plot.

Metrics follow the usual definitions from the topic modeling literature
(Griffiths & Steyvers 2004, Cao et al. 2009, Arun et al. 2010,
Deveaud et al. 2014) plus gensim's c_v coherence.
"""
import logging

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from gensim.corpora import Dictionary
from gensim.models import CoherenceModel
from joblib import Parallel, delayed
from scipy.special import logsumexp

from tenant_topics.config import (
    GIBBS_PARAMS,
    N_JOBS,
    N_TOP_TERMS,
    SEED,
    SELECTION_METRICS,
    SELECTION_PARAMS,
    TOPIC_RANGE,
)
from tenant_topics.errors import InvalidTopicCount
from tenant_topics.topic_model import GibbsSamplingLDA

logger = logging.getLogger(__name__)

MINIMIZE = "minimize"
MAXIMIZE = "maximize"

# -----------------------
# Section: Metrics
# -----------------------

def griffiths2004(model, dtm) -> float:
    """Harmonic-mean estimate of log p(w | K) over the recorded Gibbs trace."""
    ll = model.log_likelihoods
    if len(ll) == 0:
        raise ValueError("Griffiths2004 needs a model with recorded log-likelihoods")
    ll_med = np.median(ll)
    return float(ll_med - logsumexp(ll_med - ll) + np.log(len(ll)))

def _topic_pairs(k: int):
    return np.triu_indices(k, k=1)

def caojuan2009(model, dtm) -> float:
    """Average cosine similarity between topic-term distributions."""
    phi = model.topic_terms
    k = phi.shape[0]
    if k < 2:
        return 0.0
    unit = phi / np.linalg.norm(phi, axis=1, keepdims=True)
    i, j = _topic_pairs(k)
    cosine = (unit[i] * unit[j]).sum(axis=1)
    return float(cosine.sum() / (k * (k - 1) / 2))

def arun2010(model, dtm) -> float:
    """
    Symmetric KL divergence between the singular values of the topic-term
    matrix and the topic mass implied by document lengths.
    """
    lengths = dtm.doc_lengths.astype(float)
    cm1 = np.linalg.svd(model.topic_terms, compute_uv=False)
    cm2 = lengths @ model.doc_topics / np.abs(lengths).max()
    return float(np.sum(cm1 * np.log(cm1 / cm2)) + np.sum(cm2 * np.log(cm2 / cm1)))

def deveaud2014(model, dtm) -> float:
    """Average pairwise divergence between topics."""
    phi = np.where(model.topic_terms > 0, model.topic_terms, np.finfo(float).tiny)
    k = phi.shape[0]
    if k < 2:
        return 0.0
    i, j = _topic_pairs(k)
    log_ratio = np.log(phi[i] / phi[j])
    jsd = 0.5 * (phi[i] * log_ratio).sum(axis=1) - 0.5 * (phi[j] * log_ratio).sum(axis=1)
    return float(jsd.sum() / (k * (k - 1)))

def cv_coherence(model, dtm, top_n: int = N_TOP_TERMS) -> float:
    """gensim c_v coherence of each topic's top terms, averaged over topics."""
    texts = [doc.split() for doc in dtm.documents]
    dictionary = Dictionary(texts)
    topics = [
        [str(model.terms[j]) for j in np.argsort(-row, kind="stable")[:top_n]]
        for row in model.topic_terms
    ]
    return CoherenceModel(
        topics=topics,
        texts=texts,
        dictionary=dictionary,
        coherence="c_v",
        processes=1
    ).get_coherence()

METRICS = {
    "Griffiths2004": (griffiths2004, MAXIMIZE),
    "CaoJuan2009": (caojuan2009, MINIMIZE),
    "Arun2010": (arun2010, MINIMIZE),
    "Deveaud2014": (deveaud2014, MAXIMIZE),
    "CV": (cv_coherence, MAXIMIZE),
}

# -----------------------
# Section: Sweep
# -----------------------

def evaluate_topic_counts(
    dtm,
    topic_range=TOPIC_RANGE,
    metrics=SELECTION_METRICS,
    seed: int = SEED,
    iterations: int = SELECTION_PARAMS["iterations"],
    engine=None,
    n_jobs: int = N_JOBS
) -> pd.DataFrame:
    """
    Fit an independent model for every candidate K and score it.

    Every K is fitted with the same seed, so a K's scores do not depend on
    which other candidates are evaluated or in which order.

    Args:
        dtm (DocumentTermMatrix): Pruned counts.
        topic_range (iterable of int): Candidate topic counts.
        metrics (iterable of str): Names from METRICS.
        seed (int): Random seed for every fit.
        iterations (int): Inference iterations per fit.
        engine (TopicModelEngine): Defaults to a Gibbs sampler with a burn-in.
        n_jobs (int): joblib workers.

    Returns:
        pd.DataFrame: Long table with columns k, metric, value, direction.
    """
    ks = sorted(set(int(k) for k in topic_range))
    if not ks:
        raise InvalidTopicCount("No candidate topic counts given")
    bad = [k for k in ks if k <= 0 or k > dtm.n_terms]
    if bad:
        raise InvalidTopicCount(
            f"Candidate topic counts {bad} outside 1..{dtm.n_terms} (vocabulary size)"
        )
    unknown = [m for m in metrics if m not in METRICS]
    if unknown:
        raise ValueError(f"Unknown metrics {unknown}; choose from {list(METRICS)}")
    if engine is None:
        params = {**GIBBS_PARAMS, "burnin": SELECTION_PARAMS["burnin"],
                  "thin": SELECTION_PARAMS["thin"]}
        if params["burnin"] >= iterations:
            params["burnin"] = 0
        engine = GibbsSamplingLDA(**params)

    def eval_k(k):
        model = engine.fit(dtm.counts, k, seed=seed, iterations=iterations, terms=dtm.terms)
        return [(k, name, METRICS[name][0](model, dtm), METRICS[name][1]) for name in metrics]

    logger.info(f"Evaluating K in {ks[0]}..{ks[-1]} with metrics {list(metrics)}")
    results = Parallel(n_jobs=n_jobs)(delayed(eval_k)(k) for k in ks)
    rows = [row for per_k in results for row in per_k]
    table = pd.DataFrame(rows, columns=["k", "metric", "value", "direction"])
    return table.sort_values(["metric", "k"], kind="stable").reset_index(drop=True)

def normalize_metrics(table: pd.DataFrame) -> pd.DataFrame:
    """Min-max scale each metric's values into [0, 1]; constant metrics become 0."""
    def scale(values):
        spread = values.max() - values.min()
        if not np.isfinite(spread) or spread == 0:
            return values * 0.0
        return (values - values.min()) / spread

    out = table.copy()
    out["value"] = table.groupby("metric")["value"].transform(scale)
    return out

def suggest_topic_count(table: pd.DataFrame, weights: dict = None) -> int:
    """
    Automatic pick of K from the sweep.

    Score(K) = weighted mean over metrics of the normalized value, where
    metrics to minimize contribute (1 - value). The highest score wins and
    ties go to the smaller K.

    Args:
        table (pd.DataFrame): Output of evaluate_topic_counts.
        weights (dict): Metric name -> weight (default 1 for each).

    Returns:
        int: Suggested topic count.
    """
    norm = normalize_metrics(table)
    goodness = np.where(norm["direction"] == MINIMIZE, 1.0 - norm["value"], norm["value"])
    weights = weights or {}
    w = norm["metric"].map(lambda m: weights.get(m, 1.0)).astype(float)
    scored = pd.DataFrame({"k": norm["k"], "weighted": goodness * w, "weight": w})
    scored = scored[np.isfinite(scored["weighted"])]
    per_k = scored.groupby("k").sum()
    score = (per_k["weighted"] / per_k["weight"]).sort_index()
    return int(score.idxmax())

# -----------------------
# Section: Reporting
# -----------------------

def plot_topic_counts(table: pd.DataFrame, path: str = None):
    """
    Plot normalized metrics against K, metrics to minimize on the left and
    metrics to maximize on the right. Saved to `path` if given, else shown.
    """
    norm = normalize_metrics(table)
    fig, axes = plt.subplots(1, 2, figsize=(12, 5), sharex=True)
    for ax, direction in zip(axes, (MINIMIZE, MAXIMIZE)):
        part = norm[norm["direction"] == direction]
        for metric, group in part.groupby("metric"):
            ax.plot(group["k"], group["value"], marker="o", label=metric)
        ax.set_title(f"{direction.capitalize()} metrics")
        ax.set_xlabel("number of topics")
        if len(part):
            ax.legend()
    axes[0].set_ylabel("normalized value")
    fig.tight_layout()
    if path:
        fig.savefig(path)
        plt.close(fig)
        logger.info(f"Saved topic-count plot to {path}")
    else:
        plt.show()
    return fig
