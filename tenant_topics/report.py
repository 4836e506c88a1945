import numpy as np
import pandas as pd

from tenant_topics.config import N_NAME_TERMS, N_TOP_TERMS

def _descending(values) -> np.ndarray:
    """Indices that sort `values` descending; equal values keep their order."""
    return np.argsort(-np.asarray(values), kind="stable")

def top_terms(model, n: int = N_TOP_TERMS) -> pd.DataFrame:
    """
    The n most probable terms of every topic.

    Ties are broken by vocabulary order.

    Returns:
        pd.DataFrame: One column per topic ('Topic 1'...), one row per rank.
    """
    n = min(n, model.n_terms)
    columns = {
        f"Topic {t + 1}": [str(model.terms[j]) for j in _descending(row)[:n]]
        for t, row in enumerate(model.topic_terms)
    }
    return pd.DataFrame(columns, index=pd.RangeIndex(1, n + 1, name="rank"))

def topic_names(model, n: int = N_NAME_TERMS) -> list:
    """Label every topic with its top-n terms joined by spaces."""
    table = top_terms(model, n)
    return [" ".join(table[col]) for col in table.columns]

def topic_proportions(model, names: list = None) -> pd.Series:
    """Mean probability of each topic over all documents, largest first."""
    names = names or topic_names(model)
    props = model.doc_topics.mean(axis=0)
    order = _descending(props)
    return pd.Series(props[order], index=[names[t] for t in order], name="proportion")

def primary_topics(model) -> np.ndarray:
    """
    Index of the most probable topic of each document.

    Exact ties go to the lowest topic index, e.g. [0.5, 0.5] -> 0.
    """
    return np.argmax(model.doc_topics, axis=1)

def primary_topic_counts(model, names: list = None) -> pd.Series:
    """Number of documents per primary topic (zeros included), largest first."""
    names = names or topic_names(model)
    counts = np.bincount(primary_topics(model), minlength=model.n_topics)
    order = _descending(counts)
    return pd.Series(counts[order], index=[names[t] for t in order], name="documents")

def document_report(model, comments: pd.Series, names: list = None) -> pd.DataFrame:
    """Primary topic of every retained comment, next to the comment itself."""
    if len(comments) != model.n_documents:
        raise ValueError(
            f"{len(comments)} comments for {model.n_documents} modeled documents"
        )
    names = names or topic_names(model)
    primary = primary_topics(model)
    return pd.DataFrame({
        "topic": primary + 1,
        "topic_name": [names[t] for t in primary],
        "comment": comments.to_numpy()
    }, index=comments.index)

def format_proportions(proportions: pd.Series, digits: int = 5) -> list:
    return [f"{round(float(p), digits)} : {name}" for name, p in proportions.items()]

def format_counts(counts: pd.Series) -> list:
    return [f"{int(c)} : {name}" for name, c in counts.items()]

def print_report(model, comments: pd.Series, n_terms: int = N_TOP_TERMS):
    """
    Print the final topic summaries:
      1. Top terms per topic
      2. Topic proportions over the corpus
      3. Primary-topic counts
      4. Primary topic of every comment
    """
    names = topic_names(model)

    print("-- Top terms per topic --")
    print(top_terms(model, n_terms).to_string())

    print("\n-- Topic proportions --")
    print("\n".join(format_proportions(topic_proportions(model, names))))

    print("\n-- Primary topic counts --")
    print("\n".join(format_counts(primary_topic_counts(model, names))))

    print("\n-- Comments by primary topic --")
    print(document_report(model, comments, names).to_string(index=False))
